"""
Lecture Search - Keyword matching of doubts to catalog lectures.

Used live by the answer service when the AI lecture finder has no pick, and
by the conversation manager to recompute suggestions on history reload.
"""

import re
import logging
from typing import Dict, List, Optional

from .lecture_catalog import LectureCatalog, CatalogChapter, get_lecture_catalog
from ..models import LectureSuggestion, ChapterInfo

logger = logging.getLogger(__name__)

STOP_WORDS = {
    'what', 'is', 'the', 'a', 'an', 'how', 'to', 'do', 'can', 'you', 'explain',
    'tell', 'me', 'about', 'please', 'help', 'with', 'in', 'of', 'for', 'and',
    'or', 'but', 'this', 'that', 'these', 'those', 'i', 'my', 'we', 'our',
    'concept', 'concepts', 'topic', 'topics', 'chapter', 'unit', 'important',
    'formula', 'work', 'does', 'from', 'give', 'one', 'are', 'there', 'short',
    'also', 'hey',
}

# keyword -> chapter titles it strongly implies
TOPIC_MAPPINGS: Dict[str, List[str]] = {
    # Physical chemistry
    'mole': ['Mole Concept'],
    'molar': ['Mole Concept', 'Concentration Terms'],
    'molarity': ['Concentration Terms'],
    'molality': ['Concentration Terms'],
    'stoichiometry': ['Stoichiometry'],
    'limiting': ['Stoichiometry'],
    'reagent': ['Stoichiometry'],
    'redox': ['Oxidation Number', 'Balancing Redox'],
    'oxidation': ['Oxidation Number'],
    'reduction': ['Oxidation Number'],

    # Mechanics
    'dimension': ['Dimensional Analysis'],
    'dimensional': ['Dimensional Analysis'],
    'error': ['Errors in Measurement'],
    'kinematics': ['Motion in a Straight Line', 'Projectile Motion'],
    'projectile': ['Projectile Motion'],
    'motion': ['Motion in a Straight Line', 'Projectile Motion'],
    'velocity': ['Motion in a Straight Line'],
    'acceleration': ['Motion in a Straight Line'],
    'force': ["Newton's Laws"],
    'newton': ["Newton's Laws"],
    'newtons': ["Newton's Laws"],
    'inertia': ["Newton's Laws"],
    'pseudo': ["Newton's Laws"],
    'friction': ['Friction'],
    'constraint': ['Constraint Motion & Pulleys'],
    'pulley': ['Constraint Motion & Pulleys'],
    'pulleys': ['Constraint Motion & Pulleys'],
    'pully': ['Constraint Motion & Pulleys'],
    'tension': ['Constraint Motion & Pulleys'],
    'energy': ['Work, Energy & Power', 'Conservation of Energy'],
    'power': ['Work, Energy & Power'],
    'conservation': ['Conservation of Energy'],
    'gravity': ['Motion Under Gravity'],
    'fall': ['Motion Under Gravity'],
    'falling': ['Motion Under Gravity'],
    'dropped': ['Motion Under Gravity'],
    'thermodynamics': ['Laws of Thermodynamics'],
    'heat': ['Laws of Thermodynamics'],

    # Mathematics
    'trigonometric': ['Trigonometric Functions'],
    'trigonometry': ['Trigonometric Functions'],
    'trig': ['Trigonometric Functions'],
    'sin': ['Trigonometric Functions'],
    'cos': ['Trigonometric Functions'],
    'tan': ['Trigonometric Functions'],
    'straight': ['Straight Lines'],
    'line': ['Straight Lines', 'Motion in a Straight Line'],
    'lines': ['Straight Lines'],
    'slope': ['Straight Lines'],
    'circle': ['Circles'],
    'limit': ['Limits & Derivatives'],
    'limits': ['Limits & Derivatives'],
    'derivative': ['Limits & Derivatives'],
    'derivatives': ['Limits & Derivatives'],
}

MAPPING_SCORE = 30
CHAPTER_TITLE_SCORE = 12
UNIT_TITLE_SCORE = 8
DESCRIPTION_SCORE = 3
MIN_MATCH_SCORE = 8


def extract_keywords(query: str) -> List[str]:
    """Lower-case words of a query minus punctuation, stop words and short words."""
    cleaned = re.sub(r'[^a-z0-9\s]', '', query.lower())
    return [w for w in cleaned.split() if len(w) > 2 and w not in STOP_WORDS]


def _mapping_score(keywords: List[str], chapter_title: str) -> int:
    lower_chapter = chapter_title.lower()
    score = 0
    for keyword in keywords:
        for mapped in TOPIC_MAPPINGS.get(keyword, ()):
            if mapped.lower() in lower_chapter:
                score += MAPPING_SCORE
    return score


def score_chapter(keywords: List[str], chapter: CatalogChapter) -> int:
    """Relevance of a chapter for the given keywords."""
    lower_chapter = chapter.title.lower()
    lower_unit = chapter.unit_title.lower()
    lower_desc = chapter.description.lower()

    score = _mapping_score(keywords, chapter.title)
    for keyword in keywords:
        if keyword in lower_chapter:
            score += CHAPTER_TITLE_SCORE
        if keyword in lower_unit:
            score += UNIT_TITLE_SCORE
        if keyword in lower_desc:
            score += DESCRIPTION_SCORE
    return score


def find_related_lectures(
    query: str,
    max_results: int = 1,
    catalog: Optional[LectureCatalog] = None
) -> List[LectureSuggestion]:
    """
    Find video lectures related to a doubt.

    Args:
        query: The student's question
        max_results: Maximum suggestions to return
        catalog: Catalog to search; the process-wide catalog when None

    Returns:
        Suggestions ordered by descending relevance, possibly empty
    """
    keywords = extract_keywords(query)
    if not keywords:
        return []

    if catalog is None:
        catalog = get_lecture_catalog()
    scored = []
    for chapter in catalog.video_chapters():
        score = score_chapter(keywords, chapter)
        if score >= MIN_MATCH_SCORE:
            scored.append((score, chapter))

    # sort() is stable: ties keep catalog order
    scored.sort(key=lambda item: item[0], reverse=True)

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(f"Keyword lecture search: keywords={keywords}, matches={len(scored)}")

    return [
        LectureSuggestion(
            title=chapter.title,
            chapter_title=chapter.unit_title,
            subject=chapter.subject_label,
            url=chapter.url,
        )
        for _, chapter in scored[:max_results]
    ]


def keywords_for_chapter(chapter_title: str) -> List[str]:
    """Topic-mapping keywords that point at a chapter."""
    lower_title = chapter_title.lower()
    found = []
    for keyword, chapters in TOPIC_MAPPINGS.items():
        for mapped in chapters:
            mapped_lower = mapped.lower()
            if (mapped_lower in lower_title or lower_title in mapped_lower) and keyword not in found:
                found.append(keyword)
    return found


def chapters_for_ai(catalog: Optional[LectureCatalog] = None) -> List[ChapterInfo]:
    """Catalog chapters with keyword-enriched descriptions for the AI lecture finder."""
    if catalog is None:
        catalog = get_lecture_catalog()
    chapters = []
    for chapter in catalog.video_chapters():
        keywords = keywords_for_chapter(chapter.title)
        parts = [chapter.description]
        if keywords:
            parts.append(f"Keywords: {', '.join(keywords)}")
        chapters.append(ChapterInfo(
            title=chapter.title,
            unit_title=chapter.unit_title,
            subject=chapter.subject_label,
            url=chapter.url,
            description=". ".join(p for p in parts if p),
        ))
    return chapters
