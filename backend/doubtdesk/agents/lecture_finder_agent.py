"""
Lecture Finder Agent - Picks the catalog lecture that best matches a doubt.
"""

import json
import logging
from typing import Dict, Any, Optional, List
from .base_agent import BaseAgent
from ..models import ChapterInfo, LectureSuggestion
from ..services.lecture_catalog import LectureCatalog
from ..services.lecture_search import chapters_for_ai, find_related_lectures

logger = logging.getLogger(__name__)

MATCHING_RULES = """MATCHING RULES:
1. Look at the KEYWORDS in brackets - if ANY keyword matches the student's question, prefer that lecture
2. Handle typos: "pully" -> "pulley", "projectal" -> "projectile", "newtons" -> "newton"
3. Match concepts to topics:
   - "pulley", "rope", "string tension" -> Constraint Motion & Pulleys
   - "fall", "drop", "gravity" -> Motion Under Gravity
   - "force", "newton", "F=ma" -> Newton's Laws
   - "mole", "molarity", "concentration" -> Mole Concept / Concentration Terms
   - "balance equation", "redox" -> Balancing Redox
4. If multiple matches, prefer the one with MORE matching keywords
5. If truly irrelevant (e.g. "best restaurants"), return index -1

Reply with ONLY: { "index": NUMBER }
No markdown, no explanation, just the JSON object."""


class LectureFinderAgent(BaseAgent):
    """
    Lecture Finder Agent that asks the LLM to pick one lecture by index.
    Falls back to keyword search when no LLM is configured or its pick is unusable.
    """

    def __init__(self, catalog: Optional[LectureCatalog] = None):
        super().__init__(
            "LectureFinderAgent",
            "You are an expert JEE/NEET academic tutor matching student questions to the perfect lecture."
        )
        self.catalog = catalog
        self._chapters: Optional[List[ChapterInfo]] = None

    @property
    def chapters(self) -> List[ChapterInfo]:
        if self._chapters is None:
            self._chapters = chapters_for_ai(self.catalog)
        return self._chapters

    def build_prompt(self, user_message: str) -> str:
        chapter_list = "\n".join(
            f"{i}. {ch.subject}: {ch.unit_title} > {ch.title} [Topics: {ch.description}]"
            for i, ch in enumerate(self.chapters)
        )
        return (
            f"Student Question: \"{user_message}\"\n\n"
            f"Available Lectures (format: Index. Subject: Unit > Chapter [Keywords]):\n"
            f"{chapter_list}\n\n"
            f"{MATCHING_RULES}"
        )

    async def process_request(
        self,
        user_message: str,
        context: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Find the lecture for a doubt.
        Uses LLM if available, otherwise falls back to keyword matching.

        Returns:
            Dict with ``lectures`` (list of LectureSuggestion) and ``source`` ("ai" or "keywords")
        """
        if self._llm_provider is not None:
            chapter = await self._find_with_llm(user_message)
            if chapter is not None:
                logger.info(f"AI lecture finder selected: {chapter.title}")
                return {"agent": "lecture_finder", "lectures": [chapter.to_suggestion()], "source": "ai"}

        logger.debug("Lecture finder falling back to keyword search")
        lectures: List[LectureSuggestion] = find_related_lectures(user_message, catalog=self.catalog)
        return {"agent": "lecture_finder", "lectures": lectures, "source": "keywords"}

    async def _find_with_llm(self, user_message: str) -> Optional[ChapterInfo]:
        """Ask the LLM for a chapter index; None when it gives no usable answer."""
        raw = await self.call_llm(
            messages=[
                {"role": "system", "content": self.system_prompt},
                {"role": "user", "content": self.build_prompt(user_message)}
            ],
            temperature=0.1,
            json_mode=True,
        )
        if not raw:
            return None

        cleaned = raw.replace("```json", "").replace("```", "").strip()
        try:
            index = int(json.loads(cleaned)["index"])
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Failed to parse lecture finder response: {e}")
            return None

        if 0 <= index < len(self.chapters):
            return self.chapters[index]
        return None
