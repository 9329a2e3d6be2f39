"""
Lecture Catalog - The lectures doubts can be matched against.

A small built-in catalog ships with the package. Deployments point
``LECTURE_CATALOG_PATH`` at a JSON file with the same shape:

    {"<subject_key>": {"subject": ..., "exam": ..., "grade": ...,
                       "units": [{"id", "title",
                                  "chapters": [{"id", "title", "description",
                                                "resources": [{"type", "url", "title"}]}]}]}}
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

logger = logging.getLogger(__name__)

# Chapters whose title contains one of these are assessments, not lectures
TEST_KEYWORDS = ['test', 'quiz', 'pyq', 'pyqs', 'challenge', 'practice']


def _video(slug: str, title: str) -> Dict[str, str]:
    return {"type": "video", "url": slug, "title": title}


BUILTIN_CATALOG: Dict[str, Any] = {
    "jee-physics-11": {
        "subject": "Physics",
        "exam": "JEE",
        "grade": "11th",
        "units": [
            {
                "id": "phy-u1",
                "title": "Units & Measurements",
                "chapters": [
                    {"id": "phy-u1-c1", "title": "Dimensional Analysis",
                     "description": "Dimensions, dimensional formula, homogeneity",
                     "resources": [_video("phy-dim-1", "Dimensional Analysis")]},
                    {"id": "phy-u1-c2", "title": "Errors in Measurement",
                     "description": "Absolute, relative and percentage error",
                     "resources": [_video("phy-err-1", "Errors")]},
                    {"id": "phy-u1-c3", "title": "Units & Measurements Chapter Test",
                     "description": "Timed test", "resources": []},
                ],
            },
            {
                "id": "phy-u2",
                "title": "Kinematics",
                "chapters": [
                    {"id": "phy-u2-c1", "title": "Motion in a Straight Line",
                     "description": "Displacement, velocity, acceleration, equations of motion",
                     "resources": [_video("phy-kin-1", "Straight Line Motion")]},
                    {"id": "phy-u2-c2", "title": "Projectile Motion",
                     "description": "Range, time of flight, maximum height",
                     "resources": [_video("phy-proj-1", "Projectiles")]},
                    {"id": "phy-u2-c3", "title": "Motion Under Gravity",
                     "description": "Free fall, objects dropped and thrown up",
                     "resources": [_video("phy-grav-1", "Free Fall")]},
                ],
            },
            {
                "id": "phy-u3",
                "title": "Laws of Motion",
                "chapters": [
                    {"id": "phy-u3-c1", "title": "Newton's Laws",
                     "description": "Inertia, F = ma, action and reaction, free body diagrams",
                     "resources": [_video("phy-nlm-1", "Newton's Laws of Motion")]},
                    {"id": "phy-u3-c2", "title": "Friction",
                     "description": "Static and kinetic friction, angle of repose",
                     "resources": [_video("phy-fric-1", "Friction")]},
                    {"id": "phy-u3-c3", "title": "Constraint Motion & Pulleys",
                     "description": "String constraints, pulley systems, tension",
                     "resources": [_video("phy-pul-1", "Pulleys")]},
                    {"id": "phy-u3-c4", "title": "Laws of Motion PYQs",
                     "description": "Previous year questions",
                     "resources": [_video("phy-nlm-pyq", "PYQ walkthrough")]},
                ],
            },
            {
                "id": "phy-u4",
                "title": "Work, Energy & Power",
                "chapters": [
                    {"id": "phy-u4-c1", "title": "Work, Energy & Power",
                     "description": "Work-energy theorem, kinetic and potential energy",
                     "resources": [_video("phy-wep-1", "Work and Energy")]},
                    {"id": "phy-u4-c2", "title": "Conservation of Energy",
                     "description": "Mechanical energy conservation, springs",
                     "resources": [_video("phy-coe-1", "Energy Conservation")]},
                ],
            },
            {
                "id": "phy-u5",
                "title": "Thermodynamics",
                "chapters": [
                    {"id": "phy-u5-c1", "title": "Laws of Thermodynamics",
                     "description": "Zeroth, first and second law, heat engines",
                     "resources": [_video("phy-thermo-1", "Thermodynamics")]},
                ],
            },
        ],
    },
    "jee-chemistry-11": {
        "subject": "Chemistry",
        "exam": "JEE",
        "grade": "11th",
        "units": [
            {
                "id": "chem-u1",
                "title": "Some Basic Concepts of Chemistry",
                "chapters": [
                    {"id": "chem-u1-c1", "title": "Mole Concept",
                     "description": "Avogadro number, molar mass, empirical formula",
                     "resources": [_video("chem-mole-1", "Mole Concept")]},
                    {"id": "chem-u1-c2", "title": "Concentration Terms",
                     "description": "Molarity, molality, mole fraction",
                     "resources": [_video("chem-conc-1", "Concentration")]},
                    {"id": "chem-u1-c3", "title": "Stoichiometry",
                     "description": "Limiting reagent, percentage yield",
                     "resources": [_video("chem-stoi-1", "Stoichiometry")]},
                ],
            },
            {
                "id": "chem-u2",
                "title": "Redox Reactions",
                "chapters": [
                    {"id": "chem-u2-c1", "title": "Oxidation Number",
                     "description": "Rules for oxidation states",
                     "resources": [_video("chem-ox-1", "Oxidation Number")]},
                    {"id": "chem-u2-c2", "title": "Balancing Redox",
                     "description": "Ion-electron and oxidation number methods",
                     "resources": [_video("chem-redox-1", "Balancing Redox")]},
                ],
            },
        ],
    },
    "jee-maths-11": {
        "subject": "Mathematics",
        "exam": "JEE",
        "grade": "11th",
        "units": [
            {
                "id": "math-u1",
                "title": "Trigonometry",
                "chapters": [
                    {"id": "math-u1-c1", "title": "Trigonometric Functions",
                     "description": "sin, cos, tan, identities and graphs",
                     "resources": [_video("math-trig-1", "Trig Functions")]},
                ],
            },
            {
                "id": "math-u2",
                "title": "Coordinate Geometry",
                "chapters": [
                    {"id": "math-u2-c1", "title": "Straight Lines",
                     "description": "Slope, forms of the equation of a line",
                     "resources": [_video("math-line-1", "Straight Lines")]},
                    {"id": "math-u2-c2", "title": "Circles",
                     "description": "Equation of a circle, tangents",
                     "resources": [_video("math-circle-1", "Circles")]},
                ],
            },
            {
                "id": "math-u3",
                "title": "Calculus",
                "chapters": [
                    {"id": "math-u3-c1", "title": "Limits & Derivatives",
                     "description": "Limits, first principles, derivative rules",
                     "resources": [_video("math-lim-1", "Limits")]},
                ],
            },
        ],
    },
}


@dataclass
class CatalogChapter:
    """A lecture chapter flattened with its unit and subject."""
    subject_key: str
    subject: str
    exam: str
    grade: str
    unit_id: str
    unit_title: str
    chapter_id: str
    title: str
    description: str

    @property
    def url(self) -> str:
        subject_slug = f"{self.subject.lower()}-{self.grade.replace('th', '')}"
        return f"/lectures/{self.exam.lower()}/{subject_slug}/{self.unit_id}/{self.chapter_id}"

    @property
    def subject_label(self) -> str:
        return f"{self.subject} ({self.exam} {self.grade})"


def is_test_chapter(title: str) -> bool:
    """True for tests, quizzes and PYQ chapters."""
    lower = title.lower()
    return any(keyword in lower for keyword in TEST_KEYWORDS)


class LectureCatalog:
    """Read-only view over catalog data."""

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        self.data = data if data is not None else BUILTIN_CATALOG

    @classmethod
    def from_file(cls, path: str) -> "LectureCatalog":
        with open(Path(path), encoding='utf-8') as f:
            return cls(json.load(f))

    def video_chapters(self) -> Iterator[CatalogChapter]:
        """Chapters that have a video and are not assessments."""
        for subject_key, subject_data in self.data.items():
            for unit in subject_data.get("units", []):
                for chapter in unit.get("chapters", []):
                    if is_test_chapter(chapter["title"]):
                        continue
                    resources = chapter.get("resources") or []
                    if not any(r.get("type") == "video" for r in resources):
                        continue
                    yield CatalogChapter(
                        subject_key=subject_key,
                        subject=subject_data["subject"],
                        exam=subject_data.get("exam", ""),
                        grade=subject_data.get("grade", ""),
                        unit_id=unit["id"],
                        unit_title=unit["title"],
                        chapter_id=chapter["id"],
                        title=chapter["title"],
                        description=chapter.get("description", ""),
                    )

    def __len__(self) -> int:
        return sum(1 for _ in self.video_chapters())


_catalog: Optional[LectureCatalog] = None


def get_lecture_catalog(path: Optional[str] = None) -> LectureCatalog:
    """
    Get the process-wide catalog, loading it on first use.

    Args:
        path: JSON catalog path; the built-in catalog is used when None
    """
    global _catalog
    if _catalog is None:
        if path:
            _catalog = LectureCatalog.from_file(path)
            logger.info(f"Lecture catalog loaded from {path}: {len(_catalog)} video chapters")
        else:
            _catalog = LectureCatalog()
    return _catalog


