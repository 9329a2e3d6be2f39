"""
Unit tests for the lecture catalog and keyword lecture search.
"""

import json
import pytest

from doubtdesk.services.lecture_catalog import LectureCatalog, is_test_chapter
from doubtdesk.services.lecture_search import (
    extract_keywords,
    find_related_lectures,
    chapters_for_ai,
    keywords_for_chapter,
)


@pytest.fixture
def catalog():
    return LectureCatalog()


class TestLectureCatalog:

    def test_test_chapters_detected(self):
        assert is_test_chapter("Units & Measurements Chapter Test")
        assert is_test_chapter("Laws of Motion PYQs")
        assert not is_test_chapter("Newton's Laws")

    def test_video_chapters_skip_tests_and_videoless(self):
        data = {
            "neet-bio-11": {
                "subject": "Biology", "exam": "NEET", "grade": "11th",
                "units": [{
                    "id": "bio-u1", "title": "Plant Physiology",
                    "chapters": [
                        {"id": "c1", "title": "Photosynthesis", "description": "Light reactions",
                         "resources": [{"type": "video", "url": "x", "title": "x"}]},
                        {"id": "c2", "title": "Respiration", "resources": [{"type": "pdf"}]},
                        {"id": "c3", "title": "Photosynthesis Quiz",
                         "resources": [{"type": "video", "url": "y", "title": "y"}]},
                    ],
                }],
            }
        }
        chapters = list(LectureCatalog(data).video_chapters())
        assert [c.title for c in chapters] == ["Photosynthesis"]
        assert chapters[0].url == "/lectures/neet/biology-11/bio-u1/c1"
        assert chapters[0].subject_label == "Biology (NEET 11th)"

    def test_from_file(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps({"s": {"subject": "Physics", "units": []}}), encoding="utf-8")
        assert len(LectureCatalog.from_file(str(path))) == 0


class TestExtractKeywords:

    def test_strips_punctuation_and_stop_words(self):
        assert extract_keywords("What is Newton's second law?") == ["newtons", "second", "law"]

    def test_drops_short_words(self):
        assert extract_keywords("F = ma in 1D") == []


class TestFindRelatedLectures:

    def test_newton(self, catalog):
        lectures = find_related_lectures("What is Newton's second law?", catalog=catalog)
        assert len(lectures) == 1
        lecture = lectures[0]
        assert lecture.title == "Newton's Laws"
        assert lecture.chapter_title == "Laws of Motion"
        assert lecture.subject == "Physics (JEE 11th)"
        assert lecture.url == "/lectures/jee/physics-11/phy-u3/phy-u3-c1"

    def test_typo_mapping(self, catalog):
        lectures = find_related_lectures("pully tension doubt", catalog=catalog)
        assert lectures[0].title == "Constraint Motion & Pulleys"

    def test_max_results_orders_by_score(self, catalog):
        lectures = find_related_lectures("energy conservation", max_results=3, catalog=catalog)
        assert lectures[0].title == "Conservation of Energy"
        assert len(lectures) == 2

    def test_never_suggests_tests(self, catalog):
        lectures = find_related_lectures("units measurements test", max_results=10, catalog=catalog)
        titles = [l.title for l in lectures]
        assert "Units & Measurements Chapter Test" not in titles
        assert "Dimensional Analysis" in titles

    def test_irrelevant_query(self, catalog):
        assert find_related_lectures("best restaurants in town", catalog=catalog) == []

    def test_stop_words_only(self, catalog):
        assert find_related_lectures("what is this", catalog=catalog) == []

    def test_wire_aliases(self, catalog):
        lecture = find_related_lectures("molarity", catalog=catalog)[0]
        assert lecture.model_dump(by_alias=True) == {
            "title": "Concentration Terms",
            "chapterTitle": "Some Basic Concepts of Chemistry",
            "subject": "Chemistry (JEE 11th)",
            "url": "/lectures/jee/chemistry-11/chem-u1/chem-u1-c2",
        }


class TestChaptersForAI:

    def test_keywords_for_chapter(self):
        keywords = keywords_for_chapter("Newton's Laws")
        assert {"force", "newton", "newtons", "inertia"} <= set(keywords)

    def test_descriptions_enriched(self, catalog):
        chapters = {c.title: c for c in chapters_for_ai(catalog)}
        assert "Keywords:" in chapters["Constraint Motion & Pulleys"].description
        assert "pully" in chapters["Constraint Motion & Pulleys"].description
