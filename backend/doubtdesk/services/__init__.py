"""Services module - lecture catalog and suggestion lookup."""

from .lecture_catalog import LectureCatalog, CatalogChapter, get_lecture_catalog
from .lecture_search import find_related_lectures, chapters_for_ai, extract_keywords

__all__ = [
    'LectureCatalog', 'CatalogChapter', 'get_lecture_catalog',
    'find_related_lectures', 'chapters_for_ai', 'extract_keywords',
]
