"""Agents module - AI agents behind the answer service."""

from .base_agent import BaseAgent
from .mentor_agent import MentorAgent
from .lecture_finder_agent import LectureFinderAgent
from .orchestrator import DoubtOrchestrator, DoubtAnswer

__all__ = [
    'BaseAgent',
    'MentorAgent',
    'LectureFinderAgent',
    'DoubtOrchestrator',
    'DoubtAnswer',
]
