"""
Doubt Orchestrator - Runs the mentor and the lecture finder for one doubt.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .mentor_agent import MentorAgent
from .lecture_finder_agent import LectureFinderAgent
from ..llm.base import LLMProvider
from ..models import HistoryItem, LectureSuggestion
from ..services.lecture_catalog import LectureCatalog

logger = logging.getLogger(__name__)

NO_CONNECTION_REPLY = (
    "I apologize, but I'm having trouble connecting right now. Please try asking with "
    "specific topic keywords like 'Thermodynamics' or 'Vectors'."
)


@dataclass
class DoubtAnswer:
    """What the answer service returns for one doubt."""
    reply: str
    is_different_topic: bool = False
    suggested_lectures: List[LectureSuggestion] = field(default_factory=list)
    used_fallback: bool = False


def fallback_reply(lectures: List[LectureSuggestion]) -> str:
    """Reply used when the mentor could not answer."""
    if not lectures:
        return NO_CONNECTION_REPLY

    lecture = lectures[0]
    emoji = "🍎" if "physics" in lecture.subject.lower() else "🧪"
    return (
        "I'm having a bit of trouble connecting to my brain right now, but I found the perfect "
        f"resource for you!\n\n{emoji} **{lecture.title}** covers exactly what you're asking about."
        "\n\nCheck it out below! 👇"
    )


class DoubtOrchestrator:
    """
    Coordinates the agents behind the answer service.
    The mentor answer and the lecture lookup run concurrently.
    """

    def __init__(self, llm_provider: Optional[LLMProvider] = None,
                 catalog: Optional[LectureCatalog] = None):
        """
        Args:
            llm_provider: Optional LLM provider shared by all agents
            catalog: Lecture catalog; the process-wide catalog when None
        """
        self.mentor = MentorAgent()
        self.lecture_finder = LectureFinderAgent(catalog)

        if llm_provider:
            for agent in (self.mentor, self.lecture_finder):
                agent.set_llm_provider(llm_provider)

    async def answer(
        self,
        message: str,
        history: Optional[List[HistoryItem]] = None,
        skip_context_check: bool = False,
        user_id: Optional[str] = None
    ) -> DoubtAnswer:
        """
        Answer a doubt and suggest a lecture for it.

        Args:
            message: The student's question
            history: Prior messages of the conversation
            skip_context_check: Answer directly without topic-switch detection
            user_id: For logging only

        Returns:
            DoubtAnswer; never raises for LLM failures
        """
        logger.info(
            f"Answering doubt for user {user_id}: {message[:100]}",
            extra={"extra_fields": {
                "user_id": user_id,
                "history_length": len(history or []),
                "skip_context_check": skip_context_check,
            }}
        )

        mentor_result, finder_result = await asyncio.gather(
            self.mentor.process_request(message, {
                "history": history or [],
                "skip_context_check": skip_context_check,
            }),
            self.lecture_finder.process_request(message),
        )

        lectures = finder_result["lectures"]
        reply = mentor_result["response"]
        used_fallback = False

        if not reply:
            logger.warning("Mentor returned no answer, applying fallback reply")
            reply = fallback_reply(lectures)
            used_fallback = True

        logger.info(
            f"Doubt answered: different_topic={mentor_result['is_different_topic']}, "
            f"lectures={len(lectures)} ({finder_result['source']}), fallback={used_fallback}"
        )

        return DoubtAnswer(
            reply=reply,
            is_different_topic=mentor_result["is_different_topic"],
            suggested_lectures=lectures,
            used_fallback=used_fallback,
        )
