"""
Mentor Agent - Answers student doubts and flags topic switches.
"""

import logging
from typing import Dict, Any, Optional, List
from datetime import datetime

from .base_agent import BaseAgent
from ..models import HistoryItem

logger = logging.getLogger(__name__)

DIFF_TOPIC_MARKER = "[DIFF_TOPIC]"

DIFFERENT_TOPIC_NOTICE = (
    "This looks like a different question. To ensure higher accuracy, I'll start a new chat "
    "for this one. You can always access both chats from your history list."
)

ANSWER_RULES = """- Use LaTeX for math: inline $...$ and block $$...$$
- Use numbered lists for steps
- Use bullet points for key concepts
- DO NOT use markdown tables
- Keep responses concise (under 300 words)
- Be encouraging and exam-focused
- Never mention being an AI"""

DIRECT_PROMPT = f"""You are "Catalyzer Assist", a friendly academic mentor for JEE/NEET students.
RULES:
{ANSWER_RULES}
- Answer the user's question directly without checking if it's a new topic."""

CONTEXT_CHECK_PROMPT = f"""You are "Catalyzer Assist", a friendly academic mentor for JEE/NEET students.

**MANDATORY CONTEXT CHECK - DO THIS FIRST:**
Look at the conversation history and the NEW question. Detect topic switches between:
- Different SUBJECTS: Physics <-> Chemistry <-> Mathematics <-> Biology
- Different CHAPTERS within a subject: Mechanics <-> Thermodynamics, Organic <-> Inorganic, Trigonometry <-> Calculus

**IF you detect a topic switch:**
1. Start your response with EXACTLY: {DIFF_TOPIC_MARKER}
2. Then add a brief note like "Switching to Chemistry."
3. DO NOT answer the question at all. Just output {DIFF_TOPIC_MARKER} and stop.

**Examples of topic switches that MUST trigger {DIFF_TOPIC_MARKER}:**
- "Newton's laws" -> "equation of straight line" (Physics -> Math)
- "inertia" -> "trigonometric functions" (Physics -> Math)
- "straight line" -> "mole concept" (Math -> Chemistry)
- "photosynthesis" -> "Newton's law" (Biology -> Physics)

**IF the question is about the SAME topic as history, answer normally with:**
{ANSWER_RULES}"""


class MentorAgent(BaseAgent):
    """
    Mentor Agent that answers a doubt in the context of its conversation.
    Unless told to skip it, the model first decides whether the question
    belongs to the conversation's topic; a switch is reported instead of answered.
    """

    def __init__(self):
        super().__init__("MentorAgent", CONTEXT_CHECK_PROMPT)

    def build_messages(
        self,
        user_message: str,
        history: List[HistoryItem],
        skip_context_check: bool
    ) -> List[Dict[str, str]]:
        """Assemble the LLM conversation for a doubt."""
        messages = [{"role": "system", "content": DIRECT_PROMPT if skip_context_check else self.system_prompt}]
        for item in history:
            role = "assistant" if item.role == "mentor" else "user"
            messages.append({"role": role, "content": item.content or ""})
        messages.append({"role": "user", "content": user_message})
        return messages

    async def process_request(
        self,
        user_message: str,
        context: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Answer a doubt.

        Args:
            user_message: The student's question
            context: ``history`` (list of HistoryItem) and ``skip_context_check`` (bool)

        Returns:
            Dict with ``response`` (None when no answer could be generated)
            and ``is_different_topic``
        """
        context = context or {}
        history = context.get("history") or []
        skip_context_check = bool(context.get("skip_context_check", False))

        raw = await self.call_llm(self.build_messages(user_message, history, skip_context_check))

        is_different_topic = False
        response = None
        if raw:
            if not skip_context_check and DIFF_TOPIC_MARKER in raw:
                is_different_topic = True
                response = DIFFERENT_TOPIC_NOTICE
                logger.info("Mentor detected a topic switch")
            else:
                response = raw.replace(DIFF_TOPIC_MARKER, "").strip()

        return {
            "agent": "mentor",
            "response": response,
            "is_different_topic": is_different_topic,
            "timestamp": datetime.now().isoformat()
        }
