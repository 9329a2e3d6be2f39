"""
Doubt Models - Request/response payloads of the answer service and lecture suggestions.
"""

from typing import Optional, List
from pydantic import BaseModel, Field

from .message import HistoryItem


class LectureSuggestion(BaseModel):
    """A lecture recommended for a doubt."""
    title: str
    chapter_title: str = Field("", alias="chapterTitle")
    subject: str = ""
    url: str = ""

    class Config:
        populate_by_name = True


class ChapterInfo(BaseModel):
    """A catalog chapter the lecture finder can pick from."""
    title: str
    unit_title: str
    subject: str
    url: str
    description: str = ""

    def to_suggestion(self) -> LectureSuggestion:
        return LectureSuggestion(
            title=self.title,
            chapter_title=self.unit_title,
            subject=self.subject,
            url=self.url,
        )


class AskRequest(BaseModel):
    """Body of POST /doubts/ask."""
    message: str = ""
    session_id: Optional[str] = Field(None, alias="sessionId")
    history: List[HistoryItem] = Field(default_factory=list)
    skip_context_check: bool = Field(False, alias="skipContextCheck")

    class Config:
        populate_by_name = True


class AskResponse(BaseModel):
    """Successful answer service response."""
    reply: str
    session_id: Optional[str] = Field(None, alias="sessionId")
    suggested_lectures: List[LectureSuggestion] = Field(default_factory=list, alias="suggestedLectures")
    is_first_response: bool = Field(False, alias="isFirstResponse")
    is_different_topic: bool = Field(False, alias="isDifferentTopic")

    class Config:
        populate_by_name = True
