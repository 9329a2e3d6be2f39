"""
Doubt API endpoints - The answer service behind the doubt chat.
"""

import logging
from fastapi import APIRouter, HTTPException, Depends, status

from ..models import AskRequest, AskResponse, MessageRole
from ..utils.auth import get_current_user_id
from ..storage import (
    SessionStore,
    SessionStoreError,
    DoubtLimitStorage,
    get_session_store,
    get_limit_storage,
)
from ..config import settings
from ..core import LoggerAdapter
from ..agents import DoubtOrchestrator
from ..llm.factory import create_llm_provider
from ..services import get_lecture_catalog

router = APIRouter(prefix="/doubts", tags=["doubts"])

logger = logging.getLogger(__name__)


def _get_llm_provider():
    """Get configured LLM provider or None."""
    legacy_key = settings.openai_api_key if settings.llm_provider == "openai" else settings.gemini_api_key
    api_key = settings.llm_api_key or legacy_key
    if not api_key:
        return None
    return create_llm_provider(
        provider=settings.llm_provider,
        api_key=api_key,
        models=settings.llm_models,
        base_url=settings.llm_base_url,
        timeout=settings.llm_timeout,
    )


def get_orchestrator() -> DoubtOrchestrator:
    """Dependency building the orchestrator from current settings."""
    return DoubtOrchestrator(
        llm_provider=_get_llm_provider(),
        catalog=get_lecture_catalog(settings.lecture_catalog_path),
    )


@router.post("/ask", response_model=AskResponse, response_model_by_alias=True)
async def ask_doubt(
    request: AskRequest,
    user_id: str = Depends(get_current_user_id),
    store: SessionStore = Depends(get_session_store),
    limits: DoubtLimitStorage = Depends(get_limit_storage),
    orchestrator: DoubtOrchestrator = Depends(get_orchestrator),
):
    """
    Answer a student's doubt.

    Creates a session when none is given, persists both sides of the
    exchange and suggests a lecture for the question.

    Args:
        request: The doubt with optional session id and history
        user_id: Current user ID from token

    Returns:
        AskResponse
    """
    log = LoggerAdapter(logger, {"user_id": user_id})

    if not request.message.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Message required")

    limit = settings.doubt_daily_limit
    check = await limits.check_and_increment(user_id, limit)
    if not check.allowed:
        log.warning(f"Daily doubt limit reached ({check.count}/{limit})")
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=f"Daily limit ({limit}) reached"
        )

    session_id = request.session_id
    if not session_id:
        try:
            session = await store.create_session(user_id, title=request.message[:50])
        except SessionStoreError as e:
            log.error(f"Session creation failed: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Session creation failed: {e}"
            )
        session_id = session.id
    else:
        session = await store.get_session(session_id)
        if session is None or session.user_id != user_id:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")

    await store.append_message(session_id, MessageRole.USER, request.message)

    answer = await orchestrator.answer(
        request.message,
        history=request.history,
        skip_context_check=request.skip_context_check,
        user_id=user_id,
    )

    # The mentor message is saved on a topic switch too; the client decides what to show
    await store.append_message(session_id, MessageRole.MENTOR, answer.reply)

    log.info(
        f"Doubt answered in session {session_id}",
        extra={"extra_fields": {
            "session_id": session_id,
            "is_different_topic": answer.is_different_topic,
            "lectures": len(answer.suggested_lectures),
            "daily_count": check.count,
        }}
    )

    return AskResponse(
        reply=answer.reply,
        session_id=session_id,
        suggested_lectures=answer.suggested_lectures,
        is_first_response=not request.history,
        is_different_topic=answer.is_different_topic,
    )
