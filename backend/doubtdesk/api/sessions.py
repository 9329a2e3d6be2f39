"""
Session API endpoints - History sidebar and session lifecycle.
"""

import logging
from typing import List, Optional
from fastapi import APIRouter, HTTPException, Depends, status, Query

from ..models import (
    DoubtSession,
    DoubtMessage,
    MessageCreate,
    SessionStatus,
    SessionCreate,
    SessionStatusUpdate,
    SessionList,
)
from ..utils.auth import get_current_user_id
from ..storage import SessionStore, InvalidStatusTransition, get_session_store

router = APIRouter(prefix="/doubts/sessions", tags=["sessions"])

logger = logging.getLogger(__name__)


async def _get_owned_session(store: SessionStore, session_id: str, user_id: str) -> DoubtSession:
    """Load a session of the caller or raise 404."""
    session = await store.get_session(session_id)
    if session is None or session.user_id != user_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return session


@router.post("", response_model=DoubtSession, status_code=status.HTTP_201_CREATED)
async def create_session(
    payload: SessionCreate,
    user_id: str = Depends(get_current_user_id),
    store: SessionStore = Depends(get_session_store),
):
    """Create a session for the current user."""
    return await store.create_session(user_id, title=payload.title, status=payload.status)


@router.get("", response_model=SessionList)
async def list_sessions(
    session_status: Optional[SessionStatus] = Query(None, alias="status"),
    limit: Optional[int] = Query(None, ge=1, le=200),
    user_id: str = Depends(get_current_user_id),
    store: SessionStore = Depends(get_session_store),
):
    """
    List the current user's sessions, most recently updated first.

    Args:
        session_status: Only sessions with this status
        limit: Maximum number of sessions
    """
    sessions = await store.list_sessions(user_id, status=session_status, limit=limit)
    return SessionList(sessions=sessions)


@router.get("/{session_id}", response_model=DoubtSession)
async def get_session(
    session_id: str,
    user_id: str = Depends(get_current_user_id),
    store: SessionStore = Depends(get_session_store),
):
    """Get one session."""
    return await _get_owned_session(store, session_id, user_id)


@router.patch("/{session_id}/status", response_model=DoubtSession)
async def update_session_status(
    session_id: str,
    update: SessionStatusUpdate,
    user_id: str = Depends(get_current_user_id),
    store: SessionStore = Depends(get_session_store),
):
    """
    Change a session's status.

    Raises:
        HTTPException: 409 when reopening a resolved session
    """
    await _get_owned_session(store, session_id, user_id)

    try:
        return await store.set_status(session_id, update.status)
    except InvalidStatusTransition as e:
        logger.warning(f"Rejected status change for session {session_id}: {e}")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.get("/{session_id}/messages", response_model=List[DoubtMessage])
async def list_session_messages(
    session_id: str,
    user_id: str = Depends(get_current_user_id),
    store: SessionStore = Depends(get_session_store),
):
    """All messages of a session in creation order."""
    await _get_owned_session(store, session_id, user_id)
    return await store.list_messages(session_id)


@router.post("/{session_id}/messages", response_model=DoubtMessage, status_code=status.HTTP_201_CREATED)
async def append_session_message(
    session_id: str,
    payload: MessageCreate,
    user_id: str = Depends(get_current_user_id),
    store: SessionStore = Depends(get_session_store),
):
    """Append a message to a session."""
    await _get_owned_session(store, session_id, user_id)
    return await store.append_message(session_id, payload.role, payload.content)
