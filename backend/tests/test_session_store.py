"""
Unit tests for file-backed storage: LocalStorage, SessionStore and DoubtLimitStorage.
"""

import pytest
from datetime import date

from doubtdesk.models import SessionStatus, MessageRole
from doubtdesk.storage import (
    SessionStoreError,
    SessionNotFoundError,
    InvalidStatusTransition,
    DoubtLimitStorage,
    init_session_store,
    get_session_store,
)


class TestLocalStorage:

    @pytest.mark.asyncio
    async def test_save_and_load(self, local_storage):
        assert await local_storage.save("a/b.txt", "hello")
        assert await local_storage.load("a/b.txt") == b"hello"
        assert await local_storage.exists("a/b.txt")

    @pytest.mark.asyncio
    async def test_save_replaces(self, local_storage):
        await local_storage.save("s.json", "old content, longer")
        await local_storage.save("s.json", b"new")
        assert await local_storage.load("s.json") == b"new"
        assert await local_storage.list("") == ["s.json"]

    @pytest.mark.asyncio
    async def test_missing_file(self, local_storage):
        assert await local_storage.load("nope.txt") is None
        assert await local_storage.list("nope") == []

    @pytest.mark.asyncio
    async def test_append(self, local_storage):
        await local_storage.append("log.jsonl", "1\n")
        await local_storage.append("log.jsonl", "2\n")
        assert await local_storage.load("log.jsonl") == b"1\n2\n"

    @pytest.mark.asyncio
    async def test_path_traversal_rejected(self, local_storage):
        assert await local_storage.save("../escape.txt", "x") is False
        assert await local_storage.load("../../etc/passwd") is None

    @pytest.mark.asyncio
    async def test_list_skips_hidden_files(self, local_storage):
        await local_storage.save("d/x.json", "{}")
        await local_storage.save("d/y.json", "{}")
        (local_storage.root / "d" / ".x.json.abc.tmp").write_text("partial")
        assert await local_storage.list("d") == ["d/x.json", "d/y.json"]


class TestSessionStore:

    @pytest.mark.asyncio
    async def test_create_and_get(self, session_store):
        session = await session_store.create_session("user-1", title="What is Newton's second l...")
        loaded = await session_store.get_session(session.id)

        assert loaded is not None
        assert loaded.user_id == "user-1"
        assert loaded.title == "What is Newton's second l..."
        assert loaded.status == SessionStatus.OPEN

    @pytest.mark.asyncio
    async def test_get_unknown(self, session_store):
        assert await session_store.get_session("missing") is None

    @pytest.mark.asyncio
    async def test_resolve(self, session_store):
        session = await session_store.create_session("user-1")
        resolved = await session_store.set_status(session.id, SessionStatus.RESOLVED)

        assert resolved.is_resolved
        assert (await session_store.get_session(session.id)).status == SessionStatus.RESOLVED

    @pytest.mark.asyncio
    async def test_resolve_is_idempotent(self, session_store):
        session = await session_store.create_session("user-1")
        await session_store.set_status(session.id, SessionStatus.RESOLVED)
        again = await session_store.set_status(session.id, SessionStatus.RESOLVED)
        assert again.status == SessionStatus.RESOLVED

    @pytest.mark.asyncio
    async def test_never_reopens(self, session_store):
        session = await session_store.create_session("user-1")
        await session_store.set_status(session.id, SessionStatus.RESOLVED)

        with pytest.raises(InvalidStatusTransition):
            await session_store.set_status(session.id, SessionStatus.OPEN)
        assert (await session_store.get_session(session.id)).status == SessionStatus.RESOLVED

    @pytest.mark.asyncio
    async def test_set_status_unknown_session(self, session_store):
        with pytest.raises(SessionNotFoundError):
            await session_store.set_status("missing", SessionStatus.RESOLVED)

    @pytest.mark.asyncio
    async def test_messages_in_order(self, session_store):
        session = await session_store.create_session("user-1")
        await session_store.append_message(session.id, MessageRole.USER, "What is inertia?")
        await session_store.append_message(session.id, MessageRole.MENTOR, "Resistance to change.")
        await session_store.append_message(session.id, MessageRole.USER, "Thanks")

        messages = await session_store.list_messages(session.id)

        assert [m.content for m in messages] == ["What is inertia?", "Resistance to change.", "Thanks"]
        assert [m.role for m in messages] == [MessageRole.USER, MessageRole.MENTOR, MessageRole.USER]
        assert all(m.session_id == session.id for m in messages)
        assert len({m.id for m in messages}) == 3

    @pytest.mark.asyncio
    async def test_append_bumps_updated_at(self, session_store):
        session = await session_store.create_session("user-1")
        message = await session_store.append_message(session.id, MessageRole.USER, "hi")
        loaded = await session_store.get_session(session.id)
        assert loaded.updated_at == message.created_at

    @pytest.mark.asyncio
    async def test_append_to_unknown_session(self, session_store):
        with pytest.raises(SessionNotFoundError):
            await session_store.append_message("missing", MessageRole.USER, "hi")

    @pytest.mark.asyncio
    async def test_list_messages_empty(self, session_store):
        session = await session_store.create_session("user-1")
        assert await session_store.list_messages(session.id) == []

    @pytest.mark.asyncio
    async def test_corrupt_message_line_skipped(self, session_store, local_storage):
        session = await session_store.create_session("user-1")
        await session_store.append_message(session.id, MessageRole.USER, "ok")
        await local_storage.append(f"doubts/messages/{session.id}.jsonl", "not json\n")

        messages = await session_store.list_messages(session.id)
        assert [m.content for m in messages] == ["ok"]

    @pytest.mark.asyncio
    async def test_list_sessions(self, session_store):
        first = await session_store.create_session("user-1", title="first")
        second = await session_store.create_session("user-1", title="second")
        await session_store.create_session("user-2", title="other user")
        await session_store.append_message(first.id, MessageRole.USER, "bump")
        await session_store.set_status(second.id, SessionStatus.RESOLVED)
        await session_store.append_message(first.id, MessageRole.USER, "bump again")

        sessions = await session_store.list_sessions("user-1")
        assert [s.title for s in sessions] == ["first", "second"]

        open_sessions = await session_store.list_sessions("user-1", status=SessionStatus.OPEN)
        assert [s.id for s in open_sessions] == [first.id]

        assert len(await session_store.list_sessions("user-1", limit=1)) == 1

    @pytest.mark.asyncio
    async def test_write_failure_raises(self, session_store, local_storage, monkeypatch):
        async def failing_save(*args, **kwargs):
            return False

        monkeypatch.setattr(local_storage, "save", failing_save)
        with pytest.raises(SessionStoreError):
            await session_store.create_session("user-1")


class TestSessionStoreGlobal:

    def test_init_and_get(self, local_storage):
        store = init_session_store(local_storage)
        assert get_session_store() is store
        assert store.storage is local_storage


class TestDoubtLimitStorage:

    @pytest.mark.asyncio
    async def test_counts_up_to_limit(self, local_storage):
        limits = DoubtLimitStorage(local_storage)
        today = date(2026, 3, 1)

        results = [await limits.check_and_increment("user-1", 3, today=today) for _ in range(4)]

        assert [r.allowed for r in results] == [True, True, True, False]
        assert [r.count for r in results] == [1, 2, 3, 3]
        assert results[-1].limit == 3

    @pytest.mark.asyncio
    async def test_resets_on_new_day(self, local_storage):
        limits = DoubtLimitStorage(local_storage)
        for _ in range(2):
            await limits.check_and_increment("user-1", 2, today=date(2026, 3, 1))

        result = await limits.check_and_increment("user-1", 2, today=date(2026, 3, 2))
        assert result.allowed is True
        assert result.count == 1

    @pytest.mark.asyncio
    async def test_users_are_independent(self, local_storage):
        limits = DoubtLimitStorage(local_storage)
        today = date(2026, 3, 1)
        await limits.check_and_increment("user-1", 1, today=today)

        assert (await limits.check_and_increment("user-1", 1, today=today)).allowed is False
        assert (await limits.check_and_increment("user-2", 1, today=today)).allowed is True
