"""
Chat store: persistence of chat sessions and their messages.

Sessions live under ``chat/sessions/<user_id>/<session_id>``; messages under
``chat/messages/<session_id>/<sequence>_<message_id>`` so that listing a
session's prefix returns them in append order.
"""

from datetime import UTC, datetime
from urllib.parse import quote

from pydantic import ValidationError as PydanticValidationError

from codegraph.core.store.base import KeyValueStore
from codegraph.models.chat import (
    DEFAULT_SESSION_TITLE,
    ChatMessage,
    ChatRole,
    ChatSession,
)
from codegraph.utils.exceptions import NotFoundError, RecordStoreError, ValidationError
from codegraph.utils.id_generator import generate_message_id, generate_session_id
from codegraph.utils.logger import get_logger

logger = get_logger(__name__)

SESSIONS = "chat/sessions"
MESSAGES = "chat/messages"


def _sessions_prefix(user_id: str) -> str:
    return f"{SESSIONS}/{quote(user_id, safe='')}/"


def _session_key(user_id: str, session_id: str) -> str:
    return f"{_sessions_prefix(user_id)}{quote(session_id, safe='')}"


def _messages_prefix(session_id: str) -> str:
    return f"{MESSAGES}/{quote(session_id, safe='')}/"


def _next_sequence(entries: list[tuple[str, str]]) -> int:
    if not entries:
        return 0
    last_key = entries[-1][0]
    return int(last_key.rsplit("/", 1)[-1].split("_", 1)[0]) + 1


def derive_title(content: str, max_length: int = 50) -> str:
    """
    Session title from the first user message.

    Args:
        content: Message text
        max_length: Characters kept before "..." is appended

    Returns:
        Stripped text, truncated with "..." when longer than max_length
    """
    text = content.strip()
    return f"{text[:max_length]}..." if len(text) > max_length else text


class ChatStore:
    """
    Chat sessions and append-only message logs.

    Sessions are owned by one user; lookups with another user's id behave
    as if the session did not exist.
    """

    def __init__(self, kv_store: KeyValueStore, title_max_length: int = 50):
        """
        Initialize chat store.

        Args:
            kv_store: Backing key-value store
            title_max_length: Length of titles derived from the first message
        """
        self.kv_store = kv_store
        self.title_max_length = title_max_length

    # ═══════════════════════════════════════════════════════════
    # SESSIONS
    # ═══════════════════════════════════════════════════════════

    async def create_session(
        self, analysis_id: str, user_id: str, title: str | None = None
    ) -> ChatSession:
        """
        Create a session tied to an analysis.

        Args:
            analysis_id: Owning AnalysisRecord id
            user_id: Session owner
            title: Optional explicit title (defaults to "New Chat")

        Returns:
            The new session
        """
        if not analysis_id or not user_id:
            raise ValidationError("analysis_id and user_id are required")

        session = ChatSession(
            id=generate_session_id(),
            project_analysis_id=analysis_id,
            user_id=user_id,
            title=title or DEFAULT_SESSION_TITLE,
            title_derived=bool(title),
        )
        await self._write_session(session)
        logger.info(
            f"Created chat session {session.id}",
            extra={"session_id": session.id, "analysis_id": analysis_id},
        )
        return session

    async def get_session(self, session_id: str, user_id: str) -> ChatSession | None:
        raw = await self.kv_store.get(_session_key(user_id, session_id))
        return self._decode(ChatSession, raw) if raw else None

    async def list_sessions(
        self, user_id: str, analysis_id: str | None = None
    ) -> list[ChatSession]:
        """Sessions of a user, optionally for one analysis, most recent first."""
        entries = await self.kv_store.list(_sessions_prefix(user_id))
        sessions = [self._decode(ChatSession, raw) for _, raw in entries]
        if analysis_id is not None:
            sessions = [s for s in sessions if s.project_analysis_id == analysis_id]
        sessions.sort(key=lambda s: s.updated_at, reverse=True)
        return sessions

    async def rename_session(self, session_id: str, user_id: str, title: str) -> ChatSession:
        """
        Set an explicit title. The first-message title is never derived afterwards.

        Raises:
            NotFoundError: If the session does not exist for this user
        """
        if not title or not title.strip():
            raise ValidationError("title cannot be empty")

        session = await self._require_session(session_id, user_id)
        session = session.model_copy(
            update={
                "title": title.strip(),
                "title_derived": True,
                "title_message_id": None,
                "updated_at": datetime.now(UTC),
            }
        )
        await self._write_session(session)
        return session

    async def delete_session(self, session_id: str, user_id: str) -> bool:
        """
        Delete a session and all its messages.

        Returns:
            True if the session existed
        """
        if not await self.kv_store.delete(_session_key(user_id, session_id)):
            return False

        for key, _ in await self.kv_store.list(_messages_prefix(session_id)):
            await self.kv_store.delete(key)

        logger.info(f"Deleted chat session {session_id}", extra={"user_id": user_id})
        return True

    # ═══════════════════════════════════════════════════════════
    # MESSAGES
    # ═══════════════════════════════════════════════════════════

    async def add_message(
        self, session_id: str, user_id: str, role: ChatRole, content: str
    ) -> ChatMessage:
        """
        Append a message and touch the session.

        The first user message with visible text replaces the default title;
        this happens once per session.

        Raises:
            NotFoundError: If the session does not exist for this user
        """
        session = await self._require_session(session_id, user_id)

        entries = await self.kv_store.list(_messages_prefix(session_id))
        sequence = _next_sequence(entries)

        message = ChatMessage(
            id=generate_message_id(),
            session_id=session_id,
            role=role,
            content=content,
        )
        await self.kv_store.set(
            f"{_messages_prefix(session_id)}{sequence:08d}_{message.id}",
            message.model_dump_json(by_alias=True),
        )

        update: dict = {"updated_at": message.created_at}
        if role == ChatRole.USER and not session.title_derived and content.strip():
            update["title"] = derive_title(content, self.title_max_length)
            update["title_derived"] = True
            update["title_message_id"] = message.id
        await self._write_session(session.model_copy(update=update))

        return message

    async def get_messages(self, session_id: str, limit: int | None = 20) -> list[ChatMessage]:
        """
        Messages of a session in chronological order.

        Args:
            session_id: Session id
            limit: Keep only the last N messages (None for all)
        """
        entries = await self.kv_store.list(_messages_prefix(session_id))
        messages = [self._decode(ChatMessage, raw) for _, raw in entries]
        # Stable sort keeps append order for equal timestamps
        messages.sort(key=lambda m: m.created_at)
        if limit is not None:
            messages = messages[-limit:] if limit > 0 else []
        return messages

    async def delete_message(self, session_id: str, message_id: str, user_id: str) -> bool:
        """
        Remove one message, e.g. a question whose answer failed.

        When the session title was derived from this message the title goes
        back to "New Chat" and the next user message derives it again.

        Returns:
            True if the message existed

        Raises:
            NotFoundError: If the session does not exist for this user
        """
        session = await self._require_session(session_id, user_id)

        for key, _ in await self.kv_store.list(_messages_prefix(session_id)):
            if key.endswith(f"_{message_id}"):
                break
        else:
            return False

        if not await self.kv_store.delete(key):
            return False

        if session.title_message_id == message_id:
            await self._write_session(
                session.model_copy(
                    update={
                        "title": DEFAULT_SESSION_TITLE,
                        "title_derived": False,
                        "title_message_id": None,
                    }
                )
            )
            logger.debug(
                f"Reset title of session {session_id}", extra={"message_id": message_id}
            )
        return True

    # ═══════════════════════════════════════════════════════════
    # HELPERS
    # ═══════════════════════════════════════════════════════════

    async def _require_session(self, session_id: str, user_id: str) -> ChatSession:
        session = await self.get_session(session_id, user_id)
        if not session:
            raise NotFoundError(
                f"Chat session not found: {session_id}", context={"session_id": session_id}
            )
        return session

    async def _write_session(self, session: ChatSession) -> None:
        await self.kv_store.set(
            _session_key(session.user_id, session.id), session.model_dump_json(by_alias=True)
        )

    @staticmethod
    def _decode(model, raw: str):
        try:
            return model.model_validate_json(raw)
        except PydanticValidationError as e:
            raise RecordStoreError(f"Corrupt {model.__name__}: {e}") from e
