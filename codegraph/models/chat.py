"""Chat session and message models."""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DEFAULT_SESSION_TITLE = "New Chat"


class ChatRole(str, Enum):
    """Roles that can appear in a persisted conversation."""

    USER = "user"
    ASSISTANT = "assistant"


class PromptRole(str, Enum):
    """Roles understood by completion providers."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class ChatSession(BaseModel):
    """
    Conversation thread scoped to one AnalysisRecord.

    The title starts as "New Chat" and is replaced once by the first user
    message; ``title_derived`` records that the transition already happened
    and ``title_message_id`` names the message the title came from, so that
    retracting that message restores the default title.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    project_analysis_id: str
    user_id: str
    title: str = DEFAULT_SESSION_TITLE
    title_derived: bool = False
    title_message_id: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class ChatMessage(BaseModel):
    """Append-only message in a chat session."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    session_id: str
    role: ChatRole
    content: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class PromptMessage(BaseModel):
    """One turn handed to an LLM provider."""

    role: PromptRole
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role.value, "content": self.content}


class ChatExchange(BaseModel):
    """Result of asking a question in a session."""

    session: ChatSession
    question: ChatMessage
    reply: ChatMessage
