"""
Request schemas validated at the boundary.

Every payload entering the engine is parsed through one of these models so
that missing or mistyped fields are rejected before any core logic runs.
"""

from datetime import UTC, datetime
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from codegraph.models.analysis import SourceType
from codegraph.models.chat import ChatRole
from codegraph.models.graph import CodeGraph, DetectedTechnology, GraphEdge, GraphNode
from codegraph.utils.exceptions import ValidationError

RequestT = TypeVar("RequestT", bound=BaseModel)


class RequestModel(BaseModel):
    """Strict camelCase request body."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


def _check_file_path(path: str) -> str:
    if not path or not path.strip():
        raise ValueError("file paths must be non-empty strings")
    if "\\" in path:
        raise ValueError(f"file paths must be forward-slash separated: {path!r}")
    if path.startswith("/") or path.endswith("/") or "//" in path:
        raise ValueError(f"file paths must be relative with no empty segments: {path!r}")
    return path


class GraphPayload(RequestModel):
    """A CodeGraph as supplied by a client; nodes and edges are mandatory."""

    project_id: str = ""
    generated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    nodes: list[GraphNode]
    edges: list[GraphEdge]
    technologies: list[DetectedTechnology] = Field(default_factory=list)

    def to_code_graph(self, project_id: str | None = None) -> CodeGraph:
        return CodeGraph(
            project_id=project_id or self.project_id,
            generated_at=self.generated_at,
            nodes=tuple(self.nodes),
            edges=tuple(self.edges),
            technologies=tuple(self.technologies),
        )


class AnalyzeRequest(RequestModel):
    """Analyze: build a CodeGraph from a flat file list."""

    project_id: str = Field(..., min_length=1)
    files: list[str] = Field(..., min_length=1)

    @field_validator("files")
    @classmethod
    def validate_files(cls, files: list[str]) -> list[str]:
        return [_check_file_path(path) for path in files]


class AnalysisRequest(AnalyzeRequest):
    """Analyze, explain and persist an AnalysisRecord."""

    file_summaries: dict[str, str] = Field(default_factory=dict)
    display_name: str | None = None
    source_type: SourceType | None = None


class ExplainRequest(RequestModel):
    """Explain: narrative for an existing graph."""

    project_id: str = Field(..., min_length=1)
    graph: GraphPayload


class CompareRequest(RequestModel):
    """Compare: diff and narrative for two graphs."""

    current_graph: GraphPayload
    historical_graph: GraphPayload


class HistoryMessage(RequestModel):
    """A prior chat turn supplied by the client."""

    role: ChatRole
    content: str


class ChatSendRequest(RequestModel):
    """Chat send: stateless question answered from the supplied context."""

    session_id: str = Field(..., min_length=1)
    project_id: str = Field(..., min_length=1)
    graph: GraphPayload
    file_summaries: dict[str, str] = Field(default_factory=dict)
    messages: list[HistoryMessage] = Field(default_factory=list)
    new_question: str

    @field_validator("new_question")
    @classmethod
    def validate_question(cls, question: str) -> str:
        if not question.strip():
            raise ValueError("newQuestion must be a non-empty string")
        return question


class ChatAskRequest(RequestModel):
    """Ask a question within a persisted session."""

    analysis_id: str = Field(..., min_length=1)
    question: str
    session_id: str | None = None

    @field_validator("question")
    @classmethod
    def validate_question(cls, question: str) -> str:
        if not question.strip():
            raise ValueError("question must be a non-empty string")
        return question


class RenameSessionRequest(RequestModel):
    """Explicit session rename."""

    title: str = Field(..., min_length=1)


def parse_request(model: type[RequestT], payload: dict[str, Any] | RequestT) -> RequestT:
    """
    Validate a raw payload against a request model.

    Args:
        model: Request model class
        payload: Raw dict (camelCase or snake_case keys) or an already-built model

    Returns:
        Validated request

    Raises:
        ValidationError: Naming the first offending field
    """
    if isinstance(payload, model):
        return payload
    try:
        return model.model_validate(payload)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or model.__name__
        raise ValidationError(
            f"{field}: {first['msg']}",
            context={"errors": e.errors(include_url=False, include_context=False)},
        ) from e
