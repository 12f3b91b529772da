"""
Code graph models.

A CodeGraph is the node/edge representation of a project's file/folder
hierarchy plus the technologies detected from its paths. Graphs are frozen:
a new analysis produces a new CodeGraph rather than mutating an old one.
"""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class NodeType(str, Enum):
    """Types of nodes in the code graph."""

    FILE = "file"
    FOLDER = "folder"


class EdgeType(str, Enum):
    """Types of edges in the code graph."""

    CONTAINS = "contains"


class TechnologyCategory(str, Enum):
    """Categories of detected technologies."""

    LANGUAGE = "language"
    FRAMEWORK = "framework"
    RUNTIME = "runtime"
    TOOLING = "tooling"


class GraphModel(BaseModel):
    """Base for graph models: frozen, camelCase on the wire."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class GraphNode(GraphModel):
    """A file or folder in the project tree."""

    id: str
    type: NodeType
    name: str
    path: str
    language: str | None = None


class GraphEdge(GraphModel):
    """Directed containment edge from a folder to a file or folder."""

    source: str = Field(..., alias="from")
    target: str = Field(..., alias="to")
    type: EdgeType = EdgeType.CONTAINS


class DetectedTechnology(GraphModel):
    """A technology tag inferred from file paths."""

    name: str
    category: TechnologyCategory


class CodeGraph(GraphModel):
    """Structured graph of one project at one point in time."""

    project_id: str
    generated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    nodes: tuple[GraphNode, ...] = ()
    edges: tuple[GraphEdge, ...] = ()
    technologies: tuple[DetectedTechnology, ...] = ()

    @field_validator("generated_at")
    @classmethod
    def as_utc(cls, value: datetime) -> datetime:
        """Naive timestamps are taken as UTC so snapshots always compare."""
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        return len(self.edges)

    def file_paths(self) -> list[str]:
        """Paths of all file nodes, in graph order."""
        return [node.path for node in self.nodes if node.type == NodeType.FILE]

    def technology_names(self) -> list[str]:
        """Distinct technology names, in detection order."""
        return list(dict.fromkeys(tech.name for tech in self.technologies))

    def to_json(self, indent: int | None = 2) -> str:
        """Serialize using the camelCase wire shape."""
        return self.model_dump_json(by_alias=True, indent=indent)
