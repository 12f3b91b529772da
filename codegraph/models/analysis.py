"""
Analysis models.

An AnalysisRecord bundles a CodeGraph with the AI-generated narrative for one
project and one user. Explanation, ArchitectureDiff and ComparisonResult are
the outputs of the explain and compare operations.
"""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from codegraph.models.graph import CodeGraph


class SourceType(str, Enum):
    """Where the analyzed project came from."""

    GITHUB = "github"
    LOCAL = "local"
    INTERNAL = "internal"


class CamelModel(BaseModel):
    """Mutable model with camelCase wire names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TechnologyInsight(CamelModel):
    """A technology described by the explainer, with a documentation link."""

    name: str
    description: str = ""
    deep_link: str = ""


class Explanation(CamelModel):
    """Architecture narrative produced for a CodeGraph."""

    summary: str
    architecture_explanation: str
    technologies: list[TechnologyInsight] = Field(default_factory=list)


class AnalysisCandidate(CamelModel):
    """
    Fields supplied by a caller saving an analysis.

    display_name and source_type may be omitted; the store defaults them to
    the project id and ``internal``.
    """

    project_id: str = Field(..., min_length=1)
    display_name: str | None = None
    source_type: SourceType | None = None
    file_graph: CodeGraph
    file_summaries: dict[str, str] = Field(default_factory=dict)
    technologies: list[TechnologyInsight] = Field(default_factory=list)
    summary_text: str = ""
    architecture_explanation: str = ""


class AnalysisRecord(CamelModel):
    """
    Durable bundle of a CodeGraph plus AI narrative for one project and user.

    One record per (project_id, user_id) is active; re-analysis replaces its
    graph in place.
    """

    id: str
    project_id: str
    user_id: str
    display_name: str
    source_type: SourceType = SourceType.INTERNAL
    file_graph: CodeGraph
    file_summaries: dict[str, str] = Field(default_factory=dict)
    technologies: list[TechnologyInsight] = Field(default_factory=list)
    summary_text: str = ""
    architecture_explanation: str = ""
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class ArchitectureDiff(CamelModel):
    """Structural difference between a current and a historical graph."""

    added_files: list[str] = Field(default_factory=list)
    removed_files: list[str] = Field(default_factory=list)
    added_technologies: list[str] = Field(default_factory=list)
    removed_technologies: list[str] = Field(default_factory=list)
    current_file_count: int = 0
    historical_file_count: int = 0
    current_tech_count: int = 0
    historical_tech_count: int = 0


class ComparisonResult(CamelModel):
    """Narrative plus the structural diff behind it."""

    explanation: str
    comparison: ArchitectureDiff
