"""
Architecture Explainer - AI narrative for a CodeGraph.

Asks the LLM to describe the project structure using only the supplied
graph, parses its JSON reply and attaches documentation links to every
technology it mentions.
"""

from urllib.parse import quote_plus

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from codegraph.config import ExplainConfig
from codegraph.core.llm.base import LLMProvider
from codegraph.models.analysis import Explanation, TechnologyInsight
from codegraph.models.graph import CodeGraph
from codegraph.utils.exceptions import ResponseParseError
from codegraph.utils.json_response import parse_json_response
from codegraph.utils.logger import get_logger

logger = get_logger(__name__)

TECHNOLOGY_DEEP_LINKS: dict[str, str] = {
    "React": "https://react.dev",
    "Next.js": "https://nextjs.org",
    "Python": "https://python.org",
    "Docker": "https://docker.com",
    "Node.js": "https://nodejs.org",
    "TypeScript": "https://www.typescriptlang.org",
    "JavaScript": "https://developer.mozilla.org/en-US/docs/Web/JavaScript",
    "Java": "https://www.java.com",
    "Maven": "https://maven.apache.org",
}

SEARCH_FALLBACK_URL = "https://www.google.com/search?q={query}"

SYSTEM_PROMPT = """You are an architecture analyst. You must ONLY analyze the provided graph JSON. Do not assume unseen files or structure.

Rules:
- Analyze ONLY the graph structure provided
- Do not invent or assume files that are not in the graph
- Do not reference code content (you don't have access to it)
- Focus on structure, organization, and technology stack
- Provide clear, concise explanations
- Identify architectural patterns from the graph structure

Output format (JSON):
{
  "summary": "Brief overview of the project structure",
  "architectureExplanation": "Detailed explanation of the architecture and organization",
  "technologies": [
    {
      "name": "Technology name",
      "description": "How this technology is used in the project"
    }
  ]
}"""


def get_technology_deep_link(name: str) -> str:
    """
    Documentation URL for a technology.

    Args:
        name: Technology name as reported by the LLM

    Returns:
        Known documentation URL, or a web search URL for unmapped names
    """
    normalized = name.strip()
    if normalized in TECHNOLOGY_DEEP_LINKS:
        return TECHNOLOGY_DEEP_LINKS[normalized]
    return SEARCH_FALLBACK_URL.format(query=quote_plus(normalized))


class ExplainedTechnology(BaseModel):
    """Technology entry in the LLM reply."""

    model_config = {"extra": "ignore"}

    name: str | None = None
    description: str | None = None


class ExplanationPayload(BaseModel):
    """Expected JSON shape of the LLM reply."""

    model_config = {"extra": "ignore", "populate_by_name": True}

    summary: str
    architecture_explanation: str = Field(..., alias="architectureExplanation")
    technologies: list[ExplainedTechnology]


def build_explain_prompt(project_id: str, graph: CodeGraph) -> str:
    return f"""Analyze this code graph and provide an architecture explanation.

Project ID: {project_id}
Generated at: {graph.generated_at.isoformat()}

Graph Structure:
{graph.to_json()}

Provide a comprehensive analysis of:
1. Project structure and organization
2. Technology stack and how technologies are used
3. Architectural patterns visible in the graph
4. File organization and hierarchy"""


class ArchitectureExplainer:
    """Produces Explanations for CodeGraphs through an LLM provider."""

    def __init__(self, llm: LLMProvider, config: ExplainConfig | None = None):
        """
        Initialize explainer.

        Args:
            llm: LLM provider used for the narrative
            config: Token/temperature settings
        """
        self.llm = llm
        self.config = config or ExplainConfig()

    async def explain(self, project_id: str, graph: CodeGraph) -> Explanation:
        """
        Explain a project's architecture.

        Args:
            project_id: Project identifier
            graph: Graph to explain

        Returns:
            Explanation with deep-linked technologies

        Raises:
            LLMError: If the provider fails
            ResponseParseError: If the reply is not the expected JSON object
        """
        logger.info(
            f"Explaining architecture of {project_id}",
            extra={"project_id": project_id, "nodes": graph.node_count},
        )

        raw = await self.llm.complete(
            build_explain_prompt(project_id, graph),
            system_prompt=SYSTEM_PROMPT,
            max_tokens=self.config.max_tokens,
            temperature=self.config.temperature,
            json_mode=True,
        )

        data = parse_json_response(raw)
        try:
            payload = ExplanationPayload.model_validate(data)
        except PydanticValidationError as e:
            logger.error(f"Invalid explanation structure for {project_id}: {e}")
            raise ResponseParseError(
                "AI response has an invalid structure", context={"project_id": project_id}
            ) from e

        return Explanation(
            summary=payload.summary,
            architecture_explanation=payload.architecture_explanation,
            technologies=[
                TechnologyInsight(
                    name=tech.name or "",
                    description=tech.description or "",
                    deep_link=get_technology_deep_link(tech.name or ""),
                )
                for tech in payload.technologies
            ],
        )
