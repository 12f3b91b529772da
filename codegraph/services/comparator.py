"""
Architecture Comparator - explains how a project evolved between two snapshots.
"""

from codegraph.config import ComparisonConfig
from codegraph.core.graph.differ import diff_architectures
from codegraph.core.llm.base import LLMProvider
from codegraph.models.analysis import ArchitectureDiff, ComparisonResult
from codegraph.models.graph import CodeGraph
from codegraph.utils.logger import get_logger

logger = get_logger(__name__)

NO_EXPLANATION = "No explanation generated."

SYSTEM_PROMPT = """You are an architecture analyst specializing in code evolution. Analyze the differences between two architecture snapshots and explain why the architecture evolved.

CRITICAL RULES:
- Focus on structural changes, file movement, technology shifts, and refactoring intent
- Explain the "why" behind changes, not just "what" changed
- Identify patterns: refactoring, feature additions, dependency changes, architectural improvements
- Be concise but insightful
- Do not fabricate information not present in the comparison data"""


def _sample(items: list[str], size: int) -> str:
    text = ", ".join(items[:size])
    return f"{text}..." if len(items) > size else text


def _change_line(label: str, items: list[str], total: int, size: int) -> str:
    if not items:
        return f"No {label.lower()}"
    return f"{label} ({total}): {_sample(items, size)}"


class ArchitectureComparator:
    """Diffs two graphs and asks the LLM to narrate the change."""

    def __init__(self, llm: LLMProvider, config: ComparisonConfig | None = None):
        """
        Initialize comparator.

        Args:
            llm: LLM provider used for the narrative
            config: Diff cap, prompt sampling and token settings
        """
        self.llm = llm
        self.config = config or ComparisonConfig()

    def build_prompt(
        self, current: CodeGraph, historical: CodeGraph, diff: ArchitectureDiff
    ) -> str:
        """
        User prompt describing both snapshots and the capped diff.

        Args:
            current: Snapshot B
            historical: Snapshot A
            diff: Capped diff of current against historical
        """
        path_sample = self.config.prompt_path_sample
        change_sample = self.config.prompt_change_sample
        full = diff_architectures(current, historical)

        historical_techs = ", ".join(historical.technology_names()) or "None"
        current_techs = ", ".join(current.technology_names()) or "None"

        changes = [
            _change_line("Added Files", diff.added_files, len(full.added_files), change_sample),
            _change_line(
                "Removed Files", diff.removed_files, len(full.removed_files), change_sample
            ),
            (
                f"Added Technologies: {', '.join(diff.added_technologies)}"
                if diff.added_technologies
                else "No technologies added"
            ),
            (
                f"Removed Technologies: {', '.join(diff.removed_technologies)}"
                if diff.removed_technologies
                else "No technologies removed"
            ),
        ]

        return f"""Explain why the architecture evolved between these two snapshots:

SNAPSHOT A (Historical):
- Files: {diff.historical_file_count}
- Technologies: {historical_techs}
- File paths: {_sample(historical.file_paths(), path_sample)}

SNAPSHOT B (Current):
- Files: {diff.current_file_count}
- Technologies: {current_techs}
- File paths: {_sample(current.file_paths(), path_sample)}

CHANGES DETECTED:
{chr(10).join(changes)}

Provide a clear explanation of why these architectural changes occurred."""

    async def compare(self, current: CodeGraph, historical: CodeGraph) -> ComparisonResult:
        """
        Compare two graphs.

        Args:
            current: Graph treated as current (snapshot B)
            historical: Graph treated as historical (snapshot A)

        Returns:
            Narrative plus the capped diff

        Raises:
            LLMError: If the provider fails
        """
        diff = diff_architectures(current, historical, max_entries=self.config.max_diff_entries)

        logger.info(
            f"Comparing snapshots of {current.project_id}: "
            f"+{len(diff.added_files)}/-{len(diff.removed_files)} files, "
            f"+{len(diff.added_technologies)}/-{len(diff.removed_technologies)} technologies"
        )

        reply = await self.llm.complete(
            self.build_prompt(current, historical, diff),
            system_prompt=SYSTEM_PROMPT,
            max_tokens=self.config.max_tokens,
            temperature=self.config.temperature,
        )

        explanation = reply if reply.strip() else NO_EXPLANATION
        return ComparisonResult(explanation=explanation, comparison=diff)
