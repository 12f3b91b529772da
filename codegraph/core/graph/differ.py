"""
Architecture differ: structural comparison of two CodeGraphs.

Plain set difference on file paths and technology names. There is no rename
detection: a moved file is reported as one removal plus one addition.
"""

from codegraph.models.analysis import ArchitectureDiff
from codegraph.models.graph import CodeGraph


def _difference(left: list[str], right: list[str]) -> list[str]:
    """Items of ``left`` missing from ``right``, keeping ``left``'s order."""
    excluded = set(right)
    return [item for item in dict.fromkeys(left) if item not in excluded]


def diff_architectures(
    current: CodeGraph,
    historical: CodeGraph,
    max_entries: int | None = None,
) -> ArchitectureDiff:
    """
    Compute the structural diff between two graphs.

    The graphs are treated as "current" and "historical" regardless of which
    one is actually newer.

    Args:
        current: Graph compared against the baseline
        historical: Baseline graph
        max_entries: Optional cap applied to each list; counts are unaffected

    Returns:
        ArchitectureDiff
    """
    current_files = current.file_paths()
    historical_files = historical.file_paths()
    current_techs = current.technology_names()
    historical_techs = historical.technology_names()

    added_files = _difference(current_files, historical_files)
    removed_files = _difference(historical_files, current_files)
    added_techs = _difference(current_techs, historical_techs)
    removed_techs = _difference(historical_techs, current_techs)

    if max_entries is not None:
        added_files = added_files[:max_entries]
        removed_files = removed_files[:max_entries]
        added_techs = added_techs[:max_entries]
        removed_techs = removed_techs[:max_entries]

    return ArchitectureDiff(
        added_files=added_files,
        removed_files=removed_files,
        added_technologies=added_techs,
        removed_technologies=removed_techs,
        current_file_count=len(set(current_files)),
        historical_file_count=len(set(historical_files)),
        current_tech_count=len(current_techs),
        historical_tech_count=len(historical_techs),
    )
