"""
Snapshot store: append-only persistence of CodeGraph snapshots on disk.

Layout: ``<base_dir>/<quoted project id>/snapshot_<timestamp>.json``, one
file per (project, generated_at), each directly serializing the CodeGraph.
"""

import os
import tempfile
from datetime import UTC, datetime
from pathlib import Path
from urllib.parse import quote

from pydantic import ValidationError as PydanticValidationError

from codegraph.models.graph import CodeGraph
from codegraph.utils.exceptions import SnapshotStoreError, ValidationError
from codegraph.utils.logger import get_logger

logger = get_logger(__name__)

SNAPSHOT_PREFIX = "snapshot_"
SNAPSHOT_SUFFIX = ".json"


def snapshot_filename(generated_at: datetime) -> str:
    """
    File name for a snapshot taken at generated_at.

    Args:
        generated_at: Graph build time (naive values are taken as UTC)

    Returns:
        Name like "snapshot_20260101T120000123456.json"
    """
    if generated_at.tzinfo is None:
        generated_at = generated_at.replace(tzinfo=UTC)
    stamp = generated_at.astimezone(UTC).strftime("%Y%m%dT%H%M%S%f")
    return f"{SNAPSHOT_PREFIX}{stamp}{SNAPSHOT_SUFFIX}"


class SnapshotStore:
    """
    Filesystem-backed snapshot store.

    Snapshots are never overwritten. Writes land in a temporary file in the
    project directory and are hard-linked into place, which fails atomically
    when the target already exists, so a failed or racing write leaves the
    existing snapshot untouched.
    """

    def __init__(self, base_dir: str | Path):
        """
        Initialize snapshot store.

        Args:
            base_dir: Directory holding one sub-directory per project
        """
        self.base_dir = Path(base_dir)

    def _project_dir(self, project_id: str) -> Path:
        if not project_id or project_id in (".", ".."):
            raise ValidationError(
                f"Invalid project id for snapshots: {project_id!r}",
                context={"project_id": project_id},
            )
        return self.base_dir / quote(project_id, safe="")

    def save(self, project_id: str, graph: CodeGraph) -> Path:
        """
        Persist a snapshot.

        Args:
            project_id: Project the snapshot belongs to
            graph: Graph to persist (its project_id must match)

        Returns:
            Path of the written snapshot

        Raises:
            ValidationError: If the graph belongs to another project
            SnapshotStoreError: If a snapshot already exists for this timestamp
                or the write fails
        """
        if graph.project_id != project_id:
            raise ValidationError(
                f"Graph belongs to project {graph.project_id!r}, not {project_id!r}",
                context={"project_id": project_id, "graph_project_id": graph.project_id},
            )

        project_dir = self._project_dir(project_id)
        target = project_dir / snapshot_filename(graph.generated_at)

        try:
            project_dir.mkdir(parents=True, exist_ok=True)

            fd, tmp_name = tempfile.mkstemp(dir=project_dir, prefix=".tmp_", suffix=SNAPSHOT_SUFFIX)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(graph.to_json())
                # link() fails instead of replacing an existing snapshot
                os.link(tmp_name, target)
            except FileExistsError as e:
                raise SnapshotStoreError(
                    f"Snapshot already exists: {target.name}",
                    context={"project_id": project_id, "path": str(target)},
                ) from e
            finally:
                Path(tmp_name).unlink(missing_ok=True)
        except SnapshotStoreError:
            raise
        except OSError as e:
            logger.error(
                f"Failed to write snapshot for {project_id}",
                extra={"project_id": project_id, "error": str(e)},
            )
            raise SnapshotStoreError(
                f"Failed to write snapshot: {e}", context={"project_id": project_id}
            ) from e

        logger.info(
            f"Snapshot saved: {project_id}/{target.name}",
            extra={"project_id": project_id, "nodes": graph.node_count},
        )
        return target

    def list(self, project_id: str) -> list[CodeGraph]:
        """
        All snapshots of a project, newest first.

        Unreadable snapshot files are logged and skipped.

        Args:
            project_id: Project identifier

        Returns:
            Snapshots sorted by generated_at descending; empty if none

        Raises:
            SnapshotStoreError: If the project directory cannot be read
        """
        project_dir = self._project_dir(project_id)
        if not project_dir.is_dir():
            return []

        try:
            paths = sorted(project_dir.glob(f"{SNAPSHOT_PREFIX}*{SNAPSHOT_SUFFIX}"))
        except OSError as e:
            raise SnapshotStoreError(
                f"Failed to read snapshots: {e}", context={"project_id": project_id}
            ) from e

        graphs = []
        for path in paths:
            graph = self._load(path)
            if graph is not None:
                graphs.append(graph)

        graphs.sort(key=lambda g: g.generated_at, reverse=True)
        return graphs

    def get(self, project_id: str, generated_at: datetime) -> CodeGraph | None:
        """
        One snapshot by its timestamp.

        Args:
            project_id: Project identifier
            generated_at: Snapshot timestamp

        Returns:
            The snapshot, or None if absent
        """
        path = self._project_dir(project_id) / snapshot_filename(generated_at)
        if not path.exists():
            return None
        return self._load(path)

    def latest(self, project_id: str) -> CodeGraph | None:
        """Newest snapshot of a project, or None."""
        snapshots = self.list(project_id)
        return snapshots[0] if snapshots else None

    def _load(self, path: Path) -> CodeGraph | None:
        try:
            return CodeGraph.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, PydanticValidationError) as e:
            logger.warning(f"Failed to parse snapshot file {path.name}: {e}")
            return None
