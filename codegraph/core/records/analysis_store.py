"""
Analysis record store.

Keeps one active AnalysisRecord per (project_id, user_id) in the injected
key-value store under ``analysis/<user_id>/<project_id>``. Re-analysis merges
into the existing record instead of creating a duplicate.
"""

from datetime import UTC, datetime, timedelta
from urllib.parse import quote

from pydantic import ValidationError as PydanticValidationError

from codegraph.core.store.base import KeyValueStore
from codegraph.models.analysis import AnalysisCandidate, AnalysisRecord, SourceType
from codegraph.utils.exceptions import RecordStoreError, ValidationError
from codegraph.utils.id_generator import generate_analysis_id
from codegraph.utils.logger import get_logger

logger = get_logger(__name__)

NAMESPACE = "analysis"


def _user_prefix(user_id: str) -> str:
    return f"{NAMESPACE}/{quote(user_id, safe='')}/"


def _record_key(user_id: str, project_id: str) -> str:
    return f"{_user_prefix(user_id)}{quote(project_id, safe='')}"


class AnalysisRecordStore:
    """Persistence of AnalysisRecords, scoped by owner."""

    def __init__(self, kv_store: KeyValueStore):
        """
        Initialize analysis record store.

        Args:
            kv_store: Backing key-value store
        """
        self.kv_store = kv_store

    async def save(self, candidate: AnalysisCandidate, user_id: str) -> AnalysisRecord:
        """
        Create or update the record for (candidate.project_id, user_id).

        Omitted display_name/source_type default to the project id and
        ``internal``.

        Args:
            candidate: Fields to persist
            user_id: Owner of the record

        Returns:
            The saved record

        Raises:
            ValidationError: If user_id is empty or the graph belongs to another project
            RecordStoreError: If the write fails
        """
        if not user_id:
            raise ValidationError("user_id cannot be empty")
        if candidate.file_graph.project_id != candidate.project_id:
            raise ValidationError(
                "fileGraph.projectId must match projectId",
                context={
                    "project_id": candidate.project_id,
                    "graph_project_id": candidate.file_graph.project_id,
                },
            )

        fields = {
            "project_id": candidate.project_id,
            "display_name": candidate.display_name or candidate.project_id,
            "source_type": candidate.source_type or SourceType.INTERNAL,
            "file_graph": candidate.file_graph,
            "file_summaries": dict(candidate.file_summaries),
            "technologies": list(candidate.technologies),
            "summary_text": candidate.summary_text,
            "architecture_explanation": candidate.architecture_explanation,
        }

        now = datetime.now(UTC)
        existing = await self.get_by_project_id(candidate.project_id, user_id)

        if existing:
            # updated_at strictly increases even within one clock tick
            now = max(now, existing.updated_at + timedelta(microseconds=1))
            record = existing.model_copy(update={**fields, "user_id": user_id, "updated_at": now})
            logger.info(
                f"Updating analysis {record.id} for project {candidate.project_id}",
                extra={"analysis_id": record.id, "user_id": user_id},
            )
        else:
            record = AnalysisRecord(
                id=generate_analysis_id(),
                user_id=user_id,
                created_at=now,
                updated_at=now,
                **fields,
            )
            logger.info(
                f"Creating analysis {record.id} for project {candidate.project_id}",
                extra={"analysis_id": record.id, "user_id": user_id},
            )

        await self.kv_store.set(
            _record_key(user_id, record.project_id), record.model_dump_json(by_alias=True)
        )
        return record

    async def get_by_project_id(self, project_id: str, user_id: str) -> AnalysisRecord | None:
        """The user's record for a project, or None."""
        raw = await self.kv_store.get(_record_key(user_id, project_id))
        return self._decode(raw) if raw else None

    async def get_by_id(self, analysis_id: str, user_id: str) -> AnalysisRecord | None:
        """
        A record by id, only if owned by user_id.

        Another user's record is reported as not found.
        """
        for record in await self.list_all(user_id):
            if record.id == analysis_id:
                return record
        return None

    async def list_all(self, user_id: str) -> list[AnalysisRecord]:
        """Every record owned by user_id, most recently updated first."""
        entries = await self.kv_store.list(_user_prefix(user_id))
        records = [self._decode(raw) for _, raw in entries]
        records.sort(key=lambda r: r.updated_at, reverse=True)
        return records

    async def delete(self, analysis_id: str, user_id: str) -> bool:
        """
        Delete a record owned by user_id.

        Returns:
            True if a record was removed
        """
        record = await self.get_by_id(analysis_id, user_id)
        if not record:
            return False
        deleted = await self.kv_store.delete(_record_key(user_id, record.project_id))
        if deleted:
            logger.info(f"Deleted analysis {analysis_id}", extra={"user_id": user_id})
        return deleted

    @staticmethod
    def _decode(raw: str) -> AnalysisRecord:
        try:
            return AnalysisRecord.model_validate_json(raw)
        except PydanticValidationError as e:
            raise RecordStoreError(f"Corrupt analysis record: {e}") from e
