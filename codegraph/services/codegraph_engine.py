"""
CodeGraph Engine - Integrates all components.

Brings together:
- Graph building, technology detection and snapshot timelines
- Architecture explanation and comparison through the LLM provider
- Analysis records and chat sessions on the key-value store
"""

import asyncio
from datetime import datetime

from codegraph.config import Config
from codegraph.core.graph.builder import build_code_graph
from codegraph.core.llm.base import LLMProvider
from codegraph.core.records.analysis_store import AnalysisRecordStore
from codegraph.core.records.chat_store import ChatStore
from codegraph.core.store.base import KeyValueStore
from codegraph.core.store.snapshot_store import SnapshotStore
from codegraph.models.analysis import (
    AnalysisCandidate,
    AnalysisRecord,
    ComparisonResult,
    Explanation,
)
from codegraph.models.chat import ChatExchange, ChatMessage, ChatSession
from codegraph.models.graph import CodeGraph
from codegraph.models.requests import (
    AnalysisRequest,
    AnalyzeRequest,
    ChatSendRequest,
    parse_request,
)
from codegraph.services.chat_orchestrator import ChatOrchestrator
from codegraph.services.comparator import ArchitectureComparator
from codegraph.services.explainer import ArchitectureExplainer
from codegraph.utils.exceptions import NotFoundError
from codegraph.utils.logger import get_logger

logger = get_logger(__name__)


class CodeGraphEngine:
    """
    Unified CodeGraph engine integrating all components.

    Features:
    - Analyze file lists into CodeGraphs and keep a snapshot timeline
    - Explain and compare architectures
    - Persist per-user analysis records
    - Grounded chat sessions over an analysis
    """

    def __init__(
        self,
        llm: LLMProvider,
        kv_store: KeyValueStore,
        snapshot_store: SnapshotStore,
        config: Config,
    ):
        """
        Initialize CodeGraph Engine.

        Args:
            llm: LLM provider for explanations, comparisons and chat
            kv_store: Key-value store for records and chat sessions
            snapshot_store: Filesystem snapshot timeline
            config: Configuration object
        """
        self.llm = llm
        self.config = config

        # Direct store references kept for infrastructure operations only (initialize, close)
        self.kv_store = kv_store
        self.snapshot_store = snapshot_store

        self.records = AnalysisRecordStore(kv_store)
        self.chat_store = ChatStore(kv_store, title_max_length=config.chat.title_max_length)

        self.explainer = ArchitectureExplainer(llm, config.explain)
        self.comparator = ArchitectureComparator(llm, config.comparison)
        self.chat = ChatOrchestrator(llm, self.chat_store, config.chat)

    async def initialize(self) -> None:
        """Initialize all stores."""
        logger.info("Initializing CodeGraph Engine")

        await self.kv_store.initialize()
        logger.info("Record store initialized")

        logger.info("CodeGraph Engine ready")

    async def close(self) -> None:
        """Close all connections."""
        logger.info("Closing CodeGraph Engine")
        await self.kv_store.close()
        await self.llm.close()
        logger.info("CodeGraph Engine closed")

    # ═══════════════════════════════════════════════════════════
    # ANALYSIS
    # ═══════════════════════════════════════════════════════════

    def analyze(self, request: AnalyzeRequest | dict) -> CodeGraph:
        """
        Build a CodeGraph from a file list and append it to the timeline.

        Args:
            request: Analyze request (or raw camelCase payload)

        Returns:
            The new graph

        Raises:
            ValidationError: If the request is malformed
            SnapshotStoreError: If the snapshot cannot be written
        """
        request = parse_request(AnalyzeRequest, request)

        graph = build_code_graph(request.project_id, request.files)
        self.snapshot_store.save(request.project_id, graph)

        logger.info(
            f"Analyzed {request.project_id}",
            extra={
                "project_id": request.project_id,
                "nodes": graph.node_count,
                "edges": graph.edge_count,
                "technologies": len(graph.technologies),
            },
        )
        return graph

    async def explain(self, project_id: str, graph: CodeGraph) -> Explanation:
        """Architecture narrative for a graph."""
        return await self.explainer.explain(project_id, graph)

    async def analyze_and_explain(
        self, user_id: str, request: AnalysisRequest | dict
    ) -> AnalysisRecord:
        """
        Analyze, explain and persist the user's record for a project.

        Re-analysis of the same project updates the existing record in place.

        Args:
            user_id: Record owner
            request: Analysis request (or raw camelCase payload)

        Returns:
            The saved record

        Raises:
            ValidationError: If the request is malformed
            LLMError: If the explanation fails; nothing is persisted to the record store
        """
        request = parse_request(AnalysisRequest, request)

        graph = await asyncio.to_thread(self.analyze, request)
        explanation = await self.explain(request.project_id, graph)

        candidate = AnalysisCandidate(
            project_id=request.project_id,
            display_name=request.display_name,
            source_type=request.source_type,
            file_graph=graph,
            file_summaries=request.file_summaries,
            technologies=explanation.technologies,
            summary_text=explanation.summary,
            architecture_explanation=explanation.architecture_explanation,
        )
        return await self.records.save(candidate, user_id)

    # ═══════════════════════════════════════════════════════════
    # COMPARISON & TIMELINE
    # ═══════════════════════════════════════════════════════════

    async def compare(self, current: CodeGraph, historical: CodeGraph) -> ComparisonResult:
        """Diff plus narrative for two graphs."""
        return await self.comparator.compare(current, historical)

    async def compare_snapshots(
        self, project_id: str, current_at: datetime, historical_at: datetime
    ) -> ComparisonResult:
        """
        Compare two stored snapshots of a project.

        Raises:
            NotFoundError: If either snapshot does not exist
        """
        # Snapshot reads are blocking file I/O
        current = await asyncio.to_thread(self.snapshot_store.get, project_id, current_at)
        historical = await asyncio.to_thread(self.snapshot_store.get, project_id, historical_at)
        missing = [
            at.isoformat()
            for at, graph in ((current_at, current), (historical_at, historical))
            if graph is None
        ]
        if missing:
            raise NotFoundError(
                f"Snapshot not found for {project_id}",
                context={"project_id": project_id, "generated_at": missing},
            )
        return await self.compare(current, historical)

    def timeline(self, project_id: str) -> list[CodeGraph]:
        """Snapshots of a project, newest first."""
        return self.snapshot_store.list(project_id)

    # ═══════════════════════════════════════════════════════════
    # RECORDS
    # ═══════════════════════════════════════════════════════════

    async def list_analyses(self, user_id: str) -> list[AnalysisRecord]:
        return await self.records.list_all(user_id)

    async def get_analysis(self, analysis_id: str, user_id: str) -> AnalysisRecord:
        """
        Raises:
            NotFoundError: If the record does not exist for this user
        """
        record = await self.records.get_by_id(analysis_id, user_id)
        if not record:
            raise NotFoundError(
                f"Analysis not found: {analysis_id}", context={"analysis_id": analysis_id}
            )
        return record

    async def delete_analysis(self, analysis_id: str, user_id: str) -> bool:
        """Delete a record and every chat session attached to it."""
        if not await self.records.delete(analysis_id, user_id):
            return False
        for session in await self.chat_store.list_sessions(user_id, analysis_id):
            await self.chat_store.delete_session(session.id, user_id)
        return True

    # ═══════════════════════════════════════════════════════════
    # CHAT
    # ═══════════════════════════════════════════════════════════

    async def ask(
        self,
        user_id: str,
        analysis_id: str,
        question: str,
        session_id: str | None = None,
    ) -> ChatExchange:
        """
        Ask a question about one of the user's analyses.

        Args:
            user_id: Asking user
            analysis_id: Analysis the question is about
            question: Question text
            session_id: Existing session, or None to start one

        Returns:
            Updated session with the persisted question and reply

        Raises:
            NotFoundError: If the analysis or session does not exist for this user
            ChatCompletionError: If the provider fails; the question stays
                persisted for the caller to retract
        """
        record = await self.get_analysis(analysis_id, user_id)

        session = None
        history = None
        if session_id:
            session = await self.get_session(session_id, user_id)
            history = await self.chat_store.get_messages(
                session.id, limit=self.config.chat.message_fetch_limit
            )

        return await self.chat.ask(session, record, history, question, user_id)

    async def chat_send(self, request: ChatSendRequest | dict) -> str:
        """Stateless chat reply from caller-supplied context."""
        return await self.chat.send(parse_request(ChatSendRequest, request))

    async def get_session(self, session_id: str, user_id: str) -> ChatSession:
        session = await self.chat_store.get_session(session_id, user_id)
        if not session:
            raise NotFoundError(
                f"Chat session not found: {session_id}", context={"session_id": session_id}
            )
        return session

    async def list_sessions(
        self, user_id: str, analysis_id: str | None = None
    ) -> list[ChatSession]:
        return await self.chat_store.list_sessions(user_id, analysis_id)

    async def get_messages(
        self, session_id: str, user_id: str, limit: int | None = None
    ) -> list[ChatMessage]:
        """Messages of one of the user's sessions, oldest first."""
        await self.get_session(session_id, user_id)
        return await self.chat_store.get_messages(
            session_id, limit=limit or self.config.chat.message_fetch_limit
        )

    async def rename_session(self, session_id: str, user_id: str, title: str) -> ChatSession:
        return await self.chat_store.rename_session(session_id, user_id, title)

    async def delete_session(self, session_id: str, user_id: str) -> bool:
        return await self.chat_store.delete_session(session_id, user_id)

    async def retract_message(self, session_id: str, message_id: str, user_id: str) -> bool:
        """
        Remove a message whose answer never arrived.

        Raises:
            NotFoundError: If the session does not exist for this user
        """
        return await self.chat_store.delete_message(session_id, message_id, user_id)
