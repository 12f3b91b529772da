"""
Chat Orchestrator - grounded Q&A about an analyzed project.

Assembles a bounded prompt from the project graph, file summaries and the
most recent conversation turns, then hands it to the LLM provider.

Session lifecycle:
    no session --(first question)--> active --(any question)--> active

There is no closing transition; a session can always take more messages.
"""

import asyncio
import json
from collections.abc import Sequence
from typing import Protocol

from codegraph.config import ChatConfig
from codegraph.core.llm.base import LLMProvider
from codegraph.core.records.chat_store import ChatStore
from codegraph.models.analysis import AnalysisRecord
from codegraph.models.chat import (
    ChatExchange,
    ChatMessage,
    ChatRole,
    ChatSession,
    PromptMessage,
    PromptRole,
)
from codegraph.models.graph import CodeGraph
from codegraph.models.requests import ChatSendRequest
from codegraph.utils.exceptions import ChatCompletionError, LLMError, ValidationError
from codegraph.utils.logger import get_logger

logger = get_logger(__name__)

TRUNCATION_MARKER = "\n... (truncated)"

SYSTEM_PROMPT = """You are an architecture analyst in a conversational chat about a code project. You have access to the project structure and key file content summaries.

CRITICAL RULES:
- Answer questions using the graph data and file content summaries provided
- Do NOT fabricate or assume missing code, files, or structure
- Use file content summaries to understand actual functionality when available
- If information is not in the graph or file summaries, explicitly state that it's not available
- Focus on structure, organization, file paths, technology stack, and actual code functionality
- Be precise and honest about what you can and cannot determine from the available information
- Maintain conversational context from previous messages
- Reference previous conversation when relevant

When answering:
- Reference specific nodes (files/folders) from the graph
- Mention detected technologies
- Explain relationships visible in the edges
- Use file content summaries to explain actual functionality and code behavior
- Combine structure analysis with code content understanding
- Keep responses conversational and natural"""


class HistoryTurn(Protocol):
    """Anything with a chat role and content (ChatMessage, HistoryMessage)."""

    role: ChatRole
    content: str


def truncate_summary(content: str, budget: int) -> str:
    """
    Cut a file summary to the character budget, marking the cut.

    Args:
        content: Summary text
        budget: Maximum characters kept

    Returns:
        The summary, or its first ``budget`` characters plus "(truncated)" marker
    """
    if len(content) <= budget:
        return content
    return content[:budget] + TRUNCATION_MARKER


class ChatOrchestrator:
    """
    Builds chat context and runs question/answer exchanges.

    The question is persisted before the provider call and the reply after
    it. When the call fails the question stays in the log and its id is
    reported so the caller can retract it.
    """

    def __init__(
        self,
        llm: LLMProvider,
        chat_store: ChatStore,
        config: ChatConfig | None = None,
    ):
        """
        Initialize chat orchestrator.

        Args:
            llm: LLM provider answering questions
            chat_store: Session and message persistence
            config: History, summary budget and completion settings
        """
        self.llm = llm
        self.chat_store = chat_store
        self.config = config or ChatConfig()

    # ═══════════════════════════════════════════════════════════
    # CONTEXT ASSEMBLY
    # ═══════════════════════════════════════════════════════════

    def build_system_context(
        self,
        project_id: str,
        graph: CodeGraph,
        file_summaries: dict[str, str] | None = None,
    ) -> str:
        """System block: instructions plus project facts and trimmed summaries."""
        technology_names = ", ".join(graph.technology_names()) or "None"
        structure = json.dumps(
            {
                "nodes": graph.node_count,
                "edges": graph.edge_count,
                "technologies": [
                    tech.model_dump(mode="json") for tech in graph.technologies
                ],
            },
            indent=2,
        )

        context = f"""Project ID: {project_id}
Generated at: {graph.generated_at.isoformat()}

Technologies Detected: {technology_names}

Code Graph Structure:
{structure}"""

        if file_summaries:
            context += "\n\nKey File Content Summaries:\n"
            for path, content in file_summaries.items():
                trimmed = truncate_summary(content, self.config.summary_char_budget)
                context += f"\n--- {path} ---\n{trimmed}\n"

        return f"{SYSTEM_PROMPT}\n\n{context}"

    def build_messages(
        self,
        project_id: str,
        graph: CodeGraph,
        file_summaries: dict[str, str] | None,
        history: Sequence[HistoryTurn],
        question: str,
    ) -> list[PromptMessage]:
        """
        Assemble the prompt for one question.

        Only the last ``history_limit`` turns are kept; older ones are
        dropped, never summarized.

        Args:
            project_id: Project identifier
            graph: Project graph
            file_summaries: path -> summary text
            history: Prior turns, oldest first
            question: New user question

        Returns:
            System block, recent history in order, then the question
        """
        if not question or not question.strip():
            raise ValidationError("question must be a non-empty string")

        limit = self.config.history_limit
        recent = list(history)[-limit:] if limit > 0 else []

        messages = [
            PromptMessage(
                role=PromptRole.SYSTEM,
                content=self.build_system_context(project_id, graph, file_summaries),
            )
        ]
        messages.extend(
            PromptMessage(role=PromptRole(ChatRole(turn.role).value), content=turn.content)
            for turn in recent
        )
        messages.append(PromptMessage(role=PromptRole.USER, content=question.strip()))
        return messages

    # ═══════════════════════════════════════════════════════════
    # EXCHANGES
    # ═══════════════════════════════════════════════════════════

    async def ask(
        self,
        session: ChatSession | None,
        record: AnalysisRecord,
        history: Sequence[ChatMessage] | None,
        question: str,
        user_id: str,
    ) -> ChatExchange:
        """
        Answer a question about an analyzed project.

        Args:
            session: Existing session, or None to start one
            record: Analysis the conversation is about
            history: Prior messages (loaded from the store when None)
            question: New user question
            user_id: Asking user

        Returns:
            Updated session, persisted question and persisted reply

        Raises:
            ValidationError: If the question is empty or the session belongs to another analysis
            ChatCompletionError: If the provider fails or times out; the
                question stays persisted and its id is in ``context["pending_message_id"]``
        """
        if not question or not question.strip():
            raise ValidationError("question must be a non-empty string")

        if session is None:
            session = await self.chat_store.create_session(record.id, user_id)
            history = []
        elif session.project_analysis_id != record.id:
            raise ValidationError(
                f"Session {session.id} belongs to another analysis",
                context={"session_id": session.id, "analysis_id": record.id},
            )

        if history is None:
            history = await self.chat_store.get_messages(
                session.id, limit=self.config.message_fetch_limit
            )

        messages = self.build_messages(
            record.project_id, record.file_graph, record.file_summaries, history, question
        )

        question_message = await self.chat_store.add_message(
            session.id, user_id, ChatRole.USER, question.strip()
        )

        try:
            reply = await self._complete(messages)
        except (LLMError, TimeoutError) as e:
            logger.error(
                f"Chat completion failed for session {session.id}",
                extra={
                    "session_id": session.id,
                    "error": str(e),
                    "error_type": type(e).__name__,
                },
            )
            raise ChatCompletionError(
                "Failed to get a reply from the AI service",
                context={
                    "session_id": session.id,
                    "pending_message_id": question_message.id,
                },
            ) from e

        reply_message = await self.chat_store.add_message(
            session.id, user_id, ChatRole.ASSISTANT, reply
        )
        session = await self.chat_store.get_session(session.id, user_id) or session

        logger.info(
            f"Answered question in session {session.id}",
            extra={"session_id": session.id, "history": len(messages) - 2},
        )
        return ChatExchange(session=session, question=question_message, reply=reply_message)

    def submit(
        self,
        session: ChatSession | None,
        record: AnalysisRecord,
        history: Sequence[ChatMessage] | None,
        question: str,
        user_id: str,
    ) -> asyncio.Task:
        """
        Schedule ask() as a cancellable task.

        Cancelling the task propagates into the provider call; a question
        already persisted stays in the log for the caller to retract.
        """
        return asyncio.create_task(self.ask(session, record, history, question, user_id))

    async def retract(self, message: ChatMessage, user_id: str) -> bool:
        """Remove a message whose answer never arrived, undoing a title it set."""
        removed = await self.chat_store.delete_message(message.session_id, message.id, user_id)
        if removed:
            logger.info(
                f"Retracted message {message.id}", extra={"session_id": message.session_id}
            )
        return removed

    async def send(self, request: ChatSendRequest) -> str:
        """
        Answer a question from context supplied entirely by the caller.

        Nothing is persisted.

        Args:
            request: Validated chat send request

        Returns:
            Reply text, verbatim
        """
        messages = self.build_messages(
            request.project_id,
            request.graph.to_code_graph(request.project_id),
            request.file_summaries,
            request.messages,
            request.new_question,
        )
        return await self._complete(messages)

    async def _complete(self, messages: list[PromptMessage]) -> str:
        call = self.llm.chat(
            messages,
            max_tokens=self.config.max_tokens,
            temperature=self.config.temperature,
        )
        if self.config.completion_timeout is None:
            return await call
        return await asyncio.wait_for(call, timeout=self.config.completion_timeout)
