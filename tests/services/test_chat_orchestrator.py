"""
Tests for chat context assembly and exchanges.
"""

import asyncio

import pytest

from codegraph.config import ChatConfig
from codegraph.core.graph.builder import build_code_graph
from codegraph.models.chat import ChatMessage, ChatRole, PromptRole
from codegraph.models.requests import ChatSendRequest
from codegraph.services.chat_orchestrator import (
    TRUNCATION_MARKER,
    ChatOrchestrator,
    truncate_summary,
)
from codegraph.utils.exceptions import ChatCompletionError, LLMError, ValidationError
from tests.fakes import FakeLLM


class SlowLLM(FakeLLM):
    """Provider that never answers in time."""

    async def chat(self, messages, **kwargs) -> str:
        await asyncio.sleep(10)
        return "too late"


def _history(count: int) -> list[ChatMessage]:
    return [
        ChatMessage(
            id=f"msg_{i}",
            session_id="session_1",
            role=ChatRole.USER if i % 2 == 0 else ChatRole.ASSISTANT,
            content=f"turn {i}",
        )
        for i in range(count)
    ]


@pytest.fixture
def orchestrator(fake_llm, chat_store):
    return ChatOrchestrator(fake_llm, chat_store, ChatConfig())


@pytest.mark.unit
class TestTruncateSummary:
    """Test per-file summary budgets."""

    def test_within_budget(self):
        """Test short summaries are untouched."""
        assert truncate_summary("short", 10) == "short"

    def test_over_budget(self):
        """Test long summaries are cut and marked."""
        assert truncate_summary("abcdefghij", 4) == "abcd" + TRUNCATION_MARKER


@pytest.mark.unit
class TestBuildMessages:
    """Test prompt assembly."""

    def test_history_trimmed_to_limit(self, orchestrator, sample_graph):
        """Test only the last ten of fifteen prior turns are kept, in order."""
        messages = orchestrator.build_messages("demo", sample_graph, {}, _history(15), "Next?")

        assert len(messages) == 12
        assert messages[0].role == PromptRole.SYSTEM
        assert [m.content for m in messages[1:-1]] == [f"turn {i}" for i in range(5, 15)]
        assert messages[1].role == PromptRole.ASSISTANT
        assert messages[-1].role == PromptRole.USER
        assert messages[-1].content == "Next?"

    def test_history_limit_zero(self, fake_llm, chat_store, sample_graph):
        """Test history can be disabled."""
        orchestrator = ChatOrchestrator(fake_llm, chat_store, ChatConfig(history_limit=0))
        messages = orchestrator.build_messages("demo", sample_graph, {}, _history(3), "Q")

        assert [m.role for m in messages] == [PromptRole.SYSTEM, PromptRole.USER]

    def test_system_block(self, orchestrator, sample_graph):
        """Test project facts in the system block."""
        system = orchestrator.build_messages("demo", sample_graph, None, [], "Q")[0].content

        assert "Project ID: demo" in system
        assert sample_graph.generated_at.isoformat() in system
        assert "JavaScript" in system
        assert '"nodes": 6' in system
        assert '"edges": 5' in system
        assert "Key File Content Summaries" not in system

    def test_no_technologies(self, orchestrator):
        """Test an empty technology list is stated explicitly."""
        graph = build_code_graph("bare", ["README"])
        system = orchestrator.build_messages("bare", graph, None, [], "Q")[0].content

        assert "Technologies Detected: None" in system

    def test_summaries_truncated(self, fake_llm, chat_store, sample_graph):
        """Test every summary respects the character budget."""
        orchestrator = ChatOrchestrator(
            fake_llm, chat_store, ChatConfig(summary_char_budget=10)
        )
        summaries = {"src/index.js": "s" * 30, "package.json": "short"}
        system = orchestrator.build_messages("demo", sample_graph, summaries, [], "Q")[0].content

        assert "--- src/index.js ---\n" + "s" * 10 + TRUNCATION_MARKER in system
        assert "s" * 11 not in system
        assert "--- package.json ---\nshort\n" in system

    def test_question_stripped(self, orchestrator, sample_graph):
        """Test the final user turn is the stripped question."""
        messages = orchestrator.build_messages("demo", sample_graph, {}, [], "  Why?  \n")
        assert messages[-1].content == "Why?"

    @pytest.mark.parametrize("question", ["", "   ", "\n\t"])
    def test_blank_question(self, orchestrator, sample_graph, question):
        """Test blank questions are rejected."""
        with pytest.raises(ValidationError):
            orchestrator.build_messages("demo", sample_graph, {}, [], question)


@pytest.mark.unit
class TestAsk:
    """Test persisted question/answer exchanges."""

    async def test_first_question_creates_session(
        self, orchestrator, fake_llm, chat_store, analysis_record
    ):
        """Test a session is started and both turns are persisted."""
        fake_llm.replies = ["It is a Node.js app."]

        exchange = await orchestrator.ask(
            None, analysis_record, None, "What is this project?", "user-1"
        )

        assert exchange.session.project_analysis_id == analysis_record.id
        assert exchange.session.title == "What is this project?"
        assert exchange.question.content == "What is this project?"
        assert exchange.reply.content == "It is a Node.js app."
        messages = await chat_store.get_messages(exchange.session.id)
        assert [(m.role, m.content) for m in messages] == [
            (ChatRole.USER, "What is this project?"),
            (ChatRole.ASSISTANT, "It is a Node.js app."),
        ]

    async def test_reply_is_verbatim(self, orchestrator, fake_llm, analysis_record):
        """Test the reply is stored without post-processing."""
        fake_llm.replies = ["  ```\ncode\n```  "]

        exchange = await orchestrator.ask(None, analysis_record, None, "Q", "user-1")

        assert exchange.reply.content == "  ```\ncode\n```  "

    async def test_history_loaded_from_store(
        self, orchestrator, fake_llm, chat_store, analysis_record
    ):
        """Test prior turns of the session reach the provider."""
        first = await orchestrator.ask(None, analysis_record, None, "First?", "user-1")

        await orchestrator.ask(first.session, analysis_record, None, "Second?", "user-1")

        sent = fake_llm.calls[-1]["messages"]
        assert [m.content for m in sent[1:]] == ["First?", "ok", "Second?"]

    async def test_uses_record_context(self, orchestrator, fake_llm, analysis_record):
        """Test the record's graph and summaries feed the system block."""
        await orchestrator.ask(None, analysis_record, None, "Q", "user-1")

        system = fake_llm.calls[0]["messages"][0].content
        assert "Project ID: demo" in system
        assert "Starts the server" in system

    async def test_session_of_other_analysis(
        self, orchestrator, chat_store, analysis_record
    ):
        """Test a session cannot be reused for another analysis."""
        session = await chat_store.create_session("analysis_other", "user-1")

        with pytest.raises(ValidationError):
            await orchestrator.ask(session, analysis_record, [], "Q", "user-1")

    async def test_failure_leaves_retractable_question(
        self, orchestrator, fake_llm, chat_store, analysis_record
    ):
        """Test a provider failure keeps the question and reports its id."""
        fake_llm.replies = [LLMError("boom")]

        with pytest.raises(ChatCompletionError) as exc_info:
            await orchestrator.ask(None, analysis_record, None, "Will this fail?", "user-1")

        context = exc_info.value.context
        messages = await chat_store.get_messages(context["session_id"])
        assert [m.id for m in messages] == [context["pending_message_id"]]

        assert await orchestrator.retract(messages[0], "user-1") is True
        assert await chat_store.get_messages(context["session_id"]) == []

    async def test_retracted_first_question_releases_title(
        self, orchestrator, fake_llm, chat_store, analysis_record
    ):
        """Test the next question titles the session after a retraction."""
        fake_llm.replies = [LLMError("boom"), "It starts in src/index.js"]

        with pytest.raises(ChatCompletionError) as exc_info:
            await orchestrator.ask(
                None, analysis_record, None, "First question that failed", "user-1"
            )
        session_id = exc_info.value.context["session_id"]
        pending = await chat_store.get_messages(session_id)
        await orchestrator.retract(pending[0], "user-1")

        session = await chat_store.get_session(session_id, "user-1")
        assert session.title == "New Chat"
        assert session.title_derived is False

        exchange = await orchestrator.ask(
            session, analysis_record, None, "Second question answered", "user-1"
        )

        assert exchange.session.title == "Second question answered"

    async def test_timeout(self, chat_store, analysis_record):
        """Test the optional completion timeout."""
        orchestrator = ChatOrchestrator(
            SlowLLM(), chat_store, ChatConfig(completion_timeout=0.01)
        )

        with pytest.raises(ChatCompletionError) as exc_info:
            await orchestrator.ask(None, analysis_record, None, "Q", "user-1")

        assert isinstance(exc_info.value.__cause__, TimeoutError)
        assert exc_info.value.context["pending_message_id"].startswith("msg_")

    async def test_submit_is_cancellable(self, chat_store, analysis_record):
        """Test cancelling the task stops the exchange."""
        orchestrator = ChatOrchestrator(SlowLLM(), chat_store, ChatConfig())

        task = orchestrator.submit(None, analysis_record, None, "Q", "user-1")
        await asyncio.sleep(0.05)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

        sessions = await chat_store.list_sessions("user-1")
        messages = await chat_store.get_messages(sessions[0].id)
        assert [m.role for m in messages] == [ChatRole.USER]


@pytest.mark.unit
class TestSend:
    """Test the stateless chat interface."""

    async def test_send(self, orchestrator, fake_llm, chat_store, sample_graph):
        """Test the reply comes from request-supplied context only."""
        fake_llm.replies = ["Reply"]
        request = ChatSendRequest.model_validate(
            {
                "sessionId": "s1",
                "projectId": "demo",
                "graph": sample_graph.model_dump(mode="json", by_alias=True),
                "fileSummaries": {"package.json": "manifest"},
                "messages": [
                    {"role": "user", "content": "Hi"},
                    {"role": "assistant", "content": "Hello"},
                ],
                "newQuestion": "What runs first?",
            }
        )

        assert await orchestrator.send(request) == "Reply"

        sent = fake_llm.calls[0]["messages"]
        assert [m.content for m in sent[1:]] == ["Hi", "Hello", "What runs first?"]
        assert "manifest" in sent[0].content
        assert await chat_store.list_sessions("user-1") == []

    async def test_send_uses_chat_settings(self, fake_llm, chat_store, sample_graph):
        """Test token and temperature settings reach the provider."""
        orchestrator = ChatOrchestrator(
            fake_llm, chat_store, ChatConfig(max_tokens=123, temperature=0.5)
        )
        request = ChatSendRequest(
            session_id="s1",
            project_id="demo",
            graph=sample_graph.model_dump(mode="json", by_alias=True),
            new_question="Q",
        )

        await orchestrator.send(request)

        assert fake_llm.calls[0]["max_tokens"] == 123
        assert fake_llm.calls[0]["temperature"] == 0.5
