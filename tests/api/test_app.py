"""
Tests for the HTTP API.

The lifespan is not started; an engine wired to the in-memory store, a
temporary snapshot directory and a scripted LLM is installed directly.
"""

import asyncio
import inspect
import json

import pytest
from fastapi.testclient import TestClient

import app as app_module
from codegraph.config import Config, SnapshotConfig, StoreConfig
from codegraph.core.factory import StoreFactory
from codegraph.services.codegraph_engine import CodeGraphEngine
from codegraph.utils.exceptions import LLMError
from tests.fakes import FakeLLM

FILES = ["src/index.js", "src/utils/helpers.js", "package.json"]
USER = {"X-User-Id": "user-1"}
EXPLANATION = json.dumps(
    {
        "summary": "A small Node.js project",
        "architectureExplanation": "Sources live under src.",
        "technologies": [{"name": "Node.js", "description": "Runtime"}],
    }
)


@pytest.fixture
def llm():
    return FakeLLM([EXPLANATION])


@pytest.fixture
def client(llm, tmp_path, monkeypatch):
    config = Config(
        store=StoreConfig(backend="memory"),
        snapshots=SnapshotConfig(base_dir=str(tmp_path / "snapshots")),
    )
    engine = CodeGraphEngine(
        llm=llm,
        kv_store=StoreFactory.create(config.store),
        snapshot_store=StoreFactory.create_snapshot_store(config.snapshots),
        config=config,
    )
    asyncio.run(engine.initialize())
    monkeypatch.setattr(app_module, "engine", engine)
    return TestClient(app_module.app)


def create_analysis(client) -> dict:
    response = client.post(
        "/codegraph/analysis", json={"projectId": "demo", "files": FILES}, headers=USER
    )
    assert response.status_code == 200
    return response.json()


@pytest.mark.unit
class TestAnalysisEndpoints:
    """Test analysis and snapshot endpoints."""

    def test_analyze(self, client):
        """Test graph building over HTTP."""
        response = client.post("/codegraph/analyze", json={"projectId": "demo", "files": FILES})

        assert response.status_code == 200
        body = response.json()
        assert body["projectId"] == "demo"
        assert len(body["nodes"]) == 6
        assert {"from", "to", "type"} == set(body["edges"][0])

    def test_blocking_endpoints_are_sync(self):
        """Test endpoints doing snapshot file I/O run in the threadpool."""
        assert not inspect.iscoroutinefunction(app_module.analyze)
        assert not inspect.iscoroutinefunction(app_module.list_snapshots)

    def test_analyze_rejects_missing_files(self, client):
        """Test malformed bodies never reach the engine."""
        response = client.post("/codegraph/analyze", json={"projectId": "demo"})
        assert response.status_code == 422

    def test_create_and_fetch_analysis(self, client):
        """Test the persisted record is readable by its owner only."""
        record = create_analysis(client)

        assert record["userId"] == "user-1"
        assert record["summaryText"] == "A small Node.js project"

        response = client.get(f"/codegraph/analyses/{record['id']}", headers=USER)
        assert response.status_code == 200

        response = client.get(
            f"/codegraph/analyses/{record['id']}", headers={"X-User-Id": "user-2"}
        )
        assert response.status_code == 404

    def test_missing_user_header(self, client):
        """Test user-scoped endpoints require the header."""
        assert client.get("/codegraph/analyses").status_code == 422

    def test_snapshot_timeline(self, client):
        """Test analyses appear on the timeline."""
        client.post("/codegraph/analyze", json={"projectId": "demo", "files": FILES})

        response = client.get("/codegraph/snapshots/demo")

        assert response.status_code == 200
        assert len(response.json()) == 1


@pytest.mark.unit
class TestChatEndpoints:
    """Test chat endpoints."""

    def test_ask_starts_session(self, client, llm):
        """Test a first question creates a titled session."""
        record = create_analysis(client)
        llm.replies.append("It starts in src/index.js")

        response = client.post(
            "/codegraph/chat/ask",
            json={"analysisId": record["id"], "question": "Where does it start?"},
            headers=USER,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["reply"] == "It starts in src/index.js"
        assert body["title"] == "Where does it start?"

        messages = client.get(f"/codegraph/sessions/{body['sessionId']}/messages", headers=USER)
        assert [m["role"] for m in messages.json()] == ["user", "assistant"]

    def test_ask_provider_failure(self, client, llm):
        """Test the pending question id is returned on failure."""
        record = create_analysis(client)
        llm.replies.append(LLMError("provider down"))

        response = client.post(
            "/codegraph/chat/ask",
            json={"analysisId": record["id"], "question": "Where does it start?"},
            headers=USER,
        )

        assert response.status_code == 502
        body = response.json()
        assert body["pendingMessageId"]

        retract = client.delete(
            f"/codegraph/sessions/{body['sessionId']}/messages/{body['pendingMessageId']}",
            headers=USER,
        )
        assert retract.status_code == 200

    def test_ask_unknown_analysis(self, client):
        """Test asking about a missing analysis."""
        response = client.post(
            "/codegraph/chat/ask",
            json={"analysisId": "analysis_missing", "question": "Hi"},
            headers=USER,
        )
        assert response.status_code == 404

    def test_chat_send(self, client, llm):
        """Test stateless chat."""
        llm.replies[:] = ["Two folders"]

        response = client.post(
            "/codegraph/chat/send",
            json={
                "sessionId": "s1",
                "projectId": "demo",
                "graph": {"nodes": [], "edges": []},
                "newQuestion": "How many folders?",
            },
        )

        assert response.status_code == 200
        assert response.json() == {"reply": "Two folders"}


@pytest.mark.unit
class TestServiceEndpoints:
    """Test health and root endpoints."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["engine_initialized"] is True

    def test_engine_not_initialized(self, monkeypatch):
        """Test requests before startup are refused."""
        monkeypatch.setattr(app_module, "engine", None)
        client = TestClient(app_module.app)

        response = client.post("/codegraph/analyze", json={"projectId": "demo", "files": FILES})

        assert response.status_code == 503
