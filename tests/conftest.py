"""
Shared test fixtures for all test modules.
"""

from datetime import UTC, datetime

import pytest

from codegraph.core.graph.builder import build_code_graph
from codegraph.core.records.chat_store import ChatStore
from codegraph.core.store.memory_store import InMemoryKeyValueStore
from codegraph.core.store.snapshot_store import SnapshotStore
from tests.fakes import FakeLLM

SAMPLE_FILES = ["src/index.js", "src/utils/helpers.js", "package.json"]


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
async def kv_store():
    store = InMemoryKeyValueStore()
    await store.initialize()
    yield store
    await store.close()


@pytest.fixture
def chat_store(kv_store):
    return ChatStore(kv_store)


@pytest.fixture
def snapshot_store(tmp_path):
    return SnapshotStore(base_dir=tmp_path / "snapshots")


@pytest.fixture
def sample_graph():
    """Graph of a small Node.js project."""
    return build_code_graph(
        "demo",
        SAMPLE_FILES,
        generated_at=datetime(2026, 1, 1, 12, 0, tzinfo=UTC),
    )
