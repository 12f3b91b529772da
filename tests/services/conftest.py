"""Fixtures for service tests.

Services run against the in-memory key-value store, a temporary snapshot
directory and the scripted FakeLLM from the root conftest; no external
provider is contacted.
"""

import json

import pytest

from codegraph.config import Config, SnapshotConfig, StoreConfig
from codegraph.core.records.analysis_store import AnalysisRecordStore
from codegraph.models.analysis import AnalysisCandidate

EXPLANATION = {
    "summary": "A small Node.js project",
    "architectureExplanation": "Sources live under src with helpers in src/utils.",
    "technologies": [
        {"name": "Node.js", "description": "Runtime"},
        {"name": "Express", "description": "HTTP server"},
    ],
}


@pytest.fixture
def explanation_json() -> str:
    return json.dumps(EXPLANATION)


@pytest.fixture
def test_config(tmp_path) -> Config:
    """Configuration pointing every store at test-local resources."""
    return Config(
        store=StoreConfig(backend="memory"),
        snapshots=SnapshotConfig(base_dir=str(tmp_path / "snapshots")),
    )


@pytest.fixture
async def analysis_record(kv_store, sample_graph):
    """Persisted analysis of the sample project for user-1."""
    records = AnalysisRecordStore(kv_store)
    return await records.save(
        AnalysisCandidate(
            project_id="demo",
            file_graph=sample_graph,
            file_summaries={"src/index.js": "Starts the server"},
        ),
        "user-1",
    )
