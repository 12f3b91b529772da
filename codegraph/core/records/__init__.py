"""Record stores built on the key-value store: analyses and chat sessions."""

from codegraph.core.records.analysis_store import AnalysisRecordStore
from codegraph.core.records.chat_store import ChatStore, derive_title

__all__ = [
    "AnalysisRecordStore",
    "ChatStore",
    "derive_title",
]
