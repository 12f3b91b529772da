"""
Services for CodeGraph.

High-level business logic services:
- CodeGraphEngine: Unified interface for all CodeGraph operations
- ArchitectureExplainer: AI narrative for a graph
- ArchitectureComparator: Diff and narrative for two snapshots
- ChatOrchestrator: Grounded chat context assembly and exchanges
"""

from codegraph.services.chat_orchestrator import ChatOrchestrator
from codegraph.services.codegraph_engine import CodeGraphEngine
from codegraph.services.comparator import ArchitectureComparator
from codegraph.services.explainer import ArchitectureExplainer

__all__ = [
    "CodeGraphEngine",
    "ArchitectureExplainer",
    "ArchitectureComparator",
    "ChatOrchestrator",
]
