"""
Pure graph computations.

- build_code_graph: file paths -> CodeGraph
- detect_technologies / detect_language: path heuristics
- diff_architectures: structural diff of two graphs
"""

from codegraph.core.graph.builder import ROOT_NODE_ID, build_code_graph
from codegraph.core.graph.differ import diff_architectures
from codegraph.core.graph.technologies import detect_language, detect_technologies

__all__ = [
    "ROOT_NODE_ID",
    "build_code_graph",
    "detect_language",
    "detect_technologies",
    "diff_architectures",
]
