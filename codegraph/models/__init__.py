"""
Data models for CodeGraph.

Core models:
- CodeGraph, GraphNode, GraphEdge, DetectedTechnology: the project graph
- AnalysisRecord, AnalysisCandidate, Explanation, TechnologyInsight: AI analysis
- ArchitectureDiff, ComparisonResult: snapshot comparison
- ChatSession, ChatMessage, PromptMessage, ChatExchange: Q&A sessions
- Request schemas validated at the boundary
"""

from codegraph.models.analysis import (
    AnalysisCandidate,
    AnalysisRecord,
    ArchitectureDiff,
    ComparisonResult,
    Explanation,
    SourceType,
    TechnologyInsight,
)
from codegraph.models.chat import (
    DEFAULT_SESSION_TITLE,
    ChatExchange,
    ChatMessage,
    ChatRole,
    ChatSession,
    PromptMessage,
    PromptRole,
)
from codegraph.models.graph import (
    CodeGraph,
    DetectedTechnology,
    EdgeType,
    GraphEdge,
    GraphNode,
    NodeType,
    TechnologyCategory,
)
from codegraph.models.requests import (
    AnalysisRequest,
    AnalyzeRequest,
    ChatAskRequest,
    ChatSendRequest,
    CompareRequest,
    ExplainRequest,
    GraphPayload,
    HistoryMessage,
    RenameSessionRequest,
    parse_request,
)

__all__ = [
    # Graph models
    "CodeGraph",
    "GraphNode",
    "GraphEdge",
    "DetectedTechnology",
    "NodeType",
    "EdgeType",
    "TechnologyCategory",
    # Analysis models
    "AnalysisRecord",
    "AnalysisCandidate",
    "Explanation",
    "TechnologyInsight",
    "SourceType",
    "ArchitectureDiff",
    "ComparisonResult",
    # Chat models
    "ChatSession",
    "ChatMessage",
    "ChatRole",
    "PromptMessage",
    "PromptRole",
    "ChatExchange",
    "DEFAULT_SESSION_TITLE",
    # Requests
    "GraphPayload",
    "AnalyzeRequest",
    "AnalysisRequest",
    "ExplainRequest",
    "CompareRequest",
    "HistoryMessage",
    "ChatSendRequest",
    "ChatAskRequest",
    "RenameSessionRequest",
    "parse_request",
]
