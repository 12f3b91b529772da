"""
ID generation utilities for CodeGraph.

Provides consistent ID generation for all entity types:
- Graph nodes: file:<path> / folder:<path> (deterministic)
- Analysis records: analysis_xxx
- Chat sessions: session_xxx
- Chat messages: msg_xxx
"""

from uuid import uuid4


def generate_node_id(node_type: str, path: str) -> str:
    """
    Generate a graph node ID from its type and path.

    The same (type, path) pair always yields the same ID, and distinct
    pairs never collide because the path is embedded verbatim.

    Args:
        node_type: "file" or "folder"
        path: Forward-slash separated path ("" for the root folder)

    Returns:
        ID in format "<type>:<path>"
    """
    return f"{node_type}:{path}"


def generate_analysis_id() -> str:
    """
    Generate unique AnalysisRecord ID.

    Returns:
        ID in format "analysis_xxx" where xxx is 12 hex characters
    """
    return f"analysis_{uuid4().hex[:12]}"


def generate_session_id() -> str:
    """
    Generate unique ChatSession ID.

    Returns:
        ID in format "session_xxx" where xxx is 12 hex characters
    """
    return f"session_{uuid4().hex[:12]}"


def generate_message_id() -> str:
    """
    Generate unique ChatMessage ID.

    Returns:
        ID in format "msg_xxx" where xxx is 12 hex characters
    """
    return f"msg_{uuid4().hex[:12]}"
