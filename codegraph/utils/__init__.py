"""Utility modules for CodeGraph."""

from codegraph.utils.exceptions import (
    ChatCompletionError,
    CodeGraphError,
    ConfigurationError,
    LLMError,
    NotFoundError,
    RecordStoreError,
    ResponseParseError,
    SnapshotStoreError,
    StoreError,
    ValidationError,
)
from codegraph.utils.id_generator import (
    generate_analysis_id,
    generate_message_id,
    generate_node_id,
    generate_session_id,
)
from codegraph.utils.json_response import parse_json_response, strip_code_fences
from codegraph.utils.logger import get_logger, setup_logging

__all__ = [
    # Logging
    "get_logger",
    "setup_logging",
    # ID Generators
    "generate_node_id",
    "generate_analysis_id",
    "generate_session_id",
    "generate_message_id",
    # JSON replies
    "parse_json_response",
    "strip_code_fences",
    # Exceptions
    "CodeGraphError",
    "StoreError",
    "SnapshotStoreError",
    "RecordStoreError",
    "ValidationError",
    "NotFoundError",
    "ConfigurationError",
    "LLMError",
    "ResponseParseError",
    "ChatCompletionError",
]
