"""
Custom exception hierarchy for CodeGraph.

Provides structured error types for better error handling and debugging.
All exceptions inherit from CodeGraphError for easy catching.
"""


class CodeGraphError(Exception):
    """
    Base exception for all CodeGraph errors.
    All custom exceptions should inherit from this class.
    """

    def __init__(self, message: str, context: dict | None = None):
        """
        Initialize CodeGraph error.
        Args:
            message: Error message
            context: Optional context dictionary with additional error details
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}


class StoreError(CodeGraphError):
    """
    Base exception for store operations.
    Used for errors related to data storage operations.
    """

    pass


class SnapshotStoreError(StoreError):
    """
    Snapshot store operation errors.
    Raised when a snapshot cannot be written or read.
    """

    pass


class RecordStoreError(StoreError):
    """
    Key-value backed record store errors.
    Raised when analysis records, sessions or messages cannot be persisted.
    """

    pass


class ValidationError(CodeGraphError):
    """
    Validation errors.
    Raised when input validation fails or data is invalid.
    """

    pass


class NotFoundError(CodeGraphError):
    """
    Resource not found errors.
    Raised when a requested resource (analysis, session, snapshot) doesn't exist.
    """

    pass


class ConfigurationError(CodeGraphError):
    """
    Configuration errors.
    Raised when configuration is invalid or missing required values.
    """

    pass


class LLMError(CodeGraphError):
    """
    LLM operation errors.
    Raised when LLM operations fail (API errors, timeouts, etc.).
    """

    pass


class ResponseParseError(LLMError):
    """
    Raised when an LLM reply cannot be parsed into the expected structure.
    """

    pass


class ChatCompletionError(LLMError):
    """
    Raised when a chat answer could not be produced.

    The context carries ``pending_message_id``: the user message that was
    already appended and can be retracted by the caller.
    """

    pass
