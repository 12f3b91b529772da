"""
Ollama LLM provider using native ollama-python SDK.
"""

import ollama

from codegraph.core.llm.base import LLMProvider
from codegraph.models.chat import PromptMessage
from codegraph.utils.exceptions import LLMError, ValidationError
from codegraph.utils.logger import get_logger

logger = get_logger(__name__)


class OllamaLLM(LLMProvider):
    """
    Ollama LLM provider for chat completions.

    Uses native ollama-python SDK; JSON mode maps to ``format="json"``.
    """

    def __init__(
        self,
        host: str = "http://localhost:11434",
        model: str = "llama3.1:8b",
        timeout: float = 120.0,
    ):
        """
        Initialize Ollama LLM provider.

        Args:
            host: Ollama server URL
            model: Model name for text generation (e.g., "llama3.1", "mistral")
            timeout: Request timeout in seconds
        """
        self.host = host
        self.model = model
        self.timeout = timeout

        self.client = ollama.AsyncClient(host=host, timeout=timeout)

    async def chat(
        self,
        messages: list[PromptMessage],
        max_tokens: int = 2000,
        temperature: float = 0.0,
        json_mode: bool = False,
        **kwargs,
    ) -> str:
        """
        Generate a chat completion using Ollama.

        Args:
            messages: Conversation turns
            max_tokens: Maximum tokens to generate
            temperature: Sampling temperature
            json_mode: Request a JSON reply
            **kwargs: Additional options (passed to Ollama)

        Returns:
            Reply text

        Raises:
            LLMError: If the Ollama call fails or returns no content
        """
        if not messages:
            raise ValidationError("Messages cannot be empty")

        options = {
            "temperature": temperature,
            "num_predict": max_tokens,
            **kwargs.get("options", {}),
        }

        try:
            response = await self.client.chat(
                model=self.model,
                messages=[message.to_dict() for message in messages],
                format="json" if json_mode else None,
                options=options,
                **{k: v for k, v in kwargs.items() if k != "options"},
            )
        except Exception as e:
            logger.error(
                "Ollama API error",
                extra={"model": self.model, "error": str(e), "error_type": type(e).__name__},
            )
            raise LLMError(f"Ollama API error: {e}") from e

        content = response["message"]["content"]
        if not content:
            raise LLMError("Ollama returned empty content")

        return content

    async def close(self):
        """Close client (Ollama SDK handles cleanup internally)."""
        pass
