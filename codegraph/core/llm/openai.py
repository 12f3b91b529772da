"""
OpenAI LLM provider using official SDK.
"""

from openai import AsyncOpenAI

from codegraph.core.llm.base import LLMProvider
from codegraph.models.chat import PromptMessage
from codegraph.utils.exceptions import LLMError, ValidationError
from codegraph.utils.logger import get_logger

logger = get_logger(__name__)


class OpenAILLM(LLMProvider):
    """
    OpenAI LLM provider for chat completions.

    Uses the official OpenAI SDK; JSON mode maps to
    ``response_format={"type": "json_object"}``.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o",
        organization: str | None = None,
        base_url: str | None = None,
        timeout: float = 120.0,
    ):
        """
        Initialize OpenAI LLM provider.

        Args:
            api_key: OpenAI API key
            model: Model name (e.g., "gpt-4o", "gpt-4o-mini")
            organization: Optional organization ID
            base_url: Optional custom base URL
            timeout: Request timeout in seconds
        """
        self.model = model

        self.client = AsyncOpenAI(
            api_key=api_key, organization=organization, base_url=base_url, timeout=timeout
        )

    async def chat(
        self,
        messages: list[PromptMessage],
        max_tokens: int = 2000,
        temperature: float = 0.0,
        json_mode: bool = False,
        **kwargs,
    ) -> str:
        """
        Generate a chat completion using OpenAI.

        Args:
            messages: Conversation turns
            max_tokens: Maximum tokens to generate
            temperature: Sampling temperature
            json_mode: Request a JSON object reply
            **kwargs: Additional parameters (e.g., stop, presence_penalty)
        Returns:
            Reply text
        Raises:
            LLMError: If OpenAI API call fails or returns no content
            ValidationError: If messages are empty
        """
        if not messages:
            raise ValidationError("Messages cannot be empty")

        params = {
            "model": self.model,
            "messages": [message.to_dict() for message in messages],
            "temperature": temperature,
            "max_tokens": max_tokens,
            **kwargs,
        }
        if json_mode:
            params["response_format"] = {"type": "json_object"}

        try:
            response = await self.client.chat.completions.create(**params)
        except Exception as e:
            logger.error(
                "OpenAI API error",
                extra={"model": self.model, "error": str(e), "error_type": type(e).__name__},
            )
            raise LLMError(f"OpenAI API error: {e}") from e

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise LLMError("OpenAI returned empty content")

        return content

    async def close(self):
        """Close OpenAI client."""
        await self.client.close()
