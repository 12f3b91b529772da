"""
Abstract base class for LLM providers.
Handles chat completions over a sequence of role-tagged messages.
"""

from abc import ABC, abstractmethod

from codegraph.models.chat import PromptMessage, PromptRole


class LLMProvider(ABC):
    """
    Abstract base for LLM text generation providers.

    Responsibilities:
    - Chat completion over system/user/assistant turns
    - Optional JSON mode for structured replies
    """

    @abstractmethod
    async def chat(
        self,
        messages: list[PromptMessage],
        max_tokens: int = 2000,
        temperature: float = 0.0,
        json_mode: bool = False,
        **kwargs,
    ) -> str:
        """
        Generate the next assistant turn.

        Args:
            messages: Conversation so far, oldest first
            max_tokens: Maximum tokens to generate
            temperature: Sampling temperature (0.0 = deterministic, 1.0 = creative)
            json_mode: Ask the provider to emit a JSON object
            **kwargs: Provider-specific parameters

        Returns:
            Reply text, verbatim

        Raises:
            ValidationError: If messages are empty
            LLMError: If the provider call fails
        """
        pass

    async def complete(
        self,
        prompt: str,
        system_prompt: str | None = None,
        max_tokens: int = 2000,
        temperature: float = 0.0,
        json_mode: bool = False,
        **kwargs,
    ) -> str:
        """
        Single-prompt convenience wrapper around chat().

        Args:
            prompt: User prompt
            system_prompt: Optional system instructions
        """
        messages = []
        if system_prompt:
            messages.append(PromptMessage(role=PromptRole.SYSTEM, content=system_prompt))
        messages.append(PromptMessage(role=PromptRole.USER, content=prompt))
        return await self.chat(
            messages,
            max_tokens=max_tokens,
            temperature=temperature,
            json_mode=json_mode,
            **kwargs,
        )

    @abstractmethod
    async def close(self):
        """
        Close any open connections.
        Optional to override if provider needs cleanup.
        """
