"""
Factory for creating LLM providers.
"""

from codegraph.config import LLMConfig
from codegraph.core.llm.base import LLMProvider
from codegraph.core.llm.ollama import OllamaLLM
from codegraph.core.llm.openai import OpenAILLM
from codegraph.utils.exceptions import ConfigurationError


class LLMFactory:
    """Factory for creating LLM providers from configuration."""

    @staticmethod
    def create(config: LLMConfig) -> LLMProvider:
        """
        Create LLM provider from configuration.

        Args:
            config: LLM configuration

        Returns:
            LLM provider instance

        Raises:
            ConfigurationError: If provider is not supported or the API key is missing
        """
        if config.provider == "ollama":
            return OllamaLLM(
                host=config.base_url or "http://localhost:11434",
                model=config.model,
                timeout=config.timeout,
            )
        elif config.provider == "openai":
            if not config.api_key:
                raise ConfigurationError(
                    "AI service is not configured. Set CODEGRAPH_LLM_API_KEY or OPENAI_API_KEY."
                )
            return OpenAILLM(
                api_key=config.api_key,
                model=config.model,
                base_url=config.base_url,
                timeout=config.timeout,
            )
        else:
            raise ConfigurationError(f"Unsupported LLM provider: {config.provider}")
