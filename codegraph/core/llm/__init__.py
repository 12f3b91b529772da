"""
LLM provider abstraction layer for chat completions.

Supported providers:
- OpenAI (official SDK)
- Ollama (native SDK)
"""
from codegraph.core.llm.base import LLMProvider
from codegraph.core.llm.ollama import OllamaLLM
from codegraph.core.llm.openai import OpenAILLM

__all__ = [
    "LLMProvider",
    "OllamaLLM",
    "OpenAILLM",
]
