"""
Tests for LLM base class.
"""

import pytest

from codegraph.core.llm.base import LLMProvider
from codegraph.models.chat import PromptRole
from tests.fakes import FakeLLM


@pytest.mark.unit
@pytest.mark.asyncio
class TestLLMProviderBase:
    """Test base LLM provider functionality."""

    async def test_abstract_instantiation(self):
        """Test that abstract class cannot be instantiated."""
        with pytest.raises(TypeError, match="Can't instantiate abstract class"):
            LLMProvider()

    async def test_complete_interface(self):
        """Test complete wraps the prompt in a user turn."""
        provider = FakeLLM(["test response"])
        result = await provider.complete("test prompt")

        assert result == "test response"
        messages = provider.calls[0]["messages"]
        assert [(m.role, m.content) for m in messages] == [(PromptRole.USER, "test prompt")]

    async def test_complete_with_system_prompt(self):
        """Test the system prompt becomes the first turn."""
        provider = FakeLLM()
        await provider.complete("question", system_prompt="rules")

        messages = provider.calls[0]["messages"]
        assert [m.role for m in messages] == [PromptRole.SYSTEM, PromptRole.USER]
        assert messages[0].content == "rules"

    async def test_complete_with_parameters(self):
        """Test complete forwards generation parameters."""
        provider = FakeLLM()
        await provider.complete("test", max_tokens=100, temperature=0.7, json_mode=True)

        call = provider.calls[0]
        assert call["max_tokens"] == 100
        assert call["temperature"] == 0.7
        assert call["json_mode"] is True
