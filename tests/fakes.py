"""
Test doubles shared across test modules.
"""

from codegraph.core.llm.base import LLMProvider
from codegraph.models.chat import PromptMessage


class FakeLLM(LLMProvider):
    """
    Scripted LLM provider.

    Replies are returned in order; an Exception instance in the script is
    raised instead of returned. Once the script runs out every call returns
    "ok".
    """

    def __init__(self, replies=None):
        self.replies = list(replies or [])
        self.calls: list[dict] = []
        self.closed = False

    async def chat(
        self,
        messages: list[PromptMessage],
        max_tokens: int = 2000,
        temperature: float = 0.0,
        json_mode: bool = False,
        **kwargs,
    ) -> str:
        self.calls.append(
            {
                "messages": list(messages),
                "max_tokens": max_tokens,
                "temperature": temperature,
                "json_mode": json_mode,
            }
        )
        reply = self.replies.pop(0) if self.replies else "ok"
        if isinstance(reply, Exception):
            raise reply
        return reply

    async def close(self):
        self.closed = True
