"""
Factory modules for creating CodeGraph components.

Provides modular factories for LLM providers and stores.
"""

from codegraph.core.factory.llm_factory import LLMFactory
from codegraph.core.factory.store_factory import StoreFactory

__all__ = [
    "LLMFactory",
    "StoreFactory",
]
