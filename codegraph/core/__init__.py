"""Core components: graph computations, stores, records and LLM providers."""
