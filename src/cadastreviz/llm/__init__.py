"""LLM provider abstraction layer."""

from cadastreviz.llm.client import LLMClient, create_llm_client

__all__ = ["LLMClient", "create_llm_client"]
