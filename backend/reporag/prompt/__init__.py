"""Answer prompt building and LLM access."""

from .base import PromptBuilder
from .builder import DefaultPromptBuilder, PromptConfig, build_prompt, estimate_tokens
from .llm_client import LLMConfig, LLMResponse, LlmClient, OllamaChatClient, create_client

__all__ = [
    "PromptBuilder",
    "DefaultPromptBuilder",
    "PromptConfig",
    "build_prompt",
    "estimate_tokens",
    "LLMConfig",
    "LLMResponse",
    "LlmClient",
    "OllamaChatClient",
    "create_client",
]
