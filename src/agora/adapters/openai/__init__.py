"""OpenAI adapter for Agora."""

from agora.adapters.openai.adapter import OpenAIAdapter

__all__ = ["OpenAIAdapter"]
