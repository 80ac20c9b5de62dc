"""Anthropic adapter for Agora."""

from agora.adapters.anthropic.adapter import AnthropicAdapter

__all__ = ["AnthropicAdapter"]
