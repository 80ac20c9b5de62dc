"""
Base adapter module for Agora.

This module defines the language model interface and the abstract adapter
that connects it to external AI model providers.
"""

from agora.adapters.base.adapter import (
    AdapterConfig,
    AdapterFactory,
    AdapterRegistry,
    ConnectionStatus,
    LanguageModel,
    ModelAdapter
)

__all__ = [
    "AdapterConfig",
    "AdapterFactory",
    "AdapterRegistry",
    "ConnectionStatus",
    "LanguageModel",
    "ModelAdapter",
]
