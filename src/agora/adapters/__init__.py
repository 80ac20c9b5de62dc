"""
Language model adapters for Agora

Provider adapters behind the single ``LanguageModel`` interface the
orchestration core consumes, plus the fault-tolerant wrapper that chains them.
"""

from agora.adapters.base.adapter import (
    AdapterConfig,
    AdapterFactory,
    AdapterRegistry,
    LanguageModel,
    ModelAdapter
)
from agora.adapters.fallback import FallbackModel, build_model

__all__ = [
    "AdapterConfig",
    "AdapterFactory",
    "AdapterRegistry",
    "FallbackModel",
    "LanguageModel",
    "ModelAdapter",
    "build_model",
]
