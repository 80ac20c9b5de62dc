"""
Fault-tolerant language model for Agora.

Wraps several adapters and tries them in priority order. This is where retry
and fallback live; the orchestration core only ever sees one call that either
returns or raises.
"""

import logging
from collections import Counter
from typing import Any, Dict, List, Optional, Tuple

from agora.adapters.base.adapter import AdapterConfig, AdapterFactory, LanguageModel
from agora.config import EngineConfig
from agora.protocol.message import ChatMessage, ModelResponse


class FallbackModel(LanguageModel):
    """
    Tries each source in turn until one answers.

    When every source fails, returns ``fallback_message`` if one is set and
    re-raises the last error otherwise.
    """

    def __init__(
        self,
        sources: List[Tuple[str, LanguageModel]],
        fallback_message: Optional[str] = None
    ):
        """
        Initialize the fallback model.

        Args:
            sources: (name, model) pairs, already in the order to try them
            fallback_message: Static reply used when all sources fail
        """
        if not sources:
            raise ValueError("FallbackModel needs at least one source")
        self.sources = sources
        self.fallback_message = fallback_message
        self.success_count: Counter = Counter()
        self.failure_count: Counter = Counter()
        self.logger = logging.getLogger("agora.adapters.fallback")

    async def invoke(
        self,
        messages: List[ChatMessage],
        tools: Optional[List[Dict[str, Any]]] = None
    ) -> ModelResponse:
        last_error: Optional[Exception] = None

        for name, model in self.sources:
            try:
                response = await model.invoke(messages, tools)
            except Exception as e:
                self.logger.warning(f"Model source {name} failed, trying next source: {e}")
                self.failure_count[name] += 1
                last_error = e
                continue

            self.success_count[name] += 1
            return response

        self.logger.error(f"All model sources failed: {last_error}")
        if self.fallback_message is not None:
            return ModelResponse(content=self.fallback_message, provider="fallback")
        raise last_error


async def build_model(config: EngineConfig) -> LanguageModel:
    """
    Create the language model described by an engine config.

    Sources without an API key in the environment are skipped. A single
    available source without a fallback message is returned unwrapped.

    Raises:
        ValueError: If no source has an API key
    """
    sources: List[Tuple[str, LanguageModel]] = []
    for source in config.available_sources():
        adapter = await AdapterFactory.create_adapter(
            source.provider,
            AdapterConfig(
                api_key=source.api_key(),
                model=source.model,
                base_url=source.base_url,
                timeout=source.timeout,
                max_retries=source.max_retries,
                temperature=source.temperature,
                max_tokens=source.max_tokens
            ),
            name=source.name
        )
        sources.append((source.name, adapter))

    if not sources:
        raise ValueError("No model source has an API key configured")

    if len(sources) == 1 and config.fallback_message is None:
        return sources[0][1]

    return FallbackModel(sources, config.fallback_message)
