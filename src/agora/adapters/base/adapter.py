"""
Base adapter interface for Agora.

This module defines the language model interface consumed by the orchestration
core and the abstract adapter that provider-specific implementations build on.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from agora.protocol.message import ChatMessage, ModelResponse


class LanguageModel(ABC):
    """
    Anything that can turn a list of chat messages into a response.

    Implementations own their retry and fallback behavior. A failed call
    raises; the orchestrators never retry.
    """

    @abstractmethod
    async def invoke(
        self,
        messages: List[ChatMessage],
        tools: Optional[List[Dict[str, Any]]] = None
    ) -> ModelResponse:
        """
        Send messages to the model and return its response.

        Args:
            messages: Ordered chat messages, system prompt first
            tools: Optional tool schemas (the orchestrators always pass None)

        Returns:
            The model's response
        """
        pass


class AdapterConfig(BaseModel):
    """Configuration for an AI model adapter."""

    api_key: str
    model: str
    base_url: Optional[str] = None
    organization_id: Optional[str] = None
    timeout: float = 60.0
    max_retries: int = 2
    temperature: float = 0.7
    max_tokens: int = 1024


class ConnectionStatus(BaseModel):
    """Status of a connection to an AI service provider."""

    connected: bool
    last_error: Optional[str] = None
    latency_ms: Optional[float] = None
    rate_limited: bool = False


class ModelAdapter(LanguageModel):
    """Base class for provider adapters."""

    provider: str = "base"

    def __init__(self, config: AdapterConfig):
        self.config = config
        self._connection_status = ConnectionStatus(connected=False)

    @property
    def connection_status(self) -> ConnectionStatus:
        """Get the current connection status."""
        return self._connection_status

    @abstractmethod
    async def connect(self) -> bool:
        """Create the provider client."""
        pass

    async def disconnect(self) -> bool:
        """Close connection to the AI service provider."""
        self._connection_status.connected = False
        return True

    def _record_failure(self, error: Exception) -> None:
        self._connection_status.last_error = str(error)
        if "rate limit" in str(error).lower():
            self._connection_status.rate_limited = True


class AdapterRegistry:
    """Registry of available model adapters."""

    _adapters: Dict[str, ModelAdapter] = {}

    @classmethod
    def register(cls, name: str, adapter: ModelAdapter) -> None:
        """Register an adapter with the registry."""
        cls._adapters[name] = adapter

    @classmethod
    def get(cls, name: str) -> Optional[ModelAdapter]:
        """Get an adapter by name."""
        return cls._adapters.get(name)

    @classmethod
    def list_adapters(cls) -> List[str]:
        """List all registered adapters."""
        return list(cls._adapters.keys())

    @classmethod
    def clear(cls) -> None:
        cls._adapters.clear()


class AdapterFactory:
    """Factory for creating adapters."""

    @staticmethod
    async def create_adapter(provider: str, config: AdapterConfig, name: Optional[str] = None) -> ModelAdapter:
        """
        Create and initialize an adapter for the specified provider.

        Args:
            provider: The name of the provider ("openai" or "anthropic")
            config: Configuration for the adapter
            name: Registry name, defaults to the provider name

        Returns:
            An initialized ModelAdapter instance

        Raises:
            ValueError: If the provider is not supported
        """
        if provider.lower() == "openai":
            # Dynamically import to avoid circular imports
            from agora.adapters.openai.adapter import OpenAIAdapter
            adapter = OpenAIAdapter(config)
        elif provider.lower() == "anthropic":
            from agora.adapters.anthropic.adapter import AnthropicAdapter
            adapter = AnthropicAdapter(config)
        else:
            raise ValueError(f"Unsupported provider: {provider}")

        await adapter.connect()

        AdapterRegistry.register(name or provider, adapter)

        return adapter
