"""
OpenAI adapter implementation for Agora.

This module connects the language model interface to OpenAI's chat completions
API, and to any OpenAI-compatible endpoint reachable through ``base_url``.
"""

import time
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI
from openai.types.chat.chat_completion import ChatCompletion

from agora.adapters.base.adapter import (
    AdapterConfig,
    ConnectionStatus,
    ModelAdapter
)
from agora.protocol.message import ChatMessage, ModelResponse, ToolCall


class OpenAIAdapter(ModelAdapter):
    """Adapter for OpenAI models."""

    provider = "openai"

    def __init__(self, config: AdapterConfig):
        super().__init__(config)
        self.client: Optional[AsyncOpenAI] = None

    async def connect(self) -> bool:
        """Create the OpenAI client."""
        try:
            self.client = AsyncOpenAI(
                api_key=self.config.api_key,
                organization=self.config.organization_id,
                base_url=self.config.base_url,
                timeout=self.config.timeout,
                max_retries=self.config.max_retries
            )
            self._connection_status = ConnectionStatus(connected=True)
            return True
        except Exception as e:
            self._connection_status = ConnectionStatus(
                connected=False,
                last_error=str(e)
            )
            return False

    def to_provider_format(
        self,
        messages: List[ChatMessage],
        tools: Optional[List[Dict[str, Any]]] = None
    ) -> Dict[str, Any]:
        """Build a chat completions request."""
        request: Dict[str, Any] = {
            "model": self.config.model,
            "messages": [
                {"role": m.role.value, "content": m.content} for m in messages
            ],
            "temperature": self.config.temperature,
            "max_tokens": self.config.max_tokens,
        }
        if tools:
            request["tools"] = tools
        return request

    def from_provider_response(self, response: ChatCompletion) -> ModelResponse:
        """Convert a chat completion into a model response."""
        choice = response.choices[0]
        tool_calls = [
            ToolCall(id=tc.id, name=tc.function.name, arguments=tc.function.arguments or "")
            for tc in (choice.message.tool_calls or [])
        ]
        usage = {}
        if response.usage is not None:
            usage = {
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens
            }

        return ModelResponse(
            content=choice.message.content or "",
            tool_calls=tool_calls,
            provider=self.provider,
            model=response.model,
            usage=usage
        )

    async def invoke(
        self,
        messages: List[ChatMessage],
        tools: Optional[List[Dict[str, Any]]] = None
    ) -> ModelResponse:
        """Send messages to an OpenAI model and get a response."""
        if not self.client or not self._connection_status.connected:
            await self.connect()

        if not self._connection_status.connected:
            raise ConnectionError("Not connected to OpenAI API")

        request = self.to_provider_format(messages, tools)

        try:
            start_time = time.time()
            response = await self.client.chat.completions.create(**request)
            end_time = time.time()

            self._connection_status.latency_ms = (end_time - start_time) * 1000

            return self.from_provider_response(response)

        except Exception as e:
            self._record_failure(e)
            raise
