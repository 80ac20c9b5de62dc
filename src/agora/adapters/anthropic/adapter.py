"""
Anthropic adapter implementation for Agora.

This module connects the language model interface to Anthropic's messages API.
Anthropic takes the system prompt as a separate request field and only accepts
alternating user/assistant turns, so consecutive messages of the same role are
merged before sending.
"""

import time
from typing import Any, Dict, List, Optional

import anthropic
from anthropic.types import Message as AnthropicMessage

from agora.adapters.base.adapter import (
    AdapterConfig,
    ConnectionStatus,
    ModelAdapter
)
from agora.protocol.message import ChatMessage, MessageRole, ModelResponse, ToolCall


class AnthropicAdapter(ModelAdapter):
    """Adapter for Anthropic Claude models."""

    provider = "anthropic"

    def __init__(self, config: AdapterConfig):
        super().__init__(config)
        self.client: Optional[anthropic.AsyncAnthropic] = None

    async def connect(self) -> bool:
        """Create the Anthropic client."""
        try:
            self.client = anthropic.AsyncAnthropic(
                api_key=self.config.api_key,
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
        """Build a messages API request."""
        system_parts = [m.content for m in messages if m.role == MessageRole.SYSTEM]

        turns: List[Dict[str, Any]] = []
        for message in messages:
            if message.role == MessageRole.SYSTEM:
                continue
            if turns and turns[-1]["role"] == message.role.value:
                turns[-1]["content"] += "\n\n" + message.content
            else:
                turns.append({"role": message.role.value, "content": message.content})

        request: Dict[str, Any] = {
            "model": self.config.model,
            "messages": turns,
            "temperature": self.config.temperature,
            "max_tokens": self.config.max_tokens,
        }
        if system_parts:
            request["system"] = "\n\n".join(system_parts)
        if tools:
            request["tools"] = tools
        return request

    def from_provider_response(self, response: AnthropicMessage) -> ModelResponse:
        """Convert an Anthropic message into a model response."""
        text_parts = []
        tool_calls = []
        for block in response.content:
            if block.type == "text":
                text_parts.append(block.text)
            elif block.type == "tool_use":
                tool_calls.append(ToolCall(id=block.id, name=block.name, arguments=str(block.input)))

        return ModelResponse(
            content="".join(text_parts),
            tool_calls=tool_calls,
            provider=self.provider,
            model=response.model,
            usage={
                "input_tokens": response.usage.input_tokens,
                "output_tokens": response.usage.output_tokens
            }
        )

    async def invoke(
        self,
        messages: List[ChatMessage],
        tools: Optional[List[Dict[str, Any]]] = None
    ) -> ModelResponse:
        """Send messages to an Anthropic model and get a response."""
        if not self.client or not self._connection_status.connected:
            await self.connect()

        if not self._connection_status.connected:
            raise ConnectionError("Not connected to Anthropic API")

        request = self.to_provider_format(messages, tools)

        try:
            start_time = time.time()
            response = await self.client.messages.create(**request)
            end_time = time.time()

            self._connection_status.latency_ms = (end_time - start_time) * 1000

            return self.from_provider_response(response)

        except Exception as e:
            self._record_failure(e)
            raise
