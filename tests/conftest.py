"""Shared pytest fixtures."""

from typing import Any, Callable, Dict, List, Optional, Union

import pytest

from agora.adapters.base.adapter import LanguageModel
from agora.personas.provider import Persona, StaticPersonaProvider
from agora.protocol.message import ChatMessage, ModelResponse

Reply = Union[str, Exception]


class ScriptedModel(LanguageModel):
    """
    Test double LanguageModel.

    Replies are taken from ``replies`` in order; once they run out,
    ``default`` is used. A reply that is an exception is raised instead of
    returned. Every call's messages are kept in ``calls``.
    """

    def __init__(
        self,
        replies: Optional[List[Reply]] = None,
        default: Union[str, Callable[[List[ChatMessage]], str]] = "Mock response"
    ) -> None:
        self.replies = list(replies or [])
        self.default = default
        self.calls: List[List[ChatMessage]] = []
        self.tools_seen: List[Any] = []

    async def invoke(
        self,
        messages: List[ChatMessage],
        tools: Optional[List[Dict[str, Any]]] = None
    ) -> ModelResponse:
        self.calls.append(list(messages))
        self.tools_seen.append(tools)

        if self.replies:
            reply = self.replies.pop(0)
        elif callable(self.default):
            reply = self.default(messages)
        else:
            reply = self.default

        if isinstance(reply, Exception):
            raise reply
        return ModelResponse(content=reply, provider="mock", model="mock-model")


def make_persona(identity: str) -> Persona:
    return Persona(
        identity=identity,
        display_name=identity.capitalize(),
        base_prompt=f"You are {identity.capitalize()}."
    )


@pytest.fixture
def persona_provider() -> StaticPersonaProvider:
    return StaticPersonaProvider(
        make_persona(identity)
        for identity in ["alice", "bob", "carol", "dave", "erin", "frank"]
    )


@pytest.fixture
def echo_model() -> ScriptedModel:
    """Replies with the last message it was sent."""
    return ScriptedModel(default=lambda messages: f"re: {messages[-1].content[:40]}")
