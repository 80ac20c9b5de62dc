"""
Tests for the fault-tolerant model wrapper and model construction.
"""

import pytest
from unittest.mock import patch

from agora.adapters.fallback import FallbackModel, build_model
from agora.adapters.openai.adapter import OpenAIAdapter
from agora.config import EngineConfig, ModelSourceConfig
from agora.protocol.message import ChatMessage, MessageRole

from conftest import ScriptedModel


MESSAGES = [ChatMessage(role=MessageRole.USER, content="Hello")]


class TestFallbackModel:
    """Tests for FallbackModel."""

    @pytest.mark.asyncio
    async def test_first_source_answers(self):
        primary = ScriptedModel(replies=["from primary"])
        backup = ScriptedModel(replies=["from backup"])
        model = FallbackModel([("primary", primary), ("backup", backup)])

        response = await model.invoke(MESSAGES)

        assert response.content == "from primary"
        assert backup.calls == []
        assert model.success_count["primary"] == 1

    @pytest.mark.asyncio
    async def test_falls_through_to_next_source(self):
        primary = ScriptedModel(replies=[ConnectionError("down")])
        backup = ScriptedModel(replies=["from backup"])
        model = FallbackModel([("primary", primary), ("backup", backup)])

        response = await model.invoke(MESSAGES)

        assert response.content == "from backup"
        assert model.failure_count["primary"] == 1
        assert model.success_count["backup"] == 1

    @pytest.mark.asyncio
    async def test_all_fail_without_message_raises(self):
        model = FallbackModel([
            ("primary", ScriptedModel(replies=[ConnectionError("down")])),
            ("backup", ScriptedModel(replies=[TimeoutError("slow")])),
        ])

        with pytest.raises(TimeoutError):
            await model.invoke(MESSAGES)

    @pytest.mark.asyncio
    async def test_all_fail_with_message(self):
        model = FallbackModel(
            [("primary", ScriptedModel(replies=[ConnectionError("down")]))],
            fallback_message="I need a moment to think."
        )

        response = await model.invoke(MESSAGES)

        assert response.content == "I need a moment to think."
        assert response.provider == "fallback"

    def test_needs_a_source(self):
        with pytest.raises(ValueError):
            FallbackModel([])


class TestBuildModel:
    """Tests for build_model."""

    def create_engine_config(self, **kwargs):
        return EngineConfig(
            sources=[
                ModelSourceConfig(name="backup", model="gpt-4o", api_key_env="BACKUP_KEY", priority=2),
                ModelSourceConfig(name="primary", model="gpt-4o-mini", api_key_env="PRIMARY_KEY", priority=1),
            ],
            **kwargs
        )

    @pytest.mark.asyncio
    @patch('agora.adapters.openai.adapter.AsyncOpenAI')
    async def test_single_source_unwrapped(self, mock_openai, monkeypatch):
        monkeypatch.setenv("PRIMARY_KEY", "sk-primary")
        monkeypatch.delenv("BACKUP_KEY", raising=False)

        model = await build_model(self.create_engine_config())

        assert isinstance(model, OpenAIAdapter)
        assert model.config.model == "gpt-4o-mini"

    @pytest.mark.asyncio
    @patch('agora.adapters.openai.adapter.AsyncOpenAI')
    async def test_sources_in_priority_order(self, mock_openai, monkeypatch):
        monkeypatch.setenv("PRIMARY_KEY", "sk-primary")
        monkeypatch.setenv("BACKUP_KEY", "sk-backup")

        model = await build_model(self.create_engine_config())

        assert isinstance(model, FallbackModel)
        assert [name for name, _ in model.sources] == ["primary", "backup"]

    @pytest.mark.asyncio
    @patch('agora.adapters.openai.adapter.AsyncOpenAI')
    async def test_fallback_message_wraps_single_source(self, mock_openai, monkeypatch):
        monkeypatch.setenv("PRIMARY_KEY", "sk-primary")
        monkeypatch.delenv("BACKUP_KEY", raising=False)

        model = await build_model(self.create_engine_config(fallback_message="..."))

        assert isinstance(model, FallbackModel)

    @pytest.mark.asyncio
    async def test_no_keys(self, monkeypatch):
        monkeypatch.delenv("PRIMARY_KEY", raising=False)
        monkeypatch.delenv("BACKUP_KEY", raising=False)

        with pytest.raises(ValueError):
            await build_model(self.create_engine_config())
