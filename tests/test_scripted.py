"""
Tests for the Scripted Orchestrator.

This module checks the fixed debate order, the question/answer pairing across
unequal sides, failure handling and the transcript sink.
"""

import pytest

from agora.config import DebateConfig
from agora.errors import ConfigurationError, ModelInvocationError, SessionAbandonedError
from agora.orchestrator.scripted import ScriptedOrchestrator
from agora.orchestrator.session_state import SessionState
from agora.protocol.message import MessageRole, Phase, TaskType

from conftest import ScriptedModel


def create_debate_config(pro=("alice", "bob"), con=("carol", "dave"), **kwargs) -> DebateConfig:
    """Helper function to create a debate configuration."""
    return DebateConfig(
        topic="Cities should ban private cars",
        pro_participants=list(pro),
        con_participants=list(con),
        **kwargs
    )


class TestDebateOrder:
    """Tests for the order of turns."""

    @pytest.mark.asyncio
    async def test_two_versus_two(self, persona_provider, echo_model):
        orchestrator = ScriptedOrchestrator(create_debate_config(), echo_model, persona_provider)

        result = await orchestrator.run()

        assert result.state == SessionState.COMPLETED
        assert len(result.records) == 16

        speakers = [(r.speaker, r.task_type) for r in result.records]
        assert speakers[:4] == [
            ("alice", TaskType.OPENING),
            ("bob", TaskType.OPENING),
            ("carol", TaskType.OPENING),
            ("dave", TaskType.OPENING),
        ]
        assert speakers[4:12] == [
            ("alice", TaskType.QUESTION),
            ("carol", TaskType.ANSWER),
            ("carol", TaskType.QUESTION),
            ("alice", TaskType.ANSWER),
            ("bob", TaskType.QUESTION),
            ("dave", TaskType.ANSWER),
            ("dave", TaskType.QUESTION),
            ("bob", TaskType.ANSWER),
        ]
        assert speakers[12:] == [
            ("carol", TaskType.CLOSING),
            ("dave", TaskType.CLOSING),
            ("alice", TaskType.CLOSING),
            ("bob", TaskType.CLOSING),
        ]

    @pytest.mark.asyncio
    async def test_phases_recorded(self, persona_provider, echo_model):
        orchestrator = ScriptedOrchestrator(create_debate_config(), echo_model, persona_provider)

        result = await orchestrator.run()

        phases = [r.phase for r in result.records]
        assert phases == [Phase.OPENING] * 4 + [Phase.QUESTIONING] * 8 + [Phase.CLOSING] * 4

    @pytest.mark.asyncio
    async def test_exchanges_and_targets(self, persona_provider, echo_model):
        orchestrator = ScriptedOrchestrator(create_debate_config(), echo_model, persona_provider)

        await orchestrator.run()

        pairs = [(p.questioner, p.answerer) for p in orchestrator.ledger.exchanges]
        assert pairs == [("alice", "carol"), ("carol", "alice"), ("bob", "dave"), ("dave", "bob")]
        questions = [r for r in orchestrator.records if r.task_type == TaskType.QUESTION]
        assert [q.target for q in questions] == ["carol", "alice", "dave", "bob"]
        assert orchestrator.ledger.projections_consistent()

    @pytest.mark.asyncio
    async def test_unequal_sides_wrap(self, persona_provider, echo_model):
        config = create_debate_config(pro=("alice", "bob", "carol"), con=("dave", "erin"))
        orchestrator = ScriptedOrchestrator(config, echo_model, persona_provider)

        result = await orchestrator.run()

        pairs = [(p.questioner, p.answerer) for p in orchestrator.ledger.exchanges]
        assert pairs == [
            ("alice", "dave"), ("dave", "alice"),
            ("bob", "erin"), ("erin", "bob"),
            ("carol", "dave"), ("dave", "carol"),
        ]
        assert len(result.records) == 5 + 12 + 5

    @pytest.mark.asyncio
    async def test_more_con_than_pro(self, persona_provider, echo_model):
        config = create_debate_config(pro=("alice",), con=("bob", "carol"))
        orchestrator = ScriptedOrchestrator(config, echo_model, persona_provider)

        await orchestrator.run()

        # carol never takes part in questioning
        pairs = [(p.questioner, p.answerer) for p in orchestrator.ledger.exchanges]
        assert pairs == [("alice", "bob"), ("bob", "alice")]


class TestPrompts:
    """Tests for what actors are shown."""

    @pytest.mark.asyncio
    async def test_answer_sees_question(self, persona_provider):
        model = ScriptedModel(replies=["o1", "o2", "o3", "o4", "Why walk?"])
        orchestrator = ScriptedOrchestrator(create_debate_config(), model, persona_provider)

        await orchestrator.run()

        # Sixth call is carol answering alice
        answer_call = model.calls[5]
        assert answer_call[0].role == MessageRole.SYSTEM
        assert [m.content for m in answer_call[1:3]] == ["Carol: o3", "Alice: Why walk?"]
        assert answer_call[-1].content == "Alice asks you: Why walk?"

    @pytest.mark.asyncio
    async def test_opening_has_no_history(self, persona_provider, echo_model):
        orchestrator = ScriptedOrchestrator(create_debate_config(), echo_model, persona_provider)

        await orchestrator.run()

        # System prompt and instruction only
        assert len(echo_model.calls[3]) == 2
        assert all(tools is None for tools in echo_model.tools_seen)

    @pytest.mark.asyncio
    async def test_forced_stance_prompt(self, persona_provider, echo_model):
        config = create_debate_config(forced_stances={"bob": "Cars are a civil right"})
        orchestrator = ScriptedOrchestrator(config, echo_model, persona_provider)

        await orchestrator.run()

        assert orchestrator.get_actor("bob").participant.forced is True
        bob_prompt = echo_model.calls[1][0].content
        assert "Cars are a civil right" in bob_prompt
        assert "regardless of your natural view" in bob_prompt
        alice_prompt = echo_model.calls[0][0].content
        assert "In favour of the motion" in alice_prompt


class TestFailures:
    """Tests for failed and abandoned runs."""

    @pytest.mark.asyncio
    async def test_model_failure_aborts(self, persona_provider):
        model = ScriptedModel(replies=["ok"] * 5 + [RuntimeError("upstream timeout")])
        seen = []
        orchestrator = ScriptedOrchestrator(
            create_debate_config(),
            model,
            persona_provider,
            transcript_sink=lambda name, content, phase: seen.append(name)
        )

        with pytest.raises(ModelInvocationError) as exc_info:
            await orchestrator.run()

        error = exc_info.value
        assert error.phase == Phase.QUESTIONING
        assert error.turn == 6
        assert error.speaker == "carol"
        assert error.task_type == TaskType.ANSWER
        assert isinstance(error.__cause__, RuntimeError)
        assert "upstream timeout" in str(error)

        assert orchestrator.state == SessionState.FAILED
        assert len(orchestrator.records) == 5
        assert len(seen) == 5
        assert len(model.calls) == 6

    @pytest.mark.asyncio
    async def test_sink_error_does_not_abort(self, persona_provider, echo_model):
        def broken_sink(name, content, phase):
            raise ValueError("display closed")

        orchestrator = ScriptedOrchestrator(
            create_debate_config(), echo_model, persona_provider, transcript_sink=broken_sink
        )

        result = await orchestrator.run()

        assert result.state == SessionState.COMPLETED
        assert len(result.records) == 16

    @pytest.mark.asyncio
    async def test_async_sink(self, persona_provider, echo_model):
        seen = []

        async def sink(name, content, phase):
            seen.append((name, phase))

        orchestrator = ScriptedOrchestrator(
            create_debate_config(), echo_model, persona_provider, transcript_sink=sink
        )
        await orchestrator.run()

        assert len(seen) == 16
        assert seen[0] == ("Alice", Phase.OPENING)
        assert seen[-1] == ("Bob", Phase.CLOSING)

    @pytest.mark.asyncio
    async def test_abandon_stops_before_next_turn(self, persona_provider, echo_model):
        orchestrator = None

        def sink(name, content, phase):
            orchestrator.abandon()

        orchestrator = ScriptedOrchestrator(
            create_debate_config(), echo_model, persona_provider, transcript_sink=sink
        )

        with pytest.raises(SessionAbandonedError):
            await orchestrator.run()

        assert orchestrator.state == SessionState.ABANDONED
        assert len(orchestrator.records) == 1
        assert len(echo_model.calls) == 1

    def test_unknown_persona_rejected(self, persona_provider, echo_model):
        config = create_debate_config(pro=("alice", "zed"))

        with pytest.raises(ConfigurationError):
            ScriptedOrchestrator(config, echo_model, persona_provider)
