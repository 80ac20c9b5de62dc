"""
Tests for moderator decision decoding.
"""

import pytest

from agora.errors import MemberNotFoundError
from agora.orchestrator.decision import (
    DEFAULT_INSTRUCTION,
    ModeratorAction,
    ModeratorDecision,
    parse_decision
)
from agora.protocol.message import Phase, TaskType


WELL_FORMED = """ACTION: ask_question
SPEAKER: alice
TARGET: bob
INSTRUCTION: Ask Bob about cost
REASON: Bob has not been challenged yet
SHOULD_END: false
PHASE: questioning"""


class TestParseDecision:
    """Tests for parse_decision."""

    def test_well_formed(self):
        decision = parse_decision(WELL_FORMED)

        assert decision.action == ModeratorAction.ASK_QUESTION
        assert decision.next_speaker == "alice"
        assert decision.target == "bob"
        assert decision.instruction == "Ask Bob about cost"
        assert decision.reason == "Bob has not been challenged yet"
        assert decision.should_end is False
        assert decision.phase == Phase.QUESTIONING

    def test_empty_text_gives_defaults(self):
        decision = parse_decision("", current_phase=Phase.FREE_DEBATE)

        assert decision.action == ModeratorAction.FREE_DISCUSSION
        assert decision.next_speaker == ""
        assert decision.target is None
        assert decision.instruction == DEFAULT_INSTRUCTION
        assert decision.should_end is False
        assert decision.phase == Phase.FREE_DEBATE

    def test_unknown_action_and_phase(self):
        decision = parse_decision(
            "ACTION: dance\nSPEAKER: bob\nPHASE: intermission",
            current_phase=Phase.QUESTIONING
        )

        assert decision.action == ModeratorAction.FREE_DISCUSSION
        assert decision.phase == Phase.QUESTIONING

    @pytest.mark.parametrize("value", ["none", "None", "", "无", "[none]"])
    def test_empty_targets(self, value):
        decision = parse_decision(f"ACTION: invite_comment\nSPEAKER: bob\nTARGET: {value}")
        assert decision.target is None

    def test_tolerant_formatting(self):
        text = (
            "Here is my decision:\n"
            "- **ACTION**: Request_Summary\n"
            "* SPEAKER: [carol]\n"
            "TARGET：none\n"
            "  should_end: YES  \n"
        )

        decision = parse_decision(text)

        assert decision.action == ModeratorAction.REQUEST_SUMMARY
        assert decision.next_speaker == "carol"
        assert decision.target is None
        assert decision.should_end is True

    def test_first_occurrence_wins(self):
        decision = parse_decision("SPEAKER: alice\nSPEAKER: bob")
        assert decision.next_speaker == "alice"

    def test_instruction_keeps_colons(self):
        decision = parse_decision("INSTRUCTION: Answer this: why now?")
        assert decision.instruction == "Answer this: why now?"

    def test_end_discussion_ends(self):
        decision = parse_decision("ACTION: end_discussion\nSHOULD_END: false")

        assert decision.should_end is False
        assert decision.ends_discussion is True


class TestDecisionTask:
    """Tests for turning a decision into a task."""

    members = {"alice": "Alice", "bob": "Bob"}

    @pytest.mark.parametrize("action, task_type", [
        (ModeratorAction.OPENING_SPEECH, TaskType.OPENING),
        (ModeratorAction.ASK_QUESTION, TaskType.QUESTION),
        (ModeratorAction.REQUEST_ANSWER, TaskType.ANSWER),
        (ModeratorAction.INVITE_COMMENT, TaskType.FREE_DEBATE),
        (ModeratorAction.FREE_DISCUSSION, TaskType.FREE_DEBATE),
        (ModeratorAction.REQUEST_SUMMARY, TaskType.CLOSING),
    ])
    def test_action_mapping(self, action, task_type):
        decision = ModeratorDecision(action=action, next_speaker="alice")
        assert decision.to_task(self.members).type == task_type

    def test_question_names_target(self):
        decision = ModeratorDecision(
            action=ModeratorAction.ASK_QUESTION,
            next_speaker="alice",
            target="bob",
            instruction="Ask about cost"
        )

        task = decision.to_task(self.members)

        assert task.target_name == "Bob"
        assert task.instruction == "Ask about cost"
        assert "Bob" in task.build_prompt()

    def test_comment_has_no_target_name(self):
        decision = ModeratorDecision(
            action=ModeratorAction.INVITE_COMMENT, next_speaker="alice", target="bob"
        )
        assert decision.to_task(self.members).target_name is None

    def test_unknown_target(self):
        decision = ModeratorDecision(
            action=ModeratorAction.ASK_QUESTION, next_speaker="alice", target="zed"
        )

        with pytest.raises(MemberNotFoundError) as exc_info:
            decision.to_task(self.members)
        assert exc_info.value.identity == "zed"
