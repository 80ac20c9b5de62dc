"""
Moderator decisions for Agora.

The moderator model answers in a loose ``KEY: value`` text format. This module
is the one place that text is interpreted: ``parse_decision`` turns it into a
validated ``ModeratorDecision`` and never raises. Anything it cannot read
confidently falls back to a safe default:

- missing or unknown ACTION -> ``free_discussion``
- missing INSTRUCTION -> a generic invitation to share thoughts
- TARGET of ``""``, ``none`` or ``无`` -> no target
- missing or unknown PHASE -> the phase the session is currently in
- SHOULD_END other than ``true``/``yes`` -> False
"""

import re
from enum import Enum
from typing import Dict, Mapping, Optional

from pydantic import BaseModel, Field

from agora.errors import MemberNotFoundError
from agora.protocol.message import Phase, Task, TaskType


class ModeratorAction(str, Enum):
    """What the moderator asks for next."""

    OPENING_SPEECH = "opening_speech"
    ASK_QUESTION = "ask_question"
    REQUEST_ANSWER = "request_answer"
    INVITE_COMMENT = "invite_comment"
    FREE_DISCUSSION = "free_discussion"
    REQUEST_SUMMARY = "request_summary"
    END_DISCUSSION = "end_discussion"


ACTION_TASK_TYPES: Dict[ModeratorAction, TaskType] = {
    ModeratorAction.OPENING_SPEECH: TaskType.OPENING,
    ModeratorAction.ASK_QUESTION: TaskType.QUESTION,
    ModeratorAction.REQUEST_ANSWER: TaskType.ANSWER,
    ModeratorAction.INVITE_COMMENT: TaskType.FREE_DEBATE,
    ModeratorAction.FREE_DISCUSSION: TaskType.FREE_DEBATE,
    ModeratorAction.REQUEST_SUMMARY: TaskType.CLOSING,
}

DEFAULT_INSTRUCTION = "Please share your thoughts."

_EMPTY_TARGETS = {"", "none", "无", "null", "n/a"}

# Tolerates "- ", "* " and markdown bold around the key, and full-width colons
_LINE_PATTERN = re.compile(r"^[\s\-*>]*\**\s*([A-Za-z_]+)\s*\**\s*[:：]\s*(.*?)\s*$")


class ModeratorDecision(BaseModel):
    """One think-cycle result of the moderator."""

    action: ModeratorAction = Field(default=ModeratorAction.FREE_DISCUSSION)
    next_speaker: str = Field(default="", description="Identity asked to speak")
    target: Optional[str] = Field(None, description="Identity the speaker addresses")
    instruction: str = Field(default=DEFAULT_INSTRUCTION)
    reason: str = Field(default="")
    should_end: bool = Field(default=False)
    phase: Phase = Field(default=Phase.OPENING)

    @property
    def ends_discussion(self) -> bool:
        return self.should_end or self.action == ModeratorAction.END_DISCUSSION

    def task_type(self) -> TaskType:
        return ACTION_TASK_TYPES.get(self.action, TaskType.FREE_DEBATE)

    def to_task(self, member_names: Mapping[str, str]) -> Task:
        """
        Build the task this decision asks for.

        Args:
            member_names: Identity to display name for every member

        Raises:
            MemberNotFoundError: If the target is not a member
        """
        task_type = self.task_type()
        target_name = None
        if self.target is not None:
            if self.target not in member_names:
                raise MemberNotFoundError(self.target)
            if task_type in (TaskType.QUESTION, TaskType.ANSWER):
                target_name = member_names[self.target]

        return Task(type=task_type, instruction=self.instruction, target_name=target_name)


def _clean_value(value: str) -> str:
    return value.strip().strip("[]`*\"'").strip()


def _parse_enum(enum_cls, value: str, default):
    try:
        return enum_cls(value.strip().lower())
    except ValueError:
        return default


def parse_decision(text: str, current_phase: Phase = Phase.OPENING) -> ModeratorDecision:
    """
    Decode moderator output into a decision.

    Args:
        text: Raw model output
        current_phase: Phase used when the output names none

    Returns:
        A decision with defaults filled in for anything unreadable
    """
    fields: Dict[str, str] = {}
    for line in (text or "").splitlines():
        match = _LINE_PATTERN.match(line)
        if not match:
            continue
        key = match.group(1).upper()
        # First occurrence wins
        fields.setdefault(key, _clean_value(match.group(2)))

    action = _parse_enum(ModeratorAction, fields.get("ACTION", ""), ModeratorAction.FREE_DISCUSSION)

    target = fields.get("TARGET", "")
    if target.lower() in _EMPTY_TARGETS:
        target = None

    return ModeratorDecision(
        action=action,
        next_speaker=fields.get("SPEAKER", ""),
        target=target,
        instruction=fields.get("INSTRUCTION") or DEFAULT_INSTRUCTION,
        reason=fields.get("REASON", ""),
        should_end=fields.get("SHOULD_END", "").lower() in ("true", "yes"),
        phase=_parse_enum(Phase, fields.get("PHASE", ""), current_phase)
    )
