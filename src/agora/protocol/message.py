"""
Message Protocol for Agora.

This module defines the structured records exchanged inside an Agora debate or
discussion: who spoke, in which phase, for which task, and the chat messages
handed to a language model when an actor is asked to speak.

The protocol covers:
- Debate phases and task types
- Participants bound to a session with a stance
- Immutable utterance records that make up the session history
- Per-turn tasks with their fixed task prompts
- The message and response shapes of the language model boundary
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Phase(str, Enum):
    """Phases of a debate or moderated discussion."""

    OPENING = "opening"            # Everyone states a position
    QUESTIONING = "questioning"    # Cross-examination
    FREE_DEBATE = "free_debate"    # Unstructured exchange
    CLOSING = "closing"            # Final statements


class TaskType(str, Enum):
    """Kinds of turns an actor can be asked to take."""

    OPENING = "opening"
    QUESTION = "question"
    ANSWER = "answer"
    REBUTTAL = "rebuttal"
    FREE_DEBATE = "free_debate"
    CLOSING = "closing"


class MessageRole(str, Enum):
    """Roles understood by the language model boundary."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class ChatMessage(BaseModel):
    """A single message sent to a language model."""

    role: MessageRole = Field(..., description="Role of the message author")
    content: str = Field(..., description="Text content of the message")


class ToolCall(BaseModel):
    """
    Representation of a tool call returned by a language model.

    Debate and moderator calls never pass tool definitions, so these are only
    carried through for adapters that report them.
    """

    id: str = Field(..., description="Provider identifier of the call")
    name: str = Field(..., description="Name of the function being called")
    arguments: str = Field(default="", description="Raw JSON arguments")


class ModelResponse(BaseModel):
    """Result of one language model invocation."""

    content: str = Field(default="", description="Text produced by the model")
    tool_calls: List[ToolCall] = Field(default_factory=list, description="Tool calls requested by the model")
    provider: Optional[str] = Field(None, description="Provider that served the call")
    model: Optional[str] = Field(None, description="Model identifier that served the call")
    usage: Dict[str, Any] = Field(default_factory=dict, description="Token usage reported by the provider")


class Participant(BaseModel):
    """
    Runtime binding of an actor identity to one session.

    The stance is free text. A forced participant argues the stance it was
    given rather than the one it would naturally take.
    """

    identity: str = Field(..., description="Persona key of the participant")
    display_name: str = Field(..., description="Name shown in transcripts")
    stance: str = Field(default="", description="Position the participant argues")
    forced: bool = Field(default=False, description="Whether the stance was imposed")

    @field_validator('identity')
    def identity_must_not_be_empty(cls, v):
        """Validate that the identity is not empty."""
        if not v or not v.strip():
            raise ValueError("Participant identity cannot be empty")
        return v.strip()


class UtteranceRecord(BaseModel):
    """
    One entry of the session history.

    Records are frozen: once appended to a ledger they never change.
    """

    model_config = ConfigDict(frozen=True)

    speaker: str = Field(..., description="Identity of the speaker")
    speaker_name: str = Field(..., description="Display name of the speaker")
    content: str = Field(..., description="What was said")
    phase: Phase = Field(..., description="Phase the utterance was made in")
    task_type: TaskType = Field(..., description="Task the speaker was carrying out")
    target: Optional[str] = Field(None, description="Identity the utterance was addressed to")

    def render(self) -> str:
        """Render the record as a transcript line."""
        return f"{self.speaker_name}: {self.content}"


class QuestionAnswerPair(BaseModel):
    """A question and the answer it received, both taken from the history."""

    model_config = ConfigDict(frozen=True)

    question: UtteranceRecord
    answer: UtteranceRecord

    @property
    def questioner(self) -> str:
        return self.question.speaker

    @property
    def answerer(self) -> str:
        return self.answer.speaker

    @property
    def question_text(self) -> str:
        return self.question.content

    @property
    def answer_text(self) -> str:
        return self.answer.content

    def involves(self, identity: str) -> bool:
        return identity in (self.questioner, self.answerer)


# Task prompts, one per task type. Each states the length cap for the turn.
_TASK_PROMPTS: Dict[TaskType, str] = {
    TaskType.OPENING: (
        "[Current task: opening statement]\n"
        "Share your view on the topic.\n"
        "Requirements:\n"
        "1. State your position in your own way\n"
        "2. Say what you genuinely feel about it\n"
        "3. Stay in character\n"
        "4. Keep it under 300 characters"
    ),
    TaskType.QUESTION: (
        "[Current task: question]\n"
        "You want to ask {target} one question.\n"
        "Requirements:\n"
        "1. Ask it in your own way\n"
        "2. It can be curious or it can be a challenge\n"
        "3. Stay in character\n"
        "4. Keep it under 150 characters"
    ),
    TaskType.ANSWER: (
        "[Current task: answer]\n"
        "{target} asked you a question. Respond to it.\n"
        "Requirements:\n"
        "1. Actually answer the question\n"
        "2. Answer in your own way\n"
        "3. You may share how you feel\n"
        "4. Keep it under 200 characters"
    ),
    TaskType.REBUTTAL: (
        "[Current task: rebuttal]\n"
        "Respond to the view put forward by {target}.\n"
        "Requirements:\n"
        "1. Give your own take\n"
        "2. You may agree or disagree\n"
        "3. Stay in character\n"
        "4. Keep it under 200 characters"
    ),
    TaskType.FREE_DEBATE: (
        "[Current task: free discussion]\n"
        "This is the open floor. You may:\n"
        "1. Respond to what was just said\n"
        "2. Add a new idea\n"
        "3. Share how you feel\n"
        "Requirement: stay in character and keep it under 200 characters"
    ),
    TaskType.CLOSING: (
        "[Current task: closing statement]\n"
        "Give your final summary.\n"
        "Requirements:\n"
        "1. Sum up your view\n"
        "2. Say how you feel now\n"
        "3. Close in your own way\n"
        "4. Keep it under 300 characters"
    ),
}


class Task(BaseModel):
    """
    The instruction given to an actor for one turn.

    Tasks are transient: they are built per turn and never stored.
    """

    type: TaskType = Field(..., description="Kind of turn")
    instruction: str = Field(..., description="Turn-specific instruction text")
    target_name: Optional[str] = Field(None, description="Display name of the addressee")

    def build_prompt(self) -> str:
        """Return the fixed task prompt for this task type."""
        template = _TASK_PROMPTS.get(self.type)
        if template is None:
            return self.instruction
        return template.format(target=self.target_name or "the other participant")
