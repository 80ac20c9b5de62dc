"""
Protocol types for Agora

Phases, task types, participants and the immutable utterance records that make
up a session history.
"""

from agora.protocol.message import (
    ChatMessage,
    MessageRole,
    ModelResponse,
    Participant,
    Phase,
    QuestionAnswerPair,
    Task,
    TaskType,
    ToolCall,
    UtteranceRecord
)

__all__ = [
    "ChatMessage",
    "MessageRole",
    "ModelResponse",
    "Participant",
    "Phase",
    "QuestionAnswerPair",
    "Task",
    "TaskType",
    "ToolCall",
    "UtteranceRecord",
]
