"""
Exceptions raised by Agora.
"""

from typing import Optional

from agora.protocol.message import Phase, TaskType


class AgoraError(Exception):
    """Base class for all Agora errors."""
    pass


class ConfigurationError(AgoraError):
    """Raised when a session is configured inconsistently."""
    pass


class MemberNotFoundError(AgoraError):
    """Raised when a decision names a speaker or target outside the session."""

    def __init__(self, identity: str):
        self.identity = identity
        super().__init__(f"Member not found: {identity!r}")


class ModelInvocationError(AgoraError):
    """
    Raised when the language model fails during a turn.

    Carries enough context to tell which turn of which phase failed. The
    underlying exception is chained as ``__cause__``.
    """

    def __init__(
        self,
        speaker: str,
        task_type: TaskType,
        phase: Phase,
        turn: int,
        message: Optional[str] = None
    ):
        self.speaker = speaker
        self.task_type = task_type
        self.phase = phase
        self.turn = turn
        detail = f": {message}" if message else ""
        super().__init__(
            f"Model call failed in {phase.value} phase, turn {turn} "
            f"({speaker}, {task_type.value}){detail}"
        )


class SessionAbandonedError(AgoraError):
    """Raised when a session is abandoned before its next turn."""
    pass


class TransitionError(AgoraError):
    """Exception raised for invalid session state transitions."""
    pass
