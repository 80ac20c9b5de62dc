"""
Shared turn machinery for Agora orchestrators.

Both the scripted debate and the moderated discussion drive turns the same
way: pick a speaker and a task, let the actor speak, append the record to the
ledger, then notify the transcript sink. This module holds that loop body and
the session state bookkeeping around it.
"""

import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from agora.adapters.base.adapter import LanguageModel
from agora.errors import MemberNotFoundError, SessionAbandonedError
from agora.orchestrator.actor import Actor
from agora.orchestrator.ledger import TurnLedger
from agora.orchestrator.session_state import SessionState, transition
from agora.personas.provider import PersonaProvider
from agora.protocol.message import (
    Participant,
    Phase,
    Task,
    UtteranceRecord
)

# Receives (display name, content, phase) once per utterance
TranscriptSink = Callable[[str, str, Phase], Union[None, Awaitable[None]]]


async def call_listener(callback: Callable[..., Any], *args: Any) -> None:
    """Invoke a sync or async callback."""
    result = callback(*args)
    if inspect.isawaitable(result):
        await result


class BaseOrchestrator:
    """
    Common state for one orchestrated session.

    An orchestrator owns its ledger exclusively for the lifetime of a session.
    """

    def __init__(
        self,
        topic: str,
        model: LanguageModel,
        persona_provider: PersonaProvider,
        transcript_sink: Optional[TranscriptSink] = None
    ):
        self.model = model
        self.persona_provider = persona_provider
        self.transcript_sink = transcript_sink
        self.ledger = TurnLedger(topic)
        self.actors: Dict[str, Actor] = {}
        self.state = SessionState.PENDING
        self.error: Optional[Exception] = None
        self._abandon_requested = False
        self.logger = logging.getLogger("agora.orchestrator")

    def _add_participant(self, participant: Participant) -> Actor:
        persona = self.persona_provider.resolve(participant.identity)
        actor = Actor(participant, persona, self.model)
        self.actors[participant.identity] = actor
        return actor

    def _bind(self, identity: str, stance: str, forced_stances: Dict[str, str]) -> Participant:
        persona = self.persona_provider.resolve(identity)
        forced = identity in forced_stances
        return Participant(
            identity=identity,
            display_name=persona.display_name,
            stance=forced_stances[identity] if forced else stance,
            forced=forced
        )

    def get_actor(self, identity: str) -> Actor:
        try:
            return self.actors[identity]
        except KeyError:
            raise MemberNotFoundError(identity) from None

    @property
    def participants(self) -> List[Participant]:
        return [actor.participant for actor in self.actors.values()]

    @property
    def records(self) -> List[UtteranceRecord]:
        """Records produced so far, including those of a failed run."""
        return list(self.ledger.history)

    def abandon(self) -> None:
        """
        Ask the session to stop before its next turn.

        A model call already in flight is allowed to finish.
        """
        self._abandon_requested = True
        self.logger.info(f"Abandon requested for session on {self.ledger.topic!r}")

    @property
    def abandoned(self) -> bool:
        return self._abandon_requested

    def _set_state(self, new_state: SessionState) -> None:
        self.state = transition(self.state, new_state)

    def _start(self) -> None:
        self._set_state(SessionState.RUNNING)

    def _finish(self) -> None:
        self._set_state(SessionState.COMPLETED)

    def _fail(self, error: Exception) -> None:
        self.error = error
        if isinstance(error, SessionAbandonedError):
            self._set_state(SessionState.ABANDONED)
            self.logger.info(f"Session abandoned after {len(self.ledger)} utterances")
        else:
            self._set_state(SessionState.FAILED)
            self.logger.error(f"Session failed after {len(self.ledger)} utterances: {error}")

    async def take_turn(
        self,
        actor: Actor,
        task: Task,
        target: Optional[str] = None
    ) -> UtteranceRecord:
        """
        Run one turn: speak, append, notify.

        Args:
            actor: The actor to speak
            task: Task for this turn
            target: Identity the utterance is addressed to

        Returns:
            The appended record

        Raises:
            SessionAbandonedError: If the session was abandoned
            ModelInvocationError: If the model call failed
        """
        if self._abandon_requested:
            raise SessionAbandonedError(f"Session on {self.ledger.topic!r} was abandoned")

        content = await actor.speak(self.ledger, task)

        record = UtteranceRecord(
            speaker=actor.identity,
            speaker_name=actor.name,
            content=content,
            phase=self.ledger.phase,
            task_type=task.type,
            target=target
        )
        self.ledger.append(record)
        self.logger.info(f"[{record.phase.value}] {record.speaker_name} ({task.type.value})")

        await self._notify(record)
        return record

    async def _notify(self, record: UtteranceRecord) -> None:
        if self.transcript_sink is None:
            return
        try:
            await call_listener(self.transcript_sink, record.speaker_name, record.content, record.phase)
        except Exception as e:
            self.logger.error(f"Error in transcript sink: {e}")
