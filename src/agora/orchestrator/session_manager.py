"""
Session Manager for Agora.

This module keeps the registry of running and finished sessions for a service
that hosts many debates and discussions at once. Each session gets its own
orchestrator and ledger; nothing mutable is shared between sessions apart
from the registry itself, which is guarded by a lock.
"""

import asyncio
import logging
import random
import string
from datetime import datetime, timezone
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from agora.adapters.base.adapter import LanguageModel
from agora.config import DebateConfig, DiscussionConfig
from agora.memory.base import TranscriptStore
from agora.orchestrator.base import BaseOrchestrator
from agora.orchestrator.decision import ModeratorDecision
from agora.orchestrator.moderator import AutonomousModerator
from agora.orchestrator.scripted import ScriptedOrchestrator
from agora.orchestrator.session_state import TERMINAL_STATES, SessionState
from agora.personas.provider import PersonaProvider
from agora.protocol.message import Phase, UtteranceRecord


class SessionStatus(BaseModel):
    """Snapshot of one session."""

    id: str = Field(..., description="Session identifier")
    kind: str = Field(..., description="'debate' or 'discussion'")
    topic: str = Field(..., description="Topic of the session")
    state: SessionState = Field(default=SessionState.PENDING)
    current_phase: Phase = Field(default=Phase.OPENING)
    records: List[UtteranceRecord] = Field(default_factory=list)
    decisions: List[ModeratorDecision] = Field(default_factory=list)
    error: Optional[str] = Field(None, description="Error text of a failed session")
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    ended_at: Optional[datetime] = None


def generate_session_id() -> str:
    """Create an id of the form ``YYYYMMDDhhmmss-xxxxxx``."""
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=6))
    return datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S") + "-" + suffix


class SessionManager:
    """
    Runs sessions and tracks their status.

    The SessionManager is responsible for:
    - Building an orchestrator per session (configuration errors surface here)
    - Running it inline or as a background task
    - Keeping a live status with the records produced so far
    - Forwarding records to a transcript store
    - Abandoning sessions on request
    """

    def __init__(
        self,
        model: LanguageModel,
        persona_provider: PersonaProvider,
        transcript_store: Optional[TranscriptStore] = None
    ):
        """
        Initialize the session manager.

        Args:
            model: Language model shared by all sessions
            persona_provider: Resolves participant identities
            transcript_store: Optional store receiving every record
        """
        self.model = model
        self.persona_provider = persona_provider
        self.transcript_store = transcript_store
        self._sessions: Dict[str, SessionStatus] = {}
        self._orchestrators: Dict[str, BaseOrchestrator] = {}
        self._tasks: Dict[str, asyncio.Task] = {}
        self._lock = asyncio.Lock()
        self.logger = logging.getLogger("agora.sessions")

    async def start_debate(self, config: DebateConfig, wait: bool = True) -> SessionStatus:
        """
        Start a scripted debate.

        Args:
            config: Debate configuration
            wait: Run to completion before returning; otherwise run in the
                background and return the pending status

        Returns:
            Status of the session

        Raises:
            ConfigurationError: If a participant has no persona
        """
        session_id = generate_session_id()
        orchestrator = ScriptedOrchestrator(
            config,
            self.model,
            self.persona_provider,
            transcript_sink=self._make_sink(session_id)
        )
        return await self._launch(session_id, "debate", orchestrator, wait)

    async def start_discussion(self, config: DiscussionConfig, wait: bool = True) -> SessionStatus:
        """
        Start a moderated discussion.

        Args:
            config: Discussion configuration
            wait: Run to completion before returning

        Returns:
            Status of the session
        """
        session_id = generate_session_id()
        orchestrator = AutonomousModerator(
            config,
            self.model,
            self.persona_provider,
            transcript_sink=self._make_sink(session_id),
            decision_listener=self._make_decision_listener(session_id)
        )
        return await self._launch(session_id, "discussion", orchestrator, wait)

    async def _launch(
        self,
        session_id: str,
        kind: str,
        orchestrator: BaseOrchestrator,
        wait: bool
    ) -> SessionStatus:
        status = SessionStatus(id=session_id, kind=kind, topic=orchestrator.ledger.topic)

        async with self._lock:
            self._sessions[session_id] = status
            self._orchestrators[session_id] = orchestrator

        self.logger.info(f"Created {kind} session {session_id} on {status.topic!r}")

        if wait:
            await self._run(session_id, orchestrator)
        else:
            self._tasks[session_id] = asyncio.create_task(self._run(session_id, orchestrator))

        return await self.get_status(session_id)

    async def _run(self, session_id: str, orchestrator: BaseOrchestrator) -> None:
        async with self._lock:
            self._sessions[session_id].state = SessionState.RUNNING

        error: Optional[Exception] = None
        try:
            await orchestrator.run()
        except Exception as e:
            error = e
            self.logger.error(f"Session {session_id} ended with error: {e}")

        async with self._lock:
            status = self._sessions[session_id]
            status.state = orchestrator.state
            status.records = orchestrator.records
            status.current_phase = orchestrator.ledger.phase
            status.ended_at = datetime.now(timezone.utc)
            if error is not None:
                status.error = str(error)
            self._orchestrators.pop(session_id, None)
            self._tasks.pop(session_id, None)

        self.logger.info(f"Session {session_id} finished as {status.state.value}")

    def _make_sink(self, session_id: str):
        async def sink(speaker_name: str, content: str, phase: Phase) -> None:
            orchestrator = self._orchestrators.get(session_id)
            record = orchestrator.ledger.last_record() if orchestrator else None
            if record is None:
                return

            async with self._lock:
                status = self._sessions[session_id]
                status.current_phase = phase
                status.records.append(record)

            if self.transcript_store is not None:
                await self.transcript_store.store_record(session_id, record)

        return sink

    def _make_decision_listener(self, session_id: str):
        async def listener(decision: ModeratorDecision) -> None:
            async with self._lock:
                self._sessions[session_id].decisions.append(decision)

        return listener

    async def get_status(self, session_id: str) -> Optional[SessionStatus]:
        """
        Get a snapshot of a session.

        Returns:
            A copy of the session status, or None if unknown
        """
        async with self._lock:
            status = self._sessions.get(session_id)
            return status.model_copy(deep=True) if status else None

    async def list_sessions(self) -> List[SessionStatus]:
        async with self._lock:
            return [s.model_copy(deep=True) for s in self._sessions.values()]

    async def wait_for(self, session_id: str) -> Optional[SessionStatus]:
        """Wait for a background session to finish and return its status."""
        task = self._tasks.get(session_id)
        if task is not None:
            await task
        return await self.get_status(session_id)

    async def abandon(self, session_id: str) -> bool:
        """
        Stop a session before its next turn.

        A model call in flight is left to finish.

        Returns:
            True if the session was still active, False otherwise
        """
        async with self._lock:
            status = self._sessions.get(session_id)
            orchestrator = self._orchestrators.get(session_id)
            if status is None or orchestrator is None or status.state in TERMINAL_STATES:
                return False
            orchestrator.abandon()

        self.logger.info(f"Abandoning session {session_id}")
        return True
