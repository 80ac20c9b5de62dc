"""
Scripted Orchestrator for Agora.

Runs a fixed three-phase pro/con debate:

1. Opening: all pro participants in order, then all con participants.
2. Questioning: each pro participant questions a con participant and is
   questioned back by them. Pro participant ``i`` is paired with con
   participant ``i mod len(con)``, so unequal sides wrap around instead of
   failing.
3. Closing: all con participants first, then all pro participants, so the
   side that opened first also speaks last.

There is no branching and no partial success: any failed turn aborts the run.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from agora.adapters.base.adapter import LanguageModel
from agora.config import DebateConfig
from agora.orchestrator.actor import Actor
from agora.orchestrator.base import BaseOrchestrator, TranscriptSink
from agora.orchestrator.session_state import SessionState
from agora.personas.provider import PersonaProvider
from agora.protocol.message import Phase, Task, TaskType, UtteranceRecord


class DebateResult(BaseModel):
    """Outcome of a completed debate."""

    topic: str
    state: SessionState
    records: List[UtteranceRecord] = Field(default_factory=list)


class ScriptedOrchestrator(BaseOrchestrator):
    """Drives the fixed debate protocol."""

    def __init__(
        self,
        config: DebateConfig,
        model: LanguageModel,
        persona_provider: PersonaProvider,
        transcript_sink: Optional[TranscriptSink] = None
    ):
        """
        Set up a debate.

        Args:
            config: Validated debate configuration
            model: Language model the actors speak through
            persona_provider: Resolves participant identities
            transcript_sink: Optional callback receiving every utterance

        Raises:
            ConfigurationError: If a participant has no persona
        """
        super().__init__(config.topic, model, persona_provider, transcript_sink)
        self.config = config

        for identity in config.pro_participants:
            self._add_participant(self._bind(identity, config.pro_stance, config.forced_stances))
        for identity in config.con_participants:
            self._add_participant(self._bind(identity, config.con_stance, config.forced_stances))

        self.pro: List[Actor] = [self.actors[i] for i in config.pro_participants]
        self.con: List[Actor] = [self.actors[i] for i in config.con_participants]

    async def run(self) -> DebateResult:
        """
        Run the whole debate.

        Returns:
            The debate result with the full history

        Raises:
            ModelInvocationError: If any turn fails; ``records`` still holds
                what was said before the failure
            SessionAbandonedError: If the session was abandoned
        """
        self._start()
        self.logger.info(
            f"Starting debate on {self.ledger.topic!r}: "
            f"{len(self.pro)} pro, {len(self.con)} con"
        )

        try:
            await self.run_opening_phase()
            await self.run_questioning_phase()
            await self.run_closing_phase()
        except Exception as e:
            self._fail(e)
            raise

        self._finish()
        self.logger.info(f"Debate on {self.ledger.topic!r} completed with {len(self.ledger)} utterances")
        return DebateResult(topic=self.ledger.topic, state=self.state, records=self.records)

    async def run_opening_phase(self) -> None:
        self.ledger.phase = Phase.OPENING
        for actor in self.pro + self.con:
            task = Task(type=TaskType.OPENING, instruction="Please give your opening statement.")
            await self.take_turn(actor, task)

    async def run_questioning_phase(self) -> None:
        self.ledger.phase = Phase.QUESTIONING
        for i, pro in enumerate(self.pro):
            con = self.con[i % len(self.con)]
            await self.run_question_exchange(pro, con)
            await self.run_question_exchange(con, pro)

    async def run_question_exchange(self, questioner: Actor, answerer: Actor) -> None:
        """Let ``questioner`` ask ``answerer`` one question and get the answer."""
        question_task = Task(
            type=TaskType.QUESTION,
            target_name=answerer.name,
            instruction=f"Please put your question to {answerer.name}."
        )
        question = await self.take_turn(questioner, question_task, target=answerer.identity)

        answer_task = Task(
            type=TaskType.ANSWER,
            target_name=questioner.name,
            instruction=f"{questioner.name} asks you: {question.content}"
        )
        await self.take_turn(answerer, answer_task, target=questioner.identity)

    async def run_closing_phase(self) -> None:
        self.ledger.phase = Phase.CLOSING
        for actor in self.con + self.pro:
            task = Task(type=TaskType.CLOSING, instruction="Please give your closing statement.")
            await self.take_turn(actor, task)
