"""
Autonomous Moderator for Agora.

An open-ended discussion in which the next step is itself chosen by a language
model. Each iteration is one think/execute cycle:

- think: describe the session state to the moderator model and decode its
  answer into a ``ModeratorDecision``
- execute: let the chosen member carry out the chosen task, append the
  utterance to the ledger and advance the round counter

The loop stops when the round counter reaches ``max_rounds``, or when a
decision asks to end. Iterations never overlap; every decision is made on the
ledger as the previous iteration left it.
"""

from typing import Awaitable, Callable, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from agora.adapters.base.adapter import LanguageModel
from agora.config import DiscussionConfig
from agora.errors import MemberNotFoundError, ModelInvocationError, SessionAbandonedError
from agora.orchestrator.base import BaseOrchestrator, TranscriptSink, call_listener
from agora.orchestrator.decision import ModeratorDecision, parse_decision
from agora.orchestrator.session_state import SessionState
from agora.personas.provider import PersonaProvider
from agora.protocol.message import (
    ChatMessage,
    MessageRole,
    Phase,
    TaskType,
    UtteranceRecord
)

DecisionListener = Callable[[ModeratorDecision], Union[None, Awaitable[None]]]

# History entries shown to the moderator, and how much of each
STATE_HISTORY_ENTRIES = 5
STATE_CONTENT_CHARS = 100

MODERATOR_PROMPT = """You are the moderator of a group discussion.

[Members]
{members}

[Your responsibilities]
1. Decide who speaks next
2. Decide what kind of turn it is (opening, question, answer, comment, summary)
3. Judge whether the discussion should continue or end
4. Make sure every member gets a chance to speak
5. Move the discussion to the next phase at the right time

[Phases]
1. opening: every member gives their initial thoughts
2. questioning: members ask each other questions and answer them
3. free_debate: open exchange
4. closing: every member gives a final summary

[Decision format]
Answer with exactly these lines:
ACTION: [action type]
SPEAKER: [member id]
TARGET: [target member id, or none]
INSTRUCTION: [instruction for the speaker]
REASON: [why you made this decision]
SHOULD_END: [true/false]
PHASE: [current phase]

[Action types]
- opening_speech: opening statement
- ask_question: the speaker asks the target a question
- request_answer: the speaker answers the target's question
- invite_comment: invite the speaker to comment
- free_discussion: open discussion
- request_summary: ask the speaker for a closing summary
- end_discussion: end the discussion

[Member ids]
{member_ids}"""


class DiscussionResult(BaseModel):
    """Outcome of a moderated discussion."""

    topic: str
    state: SessionState
    rounds: int
    records: List[UtteranceRecord] = Field(default_factory=list)
    decisions: List[ModeratorDecision] = Field(default_factory=list)


class AutonomousModerator(BaseOrchestrator):
    """Self-driving discussion loop."""

    def __init__(
        self,
        config: DiscussionConfig,
        model: LanguageModel,
        persona_provider: PersonaProvider,
        transcript_sink: Optional[TranscriptSink] = None,
        decision_listener: Optional[DecisionListener] = None,
        moderator_model: Optional[LanguageModel] = None
    ):
        """
        Set up a discussion.

        Args:
            config: Validated discussion configuration
            model: Language model the members speak through
            persona_provider: Resolves member identities
            transcript_sink: Optional callback receiving every utterance
            decision_listener: Optional callback receiving every decision
            moderator_model: Model used for decisions, defaults to ``model``
        """
        super().__init__(config.topic, model, persona_provider, transcript_sink)
        self.config = config
        self.moderator_model = moderator_model or model
        self.decision_listener = decision_listener
        self.max_rounds = config.max_rounds
        self.round_count = 0
        self.decisions: List[ModeratorDecision] = []

        for identity in config.participants:
            stance = config.stances.get(identity, "")
            self._add_participant(self._bind(identity, stance, config.forced_stances))

    def member_names(self) -> Dict[str, str]:
        return {identity: actor.name for identity, actor in self.actors.items()}

    def build_moderator_prompt(self) -> str:
        names = self.member_names()
        return MODERATOR_PROMPT.format(
            members=", ".join(names.values()),
            member_ids="\n".join(f"- {identity}: {name}" for identity, name in names.items())
        )

    def build_state_description(self) -> str:
        """Describe the session for the moderator model."""
        history = self.ledger.history
        lines = [
            f"[Topic]\n{self.ledger.topic}\n",
            f"[Current phase] {self.ledger.phase.value}",
            f"[Rounds so far] {self.round_count} / {self.max_rounds}\n",
            "[Transcript]",
        ]

        if not history:
            lines.append("Nobody has spoken yet")
        else:
            start = max(0, len(history) - STATE_HISTORY_ENTRIES)
            if start:
                lines.append(f"... {start} earlier entries omitted ...")
            for record in history[start:]:
                content = record.content
                if len(content) > STATE_CONTENT_CHARS:
                    content = content[:STATE_CONTENT_CHARS] + "..."
                lines.append(f"- [{record.phase.value}][{record.speaker_name}] {content}")

        lines.append("\n[Opening statements]")
        for identity, name in self.member_names().items():
            done = identity in self.ledger.opening_statements
            lines.append(f"{'✓' if done else '○'} {name} {'has' if done else 'has not'} given an opening")

        if self.ledger.phase == Phase.CLOSING:
            lines.append("\n[Closing statements]")
            for identity, name in self.member_names().items():
                done = identity in self.ledger.closing_statements
                lines.append(f"{'✓' if done else '○'} {name} {'has' if done else 'has not'} given a summary")

        lines.append("\nBased on the above, decide what should happen next.")
        return "\n".join(lines)

    async def think(self) -> ModeratorDecision:
        """
        Ask the moderator model for the next decision.

        Raises:
            ModelInvocationError: If the moderator call fails
        """
        messages = [
            ChatMessage(role=MessageRole.SYSTEM, content=self.build_moderator_prompt()),
            ChatMessage(role=MessageRole.USER, content=self.build_state_description()),
        ]

        try:
            response = await self.moderator_model.invoke(messages, tools=None)
        except Exception as e:
            raise ModelInvocationError(
                speaker="moderator",
                task_type=TaskType.FREE_DEBATE,
                phase=self.ledger.phase,
                turn=len(self.ledger) + 1,
                message=str(e)
            ) from e

        decision = self._normalize(parse_decision(response.content, self.ledger.phase))
        self.logger.info(
            f"Moderator decision: {decision.action.value} by {decision.next_speaker or '?'}"
            f" ({decision.reason or 'no reason given'})"
        )
        return decision

    def _match_member(self, identity: Optional[str]) -> Optional[str]:
        # Exact match first, then case-insensitive
        if identity is None or identity in self.actors:
            return identity
        for known in self.actors:
            if known.casefold() == identity.casefold():
                return known
        return identity

    def _normalize(self, decision: ModeratorDecision) -> ModeratorDecision:
        return decision.model_copy(update={
            "next_speaker": self._match_member(decision.next_speaker),
            "target": self._match_member(decision.target),
        })

    async def execute(self, decision: ModeratorDecision) -> Optional[UtteranceRecord]:
        """
        Carry out a decision.

        Returns:
            The produced record, or None if the decision ends the discussion

        Raises:
            MemberNotFoundError: If the speaker or target is not a member
            ModelInvocationError: If the member's model call fails
        """
        if decision.ends_discussion:
            return None

        self.ledger.phase = decision.phase

        if decision.next_speaker not in self.actors:
            raise MemberNotFoundError(decision.next_speaker)
        actor = self.actors[decision.next_speaker]
        task = decision.to_task(self.member_names())

        record = await self.take_turn(actor, task, target=decision.target)
        self.round_count += 1
        return record

    async def run(self) -> DiscussionResult:
        """
        Run think/execute cycles until a terminal condition.

        Raises:
            ModelInvocationError: If a moderator or member call fails
            MemberNotFoundError: If a decision names an unknown member
            SessionAbandonedError: If the session was abandoned
        """
        self._start()
        self.logger.info(
            f"Starting discussion on {self.ledger.topic!r} with {len(self.actors)} members, "
            f"at most {self.max_rounds} rounds"
        )

        try:
            while self.round_count < self.max_rounds:
                if self.abandoned:
                    raise SessionAbandonedError(f"Session on {self.ledger.topic!r} was abandoned")

                decision = await self.think()
                self.decisions.append(decision)
                await self._notify_decision(decision)

                if decision.ends_discussion:
                    self.logger.info(f"Moderator ended the discussion after {self.round_count} rounds")
                    break

                await self.execute(decision)
        except Exception as e:
            self._fail(e)
            raise

        self._finish()
        return DiscussionResult(
            topic=self.ledger.topic,
            state=self.state,
            rounds=self.round_count,
            records=self.records,
            decisions=list(self.decisions)
        )

    async def _notify_decision(self, decision: ModeratorDecision) -> None:
        if self.decision_listener is None:
            return
        try:
            await call_listener(self.decision_listener, decision)
        except Exception as e:
            self.logger.error(f"Error in decision listener: {e}")
