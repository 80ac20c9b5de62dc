"""
Actor for Agora.

An actor is the stateless producer of one utterance: given a task and the
context window the ledger allows it to see, it builds a prompt and makes a
single language model call.
"""

import logging
from typing import List

from agora.adapters.base.adapter import LanguageModel
from agora.errors import ModelInvocationError
from agora.orchestrator.ledger import TurnLedger
from agora.personas.provider import Persona
from agora.protocol.message import (
    ChatMessage,
    MessageRole,
    Participant,
    Task
)


class Actor:
    """
    Speaks for one participant.

    The actor holds no conversational state of its own; everything it knows
    about the session comes from the ledger's context window for the task.
    """

    def __init__(self, participant: Participant, persona: Persona, model: LanguageModel):
        self.participant = participant
        self.persona = persona
        self.model = model
        self.logger = logging.getLogger("agora.orchestrator.actor")

    @property
    def identity(self) -> str:
        return self.participant.identity

    @property
    def name(self) -> str:
        return self.participant.display_name

    def build_system_prompt(self, ledger: TurnLedger, task: Task) -> str:
        if self.participant.forced:
            prompt = self.persona.build_forced_stance_prompt(ledger.topic, self.participant.stance)
        else:
            prompt = self.persona.build_debate_prompt(
                ledger.topic, self.participant.stance, ledger.phase.value
            )
        return prompt + "\n\n" + task.build_prompt()

    def build_messages(self, ledger: TurnLedger, task: Task) -> List[ChatMessage]:
        """
        Build the message list for a turn.

        Args:
            ledger: Ledger of the session
            task: Task for this turn

        Returns:
            System prompt, one user message per visible record, then the
            task instruction
        """
        messages = [ChatMessage(role=MessageRole.SYSTEM, content=self.build_system_prompt(ledger, task))]

        for record in ledger.relevant_history(self.identity, task.type):
            messages.append(ChatMessage(role=MessageRole.USER, content=record.render()))

        messages.append(ChatMessage(role=MessageRole.USER, content=task.instruction))
        return messages

    async def speak(self, ledger: TurnLedger, task: Task) -> str:
        """
        Produce one utterance.

        Raises:
            ModelInvocationError: If the language model call fails
        """
        messages = self.build_messages(ledger, task)
        turn = len(ledger) + 1

        try:
            response = await self.model.invoke(messages, tools=None)
        except Exception as e:
            raise ModelInvocationError(
                speaker=self.identity,
                task_type=task.type,
                phase=ledger.phase,
                turn=turn,
                message=str(e)
            ) from e

        self.logger.debug(f"{self.name} produced {len(response.content)} characters for {task.type.value}")
        return response.content
