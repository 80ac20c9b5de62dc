"""
Turn Ledger for Agora.

The ledger is the single record of what has been said in one session. It owns
the append-only history and three indices derived from it (opening statements,
question/answer exchanges, closing statements), and it decides which part of
that history an actor is shown before taking a turn.
"""

import logging
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from agora.protocol.message import (
    Phase,
    QuestionAnswerPair,
    TaskType,
    UtteranceRecord
)


# Number of trailing records shown for a free debate turn
FREE_DEBATE_WINDOW = 3


class TurnLedger:
    """
    Append-only utterance history with derived per-phase indices.

    The indices hold the very record objects stored in the history, so every
    indexed entry is also present in the history with the same content. They
    are only ever updated by ``append``.
    """

    def __init__(self, topic: str, phase: Phase = Phase.OPENING):
        """
        Initialize an empty ledger.

        Args:
            topic: Topic under discussion
            phase: Phase the session starts in
        """
        self.topic = topic
        self.phase = phase
        self._history: List[UtteranceRecord] = []
        self._openings: Dict[str, UtteranceRecord] = {}
        self._exchanges: List[QuestionAnswerPair] = []
        self._closings: Dict[str, UtteranceRecord] = {}
        self.logger = logging.getLogger("agora.orchestrator.ledger")

    @property
    def history(self) -> Tuple[UtteranceRecord, ...]:
        """The global history, in the order records were appended."""
        return tuple(self._history)

    @property
    def opening_statements(self) -> Mapping[str, UtteranceRecord]:
        return MappingProxyType(self._openings)

    @property
    def closing_statements(self) -> Mapping[str, UtteranceRecord]:
        return MappingProxyType(self._closings)

    @property
    def exchanges(self) -> Tuple[QuestionAnswerPair, ...]:
        return tuple(self._exchanges)

    def __len__(self) -> int:
        return len(self._history)

    def last_record(self) -> Optional[UtteranceRecord]:
        return self._history[-1] if self._history else None

    def append(self, record: UtteranceRecord) -> None:
        """
        Append a record to the history and update the derived indices.

        - an opening record becomes the speaker's opening statement
        - a closing record becomes the speaker's closing statement
        - an answer record that directly follows a question put to its speaker
          (or to nobody in particular) is paired with that question

        Args:
            record: The record to append
        """
        previous = self.last_record()
        self._history.append(record)

        if record.task_type == TaskType.OPENING:
            self._openings[record.speaker] = record
        elif record.task_type == TaskType.CLOSING:
            self._closings[record.speaker] = record
        elif record.task_type == TaskType.ANSWER and previous is not None:
            if previous.task_type == TaskType.QUESTION and previous.target in (None, record.speaker):
                self._exchanges.append(QuestionAnswerPair(question=previous, answer=record))

        self.logger.debug(
            f"Appended {record.task_type.value} by {record.speaker} "
            f"({len(self._history)} records)"
        )

    def relevant_history(self, speaker: str, task_type: TaskType) -> List[UtteranceRecord]:
        """
        Compute the context window shown to ``speaker`` before a task.

        This is a pure function of the ledger state:

        - opening: nothing
        - question: every other participant's opening statement
        - answer: the speaker's own opening, plus the last record if it is a question
        - closing: the speaker's own opening, plus every exchange they took part in
        - free_debate: the last ``FREE_DEBATE_WINDOW`` records
        - rebuttal: nothing

        Args:
            speaker: Identity of the participant about to speak
            task_type: Task the participant is about to carry out

        Returns:
            The records to show, oldest first
        """
        relevant: List[UtteranceRecord] = []

        if task_type == TaskType.QUESTION:
            relevant.extend(
                record for identity, record in self._openings.items()
                if identity != speaker
            )

        elif task_type == TaskType.ANSWER:
            if speaker in self._openings:
                relevant.append(self._openings[speaker])
            last = self.last_record()
            if last is not None and last.task_type == TaskType.QUESTION:
                relevant.append(last)

        elif task_type == TaskType.CLOSING:
            if speaker in self._openings:
                relevant.append(self._openings[speaker])
            for pair in self._exchanges:
                if pair.involves(speaker):
                    relevant.append(pair.question)
                    relevant.append(pair.answer)

        elif task_type == TaskType.FREE_DEBATE:
            relevant.extend(self._history[-FREE_DEBATE_WINDOW:])

        return relevant

    def projections_consistent(self) -> bool:
        """Check that every indexed entry also appears in the history."""
        indexed: List[UtteranceRecord] = list(self._openings.values())
        indexed.extend(self._closings.values())
        for pair in self._exchanges:
            indexed.append(pair.question)
            indexed.append(pair.answer)

        return all(record in self._history for record in indexed)
