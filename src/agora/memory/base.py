"""
Base Transcript Store interface for Agora.

This module defines the abstract base class for stores that keep the
utterances produced by sessions for later display or retrieval.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from agora.protocol.message import UtteranceRecord


class TranscriptStore(ABC):
    """
    Abstract base class for transcript storage implementations.

    The store receives records in history order, one call per utterance.
    """

    @abstractmethod
    async def store_record(self, session_id: str, record: UtteranceRecord) -> bool:
        """
        Store one utterance of a session.

        Args:
            session_id: Session the record belongs to
            record: The record to store

        Returns:
            True if storage was successful, False otherwise
        """
        pass

    @abstractmethod
    async def get_session_records(
        self,
        session_id: str,
        limit: Optional[int] = None,
        offset: Optional[int] = None
    ) -> List[UtteranceRecord]:
        """
        Retrieve the records of a session in the order they were stored.

        Args:
            session_id: Session to read
            limit: Maximum number of records to return
            offset: Number of records to skip

        Returns:
            The records, oldest first
        """
        pass

    @abstractmethod
    async def list_sessions(self) -> List[str]:
        """List the ids of all stored sessions."""
        pass

    @abstractmethod
    async def delete_session(self, session_id: str) -> bool:
        """
        Remove a session and its records.

        Returns:
            True if the session existed, False otherwise
        """
        pass
