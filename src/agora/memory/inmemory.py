"""
In-memory implementation of the Transcript Store for Agora.

Useful for tests, development and single-process deployments.
"""

import asyncio
import logging
from copy import deepcopy
from typing import Dict, List, Optional

from agora.memory.base import TranscriptStore
from agora.protocol.message import UtteranceRecord


class InMemoryTranscriptStore(TranscriptStore):
    """
    In-memory implementation of the Transcript Store.

    Fast but non-persistent. Several sessions may write concurrently, so the
    session map is guarded by a lock.
    """

    def __init__(self):
        """Initialize the in-memory store."""
        self._sessions: Dict[str, List[UtteranceRecord]] = {}
        self._lock = asyncio.Lock()
        self.logger = logging.getLogger("agora.memory")

    async def store_record(self, session_id: str, record: UtteranceRecord) -> bool:
        """Store a record in memory."""
        async with self._lock:
            self._sessions.setdefault(session_id, []).append(deepcopy(record))
        return True

    async def get_session_records(
        self,
        session_id: str,
        limit: Optional[int] = None,
        offset: Optional[int] = None
    ) -> List[UtteranceRecord]:
        """Retrieve records from a specific session."""
        async with self._lock:
            records = list(self._sessions.get(session_id, []))

        if offset is not None:
            records = records[offset:]
        if limit is not None:
            records = records[:limit]

        # Return deep copies to prevent modifications
        return [deepcopy(r) for r in records]

    async def list_sessions(self) -> List[str]:
        async with self._lock:
            return list(self._sessions.keys())

    async def delete_session(self, session_id: str) -> bool:
        async with self._lock:
            existed = self._sessions.pop(session_id, None) is not None
        if existed:
            self.logger.info(f"Deleted transcript of session {session_id}")
        return existed
