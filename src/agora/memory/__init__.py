"""
Transcript storage for Agora

This module provides storage and retrieval of the utterances produced by
debate and discussion sessions.
"""

from agora.memory.base import TranscriptStore
from agora.memory.inmemory import InMemoryTranscriptStore

__all__ = ["TranscriptStore", "InMemoryTranscriptStore"]
