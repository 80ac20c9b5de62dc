"""
Configuration for Agora.

Engine configuration (which model sources to call) is loaded from a JSON file,
with API keys taken from the environment. Session configuration (topic, sides,
members) is built by the caller and validated when it is constructed, so a
misconfigured session never starts.
"""

import json
import logging
import os
from pathlib import Path
from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

logger = logging.getLogger("agora.config")


class ModelSourceConfig(BaseModel):
    """One language model endpoint."""

    name: str = Field(..., description="Name used in logs and statistics")
    provider: Literal["openai", "anthropic"] = Field(default="openai", description="SDK used to reach the source")
    model: str = Field(..., description="Model identifier")
    api_key_env: str = Field(..., description="Environment variable holding the API key")
    base_url: Optional[str] = Field(None, description="Custom endpoint for OpenAI-compatible servers")
    priority: int = Field(default=0, description="Lower numbers are tried first")
    timeout: float = Field(default=30.0, description="Request timeout in seconds")
    max_retries: int = Field(default=2, description="Retries performed by the SDK client")
    temperature: float = Field(default=0.7)
    max_tokens: int = Field(default=1024)

    def api_key(self) -> str:
        return os.environ.get(self.api_key_env, "").strip()


class EngineConfig(BaseModel):
    """Configuration of the language model used by a deployment."""

    sources: List[ModelSourceConfig] = Field(default_factory=list)
    fallback_message: Optional[str] = Field(
        None, description="Returned when every source fails; errors propagate when unset"
    )
    default_max_rounds: int = Field(default=10, ge=1)

    def available_sources(self) -> List[ModelSourceConfig]:
        """Sources with an API key present, in priority order."""
        available = []
        for source in sorted(self.sources, key=lambda s: s.priority):
            if source.api_key():
                logger.info(f"Model source available: {source.name}")
                available.append(source)
            else:
                logger.info(f"Model source skipped (no API key): {source.name}, set {source.api_key_env}")
        return available


def load_engine_config(path: Union[str, Path]) -> EngineConfig:
    """
    Load engine configuration from a JSON file.

    Raises:
        FileNotFoundError: If the file does not exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Engine config not found: {path}")

    with path.open("r", encoding="utf-8") as f:
        return EngineConfig.model_validate(json.load(f))


def _check_unique(identities: List[str]) -> None:
    seen = set()
    for identity in identities:
        if identity in seen:
            raise ValueError(f"Participant {identity!r} listed more than once")
        seen.add(identity)


class DebateConfig(BaseModel):
    """Configuration of a scripted pro/con debate."""

    topic: str = Field(..., description="Motion under debate")
    pro_stance: str = Field(default="In favour of the motion")
    con_stance: str = Field(default="Against the motion")
    pro_participants: List[str] = Field(..., description="Pro side, in speaking order")
    con_participants: List[str] = Field(..., description="Con side, in speaking order")
    forced_stances: Dict[str, str] = Field(
        default_factory=dict, description="Per-identity stances that override the side stance"
    )

    @field_validator('topic')
    def topic_must_not_be_empty(cls, v):
        if not v or not v.strip():
            raise ValueError("Debate topic cannot be empty")
        return v.strip()

    @field_validator('pro_participants', 'con_participants')
    def side_must_not_be_empty(cls, v):
        if not v:
            raise ValueError("Each side needs at least one participant")
        return v

    @model_validator(mode='after')
    def participants_must_be_distinct(self):
        _check_unique(self.pro_participants + self.con_participants)
        for identity in self.forced_stances:
            if identity not in self.pro_participants and identity not in self.con_participants:
                raise ValueError(f"Forced stance given for non-participant {identity!r}")
        return self

    def all_participants(self) -> List[str]:
        return self.pro_participants + self.con_participants


class DiscussionConfig(BaseModel):
    """Configuration of a moderator-driven discussion."""

    topic: str = Field(..., description="Topic of the discussion")
    participants: List[str] = Field(..., description="Member identities")
    max_rounds: int = Field(default=10, ge=1, description="Upper bound on utterances")
    stances: Dict[str, str] = Field(default_factory=dict, description="Optional per-identity stances")
    forced_stances: Dict[str, str] = Field(default_factory=dict)

    @field_validator('topic')
    def topic_must_not_be_empty(cls, v):
        if not v or not v.strip():
            raise ValueError("Discussion topic cannot be empty")
        return v.strip()

    @field_validator('participants')
    def participants_must_not_be_empty(cls, v):
        if not v:
            raise ValueError("A discussion needs at least one participant")
        _check_unique(v)
        return v

    @model_validator(mode='after')
    def overrides_must_name_participants(self):
        for identity in list(self.stances) + list(self.forced_stances):
            if identity not in self.participants:
                raise ValueError(f"Stance given for non-participant {identity!r}")
        return self
