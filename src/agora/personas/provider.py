"""
Persona Provider for Agora.

Personas turn an actor identity into a display name and the base prompt that
sets up its character. The provider is a pure lookup; persona text itself is
data supplied by the deployment.
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Iterable, List, Union

from pydantic import BaseModel, Field

from agora.errors import ConfigurationError


class Persona(BaseModel):
    """Character definition for one actor identity."""

    identity: str = Field(..., description="Key used in session configuration")
    display_name: str = Field(..., description="Name shown in transcripts")
    base_prompt: str = Field(..., description="System prompt fragment describing the character")

    def build_debate_prompt(self, topic: str, stance: str, phase: str) -> str:
        """Frame the persona for a stance it holds naturally."""
        return (
            f"{self.base_prompt}\n\n"
            "[Current discussion]\n"
            f"Topic: {topic}\n"
            f"Your stance: {stance or 'speak from your own perspective'}\n"
            f"Current phase: {phase}\n\n"
            "[Discussion rules]\n"
            "1. Hold your position and express it in your own way\n"
            "2. Listen carefully to the others\n"
            "3. Keep your personality and way of speaking"
        )

    def build_forced_stance_prompt(self, topic: str, stance: str) -> str:
        """Frame the persona for a stance imposed on it."""
        return (
            f"{self.base_prompt}\n\n"
            "[Special assignment]\n"
            f"Topic: {topic}\n"
            f"Assigned stance: {stance}\n\n"
            "[Important]\n"
            "Argue this position regardless of your natural view, even if it differs "
            "from what you would usually think.\n"
            "Find the parts of your character that can support it and speak from them. "
            "Stay in character and use your own way of persuading others."
        )


class PersonaProvider(ABC):
    """Resolves actor identities to personas."""

    @abstractmethod
    def resolve(self, identity: str) -> Persona:
        """
        Look up the persona for an identity.

        Raises:
            ConfigurationError: If the identity is unknown
        """
        pass

    def resolve_all(self, identities: Iterable[str]) -> List[Persona]:
        return [self.resolve(identity) for identity in identities]


class StaticPersonaProvider(PersonaProvider):
    """Dictionary-backed persona provider."""

    def __init__(self, personas: Iterable[Persona]):
        self._personas: Dict[str, Persona] = {p.identity: p for p in personas}

    def resolve(self, identity: str) -> Persona:
        try:
            return self._personas[identity]
        except KeyError:
            raise ConfigurationError(f"Unknown persona: {identity!r}") from None

    def identities(self) -> List[str]:
        return list(self._personas)

    @classmethod
    def from_json_file(cls, path: Union[str, Path]) -> "StaticPersonaProvider":
        """
        Load personas from a JSON file.

        The file holds a list of objects with ``identity``, ``display_name``
        and ``base_prompt`` keys.
        """
        with Path(path).open("r", encoding="utf-8") as f:
            raw = json.load(f)

        if not isinstance(raw, list):
            raise ConfigurationError(f"Persona file {path} must contain a JSON list")

        return cls(Persona.model_validate(item) for item in raw)
