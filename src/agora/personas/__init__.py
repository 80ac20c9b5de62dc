"""
Personas for Agora

Character definitions and the provider interface the orchestrators use to
resolve actor identities.
"""

from agora.personas.provider import Persona, PersonaProvider, StaticPersonaProvider

__all__ = ["Persona", "PersonaProvider", "StaticPersonaProvider"]
