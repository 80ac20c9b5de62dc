"""
Orchestration for Agora

This package drives sessions turn by turn: the ledger and its context
windows, the actors that speak, the scripted debate, the autonomous
moderator and the manager that runs many sessions side by side.
"""

from agora.orchestrator.session_state import SessionState
from agora.orchestrator.ledger import TurnLedger
from agora.orchestrator.actor import Actor
from agora.orchestrator.decision import ModeratorAction, ModeratorDecision, parse_decision
from agora.orchestrator.scripted import DebateResult, ScriptedOrchestrator
from agora.orchestrator.moderator import AutonomousModerator, DiscussionResult
from agora.orchestrator.session_manager import SessionManager, SessionStatus

__all__ = [
    "Actor",
    "AutonomousModerator",
    "DebateResult",
    "DiscussionResult",
    "ModeratorAction",
    "ModeratorDecision",
    "ScriptedOrchestrator",
    "SessionManager",
    "SessionState",
    "SessionStatus",
    "TurnLedger",
    "parse_decision",
]
