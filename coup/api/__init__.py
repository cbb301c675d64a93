"""
API Module - Browser UI interface.

Exposes the engine via REST API. The UI:
1. Creates a game session (humans + AIs)
2. Renders the public view and the pending decision
3. Submits the human's choice as an option index
4. Shows the new log lines after each call

All state is session-scoped. No persistent user accounts required.
"""

from .schemas import (
    CreateSessionRequest,
    DecisionRequest,
    SessionResponse,
    GameStateResponse,
    ParticipantInfo,
    CardInfo,
    PendingDecisionInfo,
    EventInfo,
    ErrorCode,
    ErrorResponse,
)
from .service import APIService
from .app import create_app

__all__ = [
    "CreateSessionRequest",
    "DecisionRequest",
    "SessionResponse",
    "GameStateResponse",
    "ParticipantInfo",
    "CardInfo",
    "PendingDecisionInfo",
    "EventInfo",
    "ErrorCode",
    "ErrorResponse",
    "APIService",
    "create_app",
]
