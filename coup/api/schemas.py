"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between a browser UI and the engine.
All responses include explicit types for OpenAPI schema generation.

Error Codes:
- SESSION_NOT_FOUND: Session does not exist or has ended
- INVALID_DECISION: Wrong participant or choice index out of range
- NO_PENDING_DECISION: Nothing is waiting on an answer
- VALIDATION_ERROR: Request values are unplayable (e.g. 7 participants)
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class SessionStatus(str, Enum):
    """Session status values."""
    CREATED = "created"
    ACTIVE = "active"
    WAITING_INPUT = "waiting_input"
    GAME_OVER = "game_over"
    ABANDONED = "abandoned"


class DifficultyLevel(str, Enum):
    NORMAL = "normal"
    HARD = "hard"


class ErrorCode(str, Enum):
    """Structured error codes."""
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    INVALID_DECISION = "INVALID_DECISION"
    NO_PENDING_DECISION = "NO_PENDING_DECISION"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class CardInfo(BaseModel):
    """A card as one viewer sees it. Hidden cards have no role."""
    revealed: bool
    role: Optional[str] = Field(None, description="Null when hidden from the viewer")


class ParticipantInfo(BaseModel):
    """Participant information for display."""
    participant_id: int
    name: str
    is_human: bool
    difficulty: Optional[str] = None
    coins: int
    influence: int
    alive: bool
    is_current_turn: bool = False
    cards: list[CardInfo] = Field(default_factory=list)


class PendingDecisionInfo(BaseModel):
    """The decision the game is waiting on."""
    decision_id: str
    participant_id: int
    kind: str = Field(description="action_selection, target_selection, challenge_or_pass, ...")
    prompt: str
    options: list[Any] = Field(description="Answer with the index of one of these")
    context: dict[str, Any] = Field(default_factory=dict)


class EventInfo(BaseModel):
    """One entry of the game log."""
    type: str
    turn_number: int
    message: str
    data: dict[str, Any] = Field(default_factory=dict)


# =============================================================================
# Request Models
# =============================================================================

class CreateSessionRequest(BaseModel):
    """Request to create a new game session. 2-6 participants in total."""
    human_count: int = Field(1, ge=0, le=6, description="Number of human participants")
    ai_count: int = Field(1, ge=0, le=6, description="Number of AI participants")
    difficulty: DifficultyLevel = Field(DifficultyLevel.NORMAL, description="AI difficulty")
    random_seed: Optional[int] = Field(None, description="Seed for reproducible games")


class DecisionRequest(BaseModel):
    """Answer to the pending decision."""
    participant_id: int = Field(..., description="Participant answering")
    choice_index: int = Field(..., description="Index into the pending decision's options")


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class GameStateResponse(BaseModel):
    """Public game view plus the pending decision."""
    session_id: str
    status: SessionStatus
    turn_number: int
    participants: list[ParticipantInfo] = Field(default_factory=list)
    current_turn_participant_id: Optional[int] = None
    deck_size: int = 0
    pending_decision: Optional[PendingDecisionInfo] = None
    winner: Optional[ParticipantInfo] = None
    api_version: str = "v1"


class SessionResponse(BaseModel):
    """Response after creating a session or answering a decision."""
    session_id: str
    status: SessionStatus
    created_at: float = 0.0
    game_state: GameStateResponse
    new_events: list[str] = Field(default_factory=list, description="Log lines since the last call")
    api_version: str = "v1"


class EventLogResponse(BaseModel):
    session_id: str
    events: list[EventInfo] = Field(default_factory=list)
    count: int = 0


class SessionListResponse(BaseModel):
    """Response listing active sessions."""
    sessions: list[str]
    count: int


class EndSessionResponse(BaseModel):
    """Response after ending a session."""
    success: bool
    session_id: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
