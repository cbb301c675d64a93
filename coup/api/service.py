"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to engine calls
2. Manages sessions
3. Builds the per-viewer public view of the game
4. Maps engine errors to ErrorResponse

This layer is framework-agnostic (usable without FastAPI).
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..engine_core.errors import InvalidDecisionChoice
from ..engine_core.setup import GameConfig
from ..engine_core.state import Difficulty, GameState, Participant
from ..session import Session, SessionManager
from .schemas import (
    CardInfo,
    CreateSessionRequest,
    DecisionRequest,
    ErrorCode,
    ErrorResponse,
    EventInfo,
    EventLogResponse,
    GameStateResponse,
    ParticipantInfo,
    PendingDecisionInfo,
    SessionResponse,
    SessionStatus,
)


def to_jsonable(value: Any) -> Any:
    """Enums to their values, containers recursively."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {str(to_jsonable(k)): to_jsonable(v) for k, v in value.items()}
    return value


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()

        response = service.create_session(CreateSessionRequest(human_count=1, ai_count=3))
        pending = response.game_state.pending_decision
        response = service.submit_decision(
            response.session_id,
            DecisionRequest(participant_id=pending.participant_id, choice_index=0),
        )
    """
    session_manager: SessionManager = field(default_factory=SessionManager)
    session_ttl_seconds: int = 3600

    def create_session(self, request: CreateSessionRequest) -> SessionResponse | ErrorResponse:
        """
        Create a session and run AI turns up to the first human decision.

        Finished sessions older than session_ttl_seconds are dropped first.
        """
        self.session_manager.cleanup_stale_sessions(self.session_ttl_seconds)
        config = GameConfig(
            human_count=request.human_count,
            ai_count=request.ai_count,
            difficulty=Difficulty(request.difficulty.value),
            random_seed=request.random_seed,
        )
        try:
            session = self.session_manager.create_session(config)
        except ValueError as e:
            return ErrorResponse(error=str(e), error_code=ErrorCode.VALIDATION_ERROR)
        return self._session_to_response(session)

    def get_session(self, session_id: str) -> SessionResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if session is None:
            return self._not_found(session_id)
        return self._session_to_response(session, drain=False)

    def get_game_state(self, session_id: str) -> GameStateResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if session is None:
            return self._not_found(session_id)
        return self._game_state_response(session)

    def submit_decision(self, session_id: str, request: DecisionRequest) -> SessionResponse | ErrorResponse:
        """Answer the pending decision. A rejected answer leaves it pending."""
        session = self.session_manager.get_session(session_id)
        if session is None:
            return self._not_found(session_id)
        pending = session.game_loop.pending_decision
        if pending is None:
            return ErrorResponse(
                error="No decision is pending",
                error_code=ErrorCode.NO_PENDING_DECISION,
            )
        try:
            self.session_manager.submit_decision(session_id, request.participant_id, request.choice_index)
        except InvalidDecisionChoice as e:
            return ErrorResponse(
                error=e.message,
                error_code=ErrorCode.INVALID_DECISION,
                details={"decision_id": pending.decision_id, "options": len(pending.options)},
            )
        return self._session_to_response(session)

    def get_events(self, session_id: str) -> EventLogResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if session is None:
            return self._not_found(session_id)
        events = [
            EventInfo(**to_jsonable(event.to_dict()))
            for event in session.game_state.event_log
        ]
        return EventLogResponse(session_id=session_id, events=events, count=len(events))

    def end_session(self, session_id: str, reason: str = "user_ended") -> bool:
        return self.session_manager.end_session(session_id, reason)

    def list_sessions(self) -> list[str]:
        return self.session_manager.list_active_sessions()

    # =========================================================================
    # Helpers
    # =========================================================================

    def _not_found(self, session_id: str) -> ErrorResponse:
        return ErrorResponse(
            error=f"Session {session_id} not found",
            error_code=ErrorCode.SESSION_NOT_FOUND,
        )

    def _session_to_response(self, session: Session, drain: bool = True) -> SessionResponse:
        new_events = []
        if drain and session.last_result is not None:
            new_events = session.last_result.events
            session.last_result.events = []
        return SessionResponse(
            session_id=session.session_id,
            status=SessionStatus(session.state.value),
            created_at=session.created_at,
            game_state=self._game_state_response(session),
            new_events=new_events,
        )

    def _game_state_response(self, session: Session) -> GameStateResponse:
        """Public view; only the pending decision's owner sees their hidden roles."""
        state = session.game_state
        pending = session.game_loop.pending_decision
        viewer_id = pending.participant_id if pending else None

        participants = [
            self._participant_info(state, p, show_hidden=p.participant_id == viewer_id)
            for p in state.players
        ]
        winner = None
        if state.winner_id is not None:
            winner = next(p for p in participants if p.participant_id == state.winner_id)

        pending_info = None
        if pending is not None:
            pending_info = PendingDecisionInfo(
                decision_id=pending.decision_id,
                participant_id=pending.participant_id,
                kind=pending.kind.value,
                prompt=pending.prompt,
                options=to_jsonable(pending.options),
                context=to_jsonable(pending.context),
            )

        return GameStateResponse(
            session_id=session.session_id,
            status=SessionStatus(session.state.value),
            turn_number=state.turn_number,
            participants=participants,
            current_turn_participant_id=None if state.is_over else state.current_player.participant_id,
            deck_size=state.deck.count,
            pending_decision=pending_info,
            winner=winner,
        )

    def _participant_info(self, state: GameState, p: Participant, show_hidden: bool) -> ParticipantInfo:
        return ParticipantInfo(
            participant_id=p.participant_id,
            name=p.name,
            is_human=p.is_human,
            difficulty=None if p.is_human else p.difficulty.value,
            coins=p.coins,
            influence=p.influence,
            alive=p.alive,
            is_current_turn=not state.is_over and state.current_player.participant_id == p.participant_id,
            cards=[
                CardInfo(
                    revealed=card.revealed,
                    role=card.role.value if (card.revealed or show_hidden) else None,
                )
                for card in p.hand
            ],
        )
