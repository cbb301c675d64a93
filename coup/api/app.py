"""
FastAPI Application - REST API for a browser UI.

Endpoints:
    POST   /api/v1/sessions                   Create game session
    GET    /api/v1/sessions                   List active sessions
    GET    /api/v1/sessions/{id}              Public game view + pending decision
    POST   /api/v1/sessions/{id}/decisions    Answer the pending decision
    GET    /api/v1/sessions/{id}/events       Game log
    DELETE /api/v1/sessions/{id}              End session
    GET    /health                            Health check

Decision Flow:
    1. POST /sessions deals the game and runs AI turns
    2. The response carries the first pending human decision
    3. POST /decisions answers it with an option index
    4. AI turns run until the next human decision or game over

All responses are JSON with explicit Pydantic schemas.
"""

from typing import Annotated, Union
import os

from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from .service import APIService
from .schemas import (
    CreateSessionRequest,
    DecisionRequest,
    EndSessionResponse,
    ErrorCode,
    ErrorResponse,
    EventLogResponse,
    GameStateResponse,
    HealthResponse,
    SessionListResponse,
    SessionResponse,
)

# Environment configuration
COUP_ENV = os.getenv("COUP_ENV", "development")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")
SESSION_TTL_SECONDS = int(os.getenv("COUP_SESSION_TTL", "3600"))

ERROR_STATUS = {
    ErrorCode.SESSION_NOT_FOUND: 404,
    ErrorCode.INVALID_DECISION: 400,
    ErrorCode.NO_PENDING_DECISION: 409,
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.INTERNAL_ERROR: 500,
}


def create_app(service: APIService | None = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    app = FastAPI(
        title="Coup Engine API",
        description="""
Bluffing card game engine with AI opponents.

## Decision Flow

Every response carries `pending_decision` when a human must act.
Answer it with `POST /decisions` and the option index.

## Error Codes

| Code | Description |
|------|-------------|
| `SESSION_NOT_FOUND` | Session does not exist |
| `INVALID_DECISION` | Wrong participant or index out of range |
| `NO_PENDING_DECISION` | Nothing is waiting on an answer |
| `VALIDATION_ERROR` | Unplayable configuration |
        """,
        version=__version__,
        docs_url="/api/docs" if COUP_ENV != "production" else None,
        redoc_url="/api/redoc" if COUP_ENV != "production" else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_service = service or APIService(session_ttl_seconds=SESSION_TTL_SECONDS)
    app.state.api_service = api_service

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(error: ErrorResponse) -> JSONResponse:
        """Serialize an ErrorResponse with the status its code maps to."""
        return JSONResponse(
            status_code=ERROR_STATUS.get(error.error_code, 400),
            content=error.model_dump(mode="json"),
        )

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=SessionResponse,
        responses={400: {"model": ErrorResponse, "description": "Unplayable configuration"}},
        tags=["Sessions"],
        summary="Create a new game session",
    )
    async def create_session(request: CreateSessionRequest) -> Union[SessionResponse, JSONResponse]:
        """
        Create a new game session.

        Humans take the first seats. AI turns run immediately, up to the
        first decision a human owes.
        """
        response = api_service.create_session(request)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    @app.get(
        "/api/v1/sessions",
        response_model=SessionListResponse,
        tags=["Sessions"],
        summary="List active sessions",
    )
    async def list_sessions() -> SessionListResponse:
        sessions = api_service.list_sessions()
        return SessionListResponse(sessions=sessions, count=len(sessions))

    @app.get(
        "/api/v1/sessions/{session_id}",
        response_model=GameStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Get the public game view",
    )
    async def get_game_state(session_id: str) -> Union[GameStateResponse, JSONResponse]:
        """Hidden roles are shown only to the owner of the pending decision."""
        response = api_service.get_game_state(session_id)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    @app.post(
        "/api/v1/sessions/{session_id}/decisions",
        response_model=SessionResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Invalid decision"},
            404: {"model": ErrorResponse},
            409: {"model": ErrorResponse, "description": "No pending decision"},
        },
        tags=["Decisions"],
        summary="Answer the pending decision",
    )
    async def submit_decision(
        session_id: str,
        request: DecisionRequest,
    ) -> Union[SessionResponse, JSONResponse]:
        """
        Answer the pending decision with an option index.

        A rejected answer leaves the decision pending so it can be retried.
        """
        response = api_service.submit_decision(session_id, request)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    @app.get(
        "/api/v1/sessions/{session_id}/events",
        response_model=EventLogResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Get the game log",
    )
    async def get_events(session_id: str) -> Union[EventLogResponse, JSONResponse]:
        response = api_service.get_events(session_id)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    @app.delete(
        "/api/v1/sessions/{session_id}",
        response_model=EndSessionResponse,
        tags=["Sessions"],
        summary="End a game session",
    )
    async def end_session(
        session_id: str,
        reason: Annotated[str, Query(description="Reason for ending")] = "user_ended",
    ) -> EndSessionResponse:
        """End a game session and release resources."""
        success = api_service.end_session(session_id, reason)
        return EndSessionResponse(success=success, session_id=session_id)

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            status="healthy",
            service="coup-engine",
            version=__version__,
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Coup Engine API",
            "version": __version__,
            "docs": "/api/docs",
            "health": "/health",
        }

    return app


# For running directly: uvicorn coup.api.app:app
app = create_app()
