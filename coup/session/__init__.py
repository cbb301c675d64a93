"""
Session Module - Manages ephemeral game sessions.

A session represents one play-through:
- Created from a lobby configuration
- Holds the game loop, which owns the current game state
- Runs AI turns and waits on human decisions
- Destroyed when the game ends

Sessions are EPHEMERAL: no persistence, in-memory only.
"""

from .manager import SessionManager, Session, SessionState, build_sources
from .game_loop import GameLoop, LoopState, TurnResult

__all__ = [
    "SessionManager",
    "Session",
    "SessionState",
    "build_sources",
    "GameLoop",
    "LoopState",
    "TurnResult",
]
