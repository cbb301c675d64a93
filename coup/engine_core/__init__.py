"""
Engine Core - Deterministic game state management and action resolution.

The engine is the runtime that:
1. Sets up GameState from a GameConfig
2. Validates declarations against the action catalog
3. Resolves each turn step by step (challenges, blocks, effects)
4. Applies every state change via the reducer
"""

from .state import (
    Card,
    Controller,
    Deck,
    Difficulty,
    GamePhase,
    GameState,
    Participant,
    Role,
)
from .action import (
    ActionDeclaration,
    ActionKind,
    ActionResult,
    DecisionKind,
    PendingDecision,
    TurnOutcome,
)
from .catalog import ACTION_CATALOG, ActionRule, get_rule
from .errors import (
    CoupError,
    InvalidTarget,
    InsufficientFunds,
    IllegalActionAtHighCoins,
    InvalidDecisionChoice,
    InvariantViolation,
)
from .events import EventBus, EventType, GameEvent
from .reducer import Reducer, apply_declaration
from .action_generator import ActionGenerator, legal_actions, is_legal
from .resolver import TurnResolver, TurnStage, resolve_turn
from .setup import GameConfig, setup_game

__all__ = [
    "Card",
    "Controller",
    "Deck",
    "Difficulty",
    "GamePhase",
    "GameState",
    "Participant",
    "Role",
    "ActionDeclaration",
    "ActionKind",
    "ActionResult",
    "DecisionKind",
    "PendingDecision",
    "TurnOutcome",
    "ACTION_CATALOG",
    "ActionRule",
    "get_rule",
    "CoupError",
    "InvalidTarget",
    "InsufficientFunds",
    "IllegalActionAtHighCoins",
    "InvalidDecisionChoice",
    "InvariantViolation",
    "EventBus",
    "EventType",
    "GameEvent",
    "Reducer",
    "apply_declaration",
    "ActionGenerator",
    "legal_actions",
    "is_legal",
    "TurnResolver",
    "TurnStage",
    "resolve_turn",
    "GameConfig",
    "setup_game",
]
