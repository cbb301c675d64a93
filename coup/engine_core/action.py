"""
Action System - Declarations, decisions and results.

Declarations represent:
1. The action a participant claims on their turn
2. Its target, when the action needs one

Pending decisions are the engine's only suspension points: each one
names a single participant and a closed list of options.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TYPE_CHECKING

from .errors import InvalidDecisionChoice

if TYPE_CHECKING:
    from .state import GameState


class ActionKind(Enum):
    """Actions a participant may declare on their turn."""
    INCOME = "Income"
    FOREIGN_AID = "Foreign Aid"
    COUP = "Coup"
    TAX = "Tax"
    ASSASSINATE = "Assassinate"
    STEAL = "Steal"
    EXCHANGE = "Exchange"


class DecisionKind(Enum):
    """What a pending decision asks for."""
    ACTION_SELECTION = "action_selection"
    TARGET_SELECTION = "target_selection"
    CHALLENGE_OR_PASS = "challenge_or_pass"
    BLOCK_OR_PASS = "block_or_pass"
    CARD_TO_LOSE = "card_to_lose"
    CARD_TO_KEEP = "card_to_keep"


PASS = "Pass"
CHALLENGE = "Challenge"
BLOCK = "Block"


@dataclass
class ActionDeclaration:
    """
    An action declared for this turn.

    Owned by the resolver for the whole turn, including nested
    challenge and block sub-resolutions.
    """
    kind: ActionKind
    actor_id: int
    target_id: int | None = None

    def describe(self, state: GameState) -> str:
        actor = state.get_player(self.actor_id)
        text = f"{actor.name if actor else self.actor_id} uses {self.kind.value}"
        if self.target_id is not None:
            target = state.get_player(self.target_id)
            text += f" on {target.name if target else self.target_id}"
        return text


@dataclass
class PendingDecision:
    """
    A decision the engine is waiting on.

    Returned to the game loop, which routes it to the participant's
    decision source. The answer is an index into `options`.
    """
    decision_id: str
    participant_id: int
    kind: DecisionKind
    prompt: str
    options: list[Any]

    # Extra facts the decider may use (claimed role, action, error text)
    context: dict[str, Any] = field(default_factory=dict)

    def validate(self, participant_id: int, choice_index: Any) -> Any:
        """Return the chosen option, or raise InvalidDecisionChoice."""
        if participant_id != self.participant_id:
            raise InvalidDecisionChoice(
                f"Decision {self.decision_id} belongs to participant {self.participant_id}"
            )
        if isinstance(choice_index, bool) or not isinstance(choice_index, int):
            raise InvalidDecisionChoice(f"Choice must be an integer index, got {choice_index!r}")
        if choice_index < 0 or choice_index >= len(self.options):
            raise InvalidDecisionChoice(
                f"Choice {choice_index} out of range 0..{len(self.options) - 1}"
            )
        return self.options[choice_index]

    def index_of(self, value: Any) -> int:
        """Index of an option value (bots answer by value)."""
        return self.options.index(value)


@dataclass
class ActionResult:
    """
    Result of a reducer operation.

    Contains:
    - Whether it succeeded
    - New state (if succeeded)
    - Errors (if failed)
    - Events and human-readable changes (for presentation)
    """
    success: bool
    new_state: Any | None = None  # GameState
    error: str | None = None
    error_code: str | None = None

    # For UI/presentation
    state_changes: list[str] = field(default_factory=list)
    events: list[Any] = field(default_factory=list)  # GameEvent

    @classmethod
    def failure(cls, error: str, error_code: str | None = None) -> ActionResult:
        """Create a failure result."""
        return cls(success=False, error=error, error_code=error_code)

    @classmethod
    def success_with_state(
        cls,
        state: Any,
        changes: list[str] | None = None,
        events: list[Any] | None = None,
    ) -> ActionResult:
        """Create a success result with new state."""
        return cls(
            success=True,
            new_state=state,
            state_changes=changes or [],
            events=events or [],
        )


@dataclass
class ChallengeRecord:
    """How a challenge played out."""
    challenger_id: int
    accused_id: int
    claimed_role: str
    accused_was_honest: bool


@dataclass
class TurnOutcome:
    """
    Result of resolving one full turn.

    The outer game loop reads `winner_id` to decide whether
    the game is over.
    """
    turn_number: int
    actor_id: int
    declaration: ActionDeclaration | None = None
    effect_applied: bool = False

    action_challenge: ChallengeRecord | None = None

    blocker_id: int | None = None
    block_role: str | None = None
    block_challenge: ChallengeRecord | None = None
    block_stood: bool | None = None

    eliminated: list[int] = field(default_factory=list)
    next_player_id: int | None = None
    winner_id: int | None = None
