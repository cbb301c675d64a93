"""
Engine Errors - Rejected input and broken invariants.

Every input error is recoverable: the engine rejects the proposed input,
leaves the game state untouched and asks again. Only InvariantViolation
signals a bug in the engine itself.
"""

from __future__ import annotations


class CoupError(Exception):
    """Base class for engine errors."""

    error_code = "COUP_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidTarget(CoupError):
    """Target missing, self, eliminated or unknown."""

    error_code = "INVALID_TARGET"


class InsufficientFunds(CoupError):
    """Action cost exceeds the actor's coins."""

    error_code = "INSUFFICIENT_FUNDS"


class IllegalActionAtHighCoins(CoupError):
    """Actor holds 10+ coins and declared something other than Coup."""

    error_code = "MUST_COUP"


class InvalidDecisionChoice(CoupError):
    """Selection outside the offered options, or from the wrong participant."""

    error_code = "INVALID_DECISION"


class InvariantViolation(CoupError):
    """
    Token conservation or deck supply broke.

    Not recoverable: raised when the engine reaches a state
    the rules say cannot exist.
    """

    error_code = "INVARIANT_VIOLATION"
