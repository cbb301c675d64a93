"""
Bot Difficulty - Configurable play styles.

A profile sets:
- Which action ladder the bot climbs (cautious or aggressive)
- How often it bluffs an action or a block
- How often it challenges without evidence
"""

from __future__ import annotations
from dataclasses import dataclass, field

from ..engine_core.action import ActionKind
from ..engine_core.state import Difficulty


@dataclass(frozen=True)
class DifficultyProfile:
    """
    Probabilities and thresholds behind a difficulty level.

    All chances are compared against rng.random(); 0 disables the behavior.
    """
    name: str
    description: str = ""

    # Coins at which the bot coups voluntarily
    coup_threshold: int = 7

    # Aggressive ladder: bluffs actions instead of falling back to Income
    aggressive: bool = False
    assassinate_bluff_chance: float = 0.0
    steal_chance: float = 0.0
    tax_bluff_chance: float = 0.0

    # Whether the bot ever challenges, and how often without evidence
    challenges: bool = False
    challenge_noise: float = 0.0

    # Chance to claim a block without the role, for the listed actions
    block_bluff_chance: float = 0.0
    bluff_block_actions: frozenset[ActionKind] = field(default_factory=frozenset)


NORMAL = DifficultyProfile(
    name="Normal",
    description="Only claims roles it holds, never challenges",
)


HARD = DifficultyProfile(
    name="Hard",
    description="Bluffs actions and blocks, calls out impossible claims",
    aggressive=True,
    assassinate_bluff_chance=0.6,
    steal_chance=0.7,
    tax_bluff_chance=0.5,
    challenges=True,
    challenge_noise=0.15,
    block_bluff_chance=0.6,
    bluff_block_actions=frozenset({ActionKind.ASSASSINATE, ActionKind.STEAL}),
)


DIFFICULTIES: dict[Difficulty, DifficultyProfile] = {
    Difficulty.NORMAL: NORMAL,
    Difficulty.HARD: HARD,
}


def get_profile(difficulty: Difficulty) -> DifficultyProfile:
    return DIFFICULTIES[difficulty]
