"""
AI Policy - Stateless decision functions for computer participants.

Each function reads the deciding participant's own hand plus public
state (coins, who is alive) and a difficulty profile. Randomness comes
in through `rng`, so tests can pin every probability-gated branch.
"""

from __future__ import annotations
from typing import TYPE_CHECKING, Protocol

from ..engine_core.action import ActionKind
from ..engine_core.catalog import MANDATORY_COUP_COINS, get_rule
from ..engine_core.state import Role
from .difficulty import DifficultyProfile

if TYPE_CHECKING:
    from ..engine_core.state import GameState, Participant


class RandomSource(Protocol):
    """The slice of random.Random the policy uses."""

    def random(self) -> float: ...

    def choice(self, seq): ...


def strongest_opponent(me: Participant, state: GameState) -> Participant | None:
    """Living opponent with the most coins; earliest seat wins ties."""
    opponents = state.alive_opponents(me.participant_id)
    if not opponents:
        return None
    return max(opponents, key=lambda p: p.coins)


def decide_action(
    me: Participant,
    state: GameState,
    profile: DifficultyProfile,
    rng: RandomSource,
) -> tuple[ActionKind, int | None]:
    """
    Choose this turn's action and target.

    Ladder (hard): Coup at the threshold, Assassinate when holding Assassin
    or on a bluff roll, Steal when holding Captain, Tax when holding Duke
    or on a bluff roll, else Foreign Aid.
    Ladder (normal): Coup, Tax with Duke, Assassinate with Assassin, Income.
    """
    target = strongest_opponent(me, state)
    target_id = target.participant_id if target else None

    if me.coins >= MANDATORY_COUP_COINS:
        return ActionKind.COUP, target_id

    if target is None:
        return ActionKind.INCOME, None

    assassinate_cost = get_rule(ActionKind.ASSASSINATE).coin_cost

    if profile.aggressive:
        if me.coins >= profile.coup_threshold:
            return ActionKind.COUP, target_id
        if me.coins >= assassinate_cost and (
            me.has_role(Role.ASSASSIN) or rng.random() < profile.assassinate_bluff_chance
        ):
            return ActionKind.ASSASSINATE, target_id
        if me.has_role(Role.CAPTAIN) and rng.random() < profile.steal_chance:
            return ActionKind.STEAL, target_id
        if me.has_role(Role.DUKE) or rng.random() < profile.tax_bluff_chance:
            return ActionKind.TAX, None
        return ActionKind.FOREIGN_AID, None

    if me.coins >= profile.coup_threshold:
        return ActionKind.COUP, target_id
    if me.has_role(Role.DUKE):
        return ActionKind.TAX, None
    if me.coins >= assassinate_cost and me.has_role(Role.ASSASSIN):
        return ActionKind.ASSASSINATE, target_id
    return ActionKind.INCOME, None


def choose_target(me: Participant, state: GameState, candidates: list[int]) -> int:
    """Pick the richest opponent among the offered target ids."""
    offered = [p for p in state.alive_opponents(me.participant_id) if p.participant_id in candidates]
    if not offered:
        return candidates[0]
    return max(offered, key=lambda p: p.coins).participant_id


def decide_challenge(
    me: Participant,
    claimed_role: Role,
    profile: DifficultyProfile,
    rng: RandomSource,
) -> bool:
    """
    Whether to challenge a claim of `claimed_role`.

    Holding two live copies makes the claim a long shot, so always call it.
    Otherwise challenge on a noise roll (never, at normal difficulty).
    """
    if not profile.challenges:
        return False
    if me.count_role(claimed_role) >= 2:
        return True
    return rng.random() < profile.challenge_noise


def decide_block(
    me: Participant,
    action: ActionKind,
    profile: DifficultyProfile,
    rng: RandomSource,
) -> bool:
    """Block truthfully when holding a blocking role; maybe bluff otherwise."""
    blocking_roles = get_rule(action).blocking_roles
    if any(me.has_role(role) for role in blocking_roles):
        return True
    if action in profile.bluff_block_actions:
        return rng.random() < profile.block_bluff_chance
    return False


def choose_card(options: list[int], rng: RandomSource) -> int:
    """Uniform pick among offered hand indices (card to lose or keep)."""
    return rng.choice(options)
