"""
Action Catalog - The rules of every action, as data.

Consulted read-only by the action generator, the resolver and the bots.
Nothing else in the package restates costs, claims or blockers.
"""

from __future__ import annotations
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from .action import ActionKind
from .state import Role


# Coins at which Coup becomes the only legal action
MANDATORY_COUP_COINS = 10

# Most coins a single Steal can take
STEAL_LIMIT = 2


@dataclass(frozen=True)
class ActionRule:
    """
    Rules for one action kind.

    A targeted blockable action can only be blocked by its target;
    an untargeted one by any other living participant.
    """
    kind: ActionKind
    coin_cost: int = 0
    blockable: bool = False
    challengeable: bool = False
    claimed_role: Role | None = None
    blocking_roles: tuple[Role, ...] = ()
    requires_target: bool = False
    coins_gained: int = 0

    @property
    def block_claim(self) -> Role | None:
        """Role a blocker is taken to claim: the first listed blocking role."""
        return self.blocking_roles[0] if self.blocking_roles else None


ACTION_CATALOG: Mapping[ActionKind, ActionRule] = MappingProxyType({
    ActionKind.INCOME: ActionRule(
        kind=ActionKind.INCOME,
        coins_gained=1,
    ),
    ActionKind.FOREIGN_AID: ActionRule(
        kind=ActionKind.FOREIGN_AID,
        blockable=True,
        blocking_roles=(Role.DUKE,),
        coins_gained=2,
    ),
    ActionKind.COUP: ActionRule(
        kind=ActionKind.COUP,
        coin_cost=7,
        requires_target=True,
    ),
    ActionKind.TAX: ActionRule(
        kind=ActionKind.TAX,
        challengeable=True,
        claimed_role=Role.DUKE,
        coins_gained=3,
    ),
    ActionKind.ASSASSINATE: ActionRule(
        kind=ActionKind.ASSASSINATE,
        coin_cost=3,
        blockable=True,
        challengeable=True,
        claimed_role=Role.ASSASSIN,
        blocking_roles=(Role.CONTESSA,),
        requires_target=True,
    ),
    ActionKind.STEAL: ActionRule(
        kind=ActionKind.STEAL,
        blockable=True,
        challengeable=True,
        claimed_role=Role.CAPTAIN,
        blocking_roles=(Role.CAPTAIN, Role.AMBASSADOR),
        requires_target=True,
    ),
    ActionKind.EXCHANGE: ActionRule(
        kind=ActionKind.EXCHANGE,
        challengeable=True,
        claimed_role=Role.AMBASSADOR,
    ),
})


def get_rule(kind: ActionKind) -> ActionRule:
    """Look up the rule for an action kind."""
    return ACTION_CATALOG[kind]
