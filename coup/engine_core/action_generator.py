"""
Action Generator - Legal declarations and declaration validation.

The action generator is used by:
1. Bots and the UI to list what a participant may declare
2. The reducer, to reject illegal declarations before anything changes
"""

from __future__ import annotations
from dataclasses import dataclass

from .state import GameState, GamePhase, Participant
from .action import ActionDeclaration, ActionKind
from .catalog import ACTION_CATALOG, MANDATORY_COUP_COINS, get_rule
from .errors import (
    CoupError,
    InvalidTarget,
    InsufficientFunds,
    IllegalActionAtHighCoins,
)


def check_action_kind(participant: Participant, kind: ActionKind) -> None:
    """
    Check the parts of a declaration that do not depend on the target.

    Raises IllegalActionAtHighCoins or InsufficientFunds.
    """
    if participant.coins >= MANDATORY_COUP_COINS and kind != ActionKind.COUP:
        raise IllegalActionAtHighCoins(
            f"{participant.name} has {participant.coins} coins and must Coup"
        )
    cost = get_rule(kind).coin_cost
    if participant.coins < cost:
        raise InsufficientFunds(
            f"{kind.value} costs {cost}, {participant.name} has {participant.coins}"
        )


def check_target(state: GameState, actor: Participant, kind: ActionKind, target_id: int | None) -> None:
    """Raise InvalidTarget unless the target fits the action."""
    rule = get_rule(kind)
    if not rule.requires_target:
        if target_id is not None:
            raise InvalidTarget(f"{kind.value} does not take a target")
        return
    if target_id is None:
        raise InvalidTarget(f"{kind.value} needs a target")
    if target_id == actor.participant_id:
        raise InvalidTarget(f"{actor.name} cannot target themselves")
    target = state.get_player(target_id)
    if target is None:
        raise InvalidTarget(f"No participant with id {target_id}")
    if not target.alive:
        raise InvalidTarget(f"{target.name} is eliminated")


def validate_declaration(state: GameState, declaration: ActionDeclaration) -> None:
    """
    Validate that a declaration is legal in the current state.

    Raises a CoupError subclass if not.
    """
    if state.phase != GamePhase.PLAYING:
        raise CoupError(f"Game is not in progress ({state.phase.value})")
    actor = state.get_player(declaration.actor_id)
    if actor is None or not actor.alive:
        raise CoupError(f"Participant {declaration.actor_id} cannot act")
    if actor.participant_id != state.current_player.participant_id:
        raise CoupError(f"Not {actor.name}'s turn")
    check_action_kind(actor, declaration.kind)
    check_target(state, actor, declaration.kind, declaration.target_id)


@dataclass
class ActionGenerator:
    """
    Generates legal declarations for the current game state.

    Catalog order is kept so listings are stable.
    """

    def legal_kinds(self, state: GameState, participant: Participant) -> list[ActionKind]:
        """Action kinds the participant could declare right now."""
        if not participant.alive:
            return []
        has_targets = bool(state.alive_opponents(participant.participant_id))
        kinds = []
        for kind, rule in ACTION_CATALOG.items():
            try:
                check_action_kind(participant, kind)
            except CoupError:
                continue
            if rule.requires_target and not has_targets:
                continue
            kinds.append(kind)
        return kinds

    def legal_targets(self, state: GameState, participant: Participant) -> list[int]:
        return [p.participant_id for p in state.alive_opponents(participant.participant_id)]

    def generate(self, state: GameState) -> list[ActionDeclaration]:
        """
        Generate all legal declarations for the current participant.

        Targeted actions expand to one declaration per living opponent.
        """
        if state.phase != GamePhase.PLAYING:
            return []
        return self.generate_for_player(state, state.current_player.participant_id)

    def generate_for_player(self, state: GameState, participant_id: int) -> list[ActionDeclaration]:
        participant = state.get_player(participant_id)
        if participant is None:
            return []
        declarations = []
        for kind in self.legal_kinds(state, participant):
            if get_rule(kind).requires_target:
                for target_id in self.legal_targets(state, participant):
                    declarations.append(ActionDeclaration(kind, participant_id, target_id))
            else:
                declarations.append(ActionDeclaration(kind, participant_id))
        return declarations


def legal_actions(state: GameState) -> list[ActionDeclaration]:
    """
    Convenience function to get legal declarations.

    Creates an ActionGenerator and generates declarations.
    """
    return ActionGenerator().generate(state)


def is_legal(state: GameState, declaration: ActionDeclaration) -> bool:
    """Check if a specific declaration is legal."""
    try:
        validate_declaration(state, declaration)
    except CoupError:
        return False
    return True
