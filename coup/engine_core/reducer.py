"""
Reducer - Applies state transitions.

The reducer is the single point of state mutation.
Every transition works on a clone and returns it in an ActionResult.

Design principles:
- (state, input) -> new_state; the input state is never touched
- Validates before applying
- Returns ActionResult with success/failure
- Checks token and coin invariants after every transition
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any
import logging
import random

from .state import GameState, GamePhase, Role
from .action import ActionDeclaration, ActionKind, ActionResult
from .catalog import STEAL_LIMIT, get_rule
from .action_generator import validate_declaration
from .errors import CoupError
from .events import EventType, GameEvent

logger = logging.getLogger(__name__)

# Cards drawn by Exchange
EXCHANGE_DRAW = 2


def _emit(state: GameState, event_type: EventType, message: str, **data: Any) -> GameEvent:
    """Append an event to the state's log and return it."""
    event = GameEvent(
        type=event_type,
        data=data,
        turn_number=state.turn_number,
        message=message,
    )
    state.event_log.append(event)
    return event


@dataclass
class Reducer:
    """
    Reducer applies transitions to game state.

    Stateless apart from the random source used for shuffles.
    """
    rng: random.Random = field(default_factory=random.Random)

    def start_turn(self, state: GameState) -> ActionResult:
        """Begin the current participant's turn."""
        if state.phase != GamePhase.PLAYING:
            return ActionResult.failure("Game is not in progress", error_code="NOT_PLAYING")
        if not state.current_player.alive:
            return ActionResult.failure(
                f"{state.current_player.name} is eliminated", error_code="ACTOR_ELIMINATED"
            )
        new_state = state.clone()
        new_state.turn_number += 1
        new_state.current_action = None
        player = new_state.current_player
        event = _emit(
            new_state, EventType.TURN_STARTED, f"--- {player.name}'s Turn ---",
            participant_id=player.participant_id,
        )
        return ActionResult.success_with_state(new_state, [event.message], [event])

    def declare(self, state: GameState, declaration: ActionDeclaration) -> ActionResult:
        """
        Accept a declaration and pay its cost.

        The cost is gone for good, whatever the challenges and blocks decide.
        """
        try:
            validate_declaration(state, declaration)
        except CoupError as e:
            return ActionResult.failure(e.message, error_code=e.error_code)

        new_state = state.clone()
        actor = new_state.get_player(declaration.actor_id)
        cost = get_rule(declaration.kind).coin_cost
        actor.coins -= cost
        new_state.current_action = declaration

        message = declaration.describe(new_state)
        event = _emit(
            new_state, EventType.ACTION_DECLARED, message,
            actor_id=declaration.actor_id,
            action=declaration.kind.value,
            target_id=declaration.target_id,
            cost=cost,
        )
        return self._done(new_state, [event])

    def announce(self, state: GameState, event_type: EventType, message: str, **data: Any) -> ActionResult:
        """Record an event that changes nothing but the log."""
        new_state = state.clone()
        event = _emit(new_state, event_type, message, **data)
        return ActionResult.success_with_state(new_state, [message], [event])

    def lose_influence(self, state: GameState, participant_id: int, card_index: int) -> ActionResult:
        """
        Reveal one card.

        Revealing the last unrevealed card eliminates the participant.
        """
        player = state.get_player(participant_id)
        if player is None:
            return ActionResult.failure(f"Participant {participant_id} not found")
        if card_index not in player.live_indices:
            return ActionResult.failure(
                f"Card {card_index} of {player.name} is not an unrevealed card",
                error_code="INVALID_CARD",
            )

        new_state = state.clone()
        player = new_state.get_player(participant_id)
        card = player.hand[card_index]
        card.revealed = True
        events = [_emit(
            new_state, EventType.INFLUENCE_LOST, f"{player.name} lost a {card.role.value}!",
            participant_id=participant_id,
            role=card.role.value,
            card_index=card_index,
        )]
        if all(c.revealed for c in player.hand):
            player.alive = False
            events.append(_emit(
                new_state, EventType.PLAYER_ELIMINATED, f"{player.name} is ELIMINATED!",
                participant_id=participant_id,
                name=player.name,
            ))
            logger.info("%s eliminated", player.name)
        return self._done(new_state, events)

    def replace_claimed_card(self, state: GameState, participant_id: int, role: Role) -> ActionResult:
        """
        Shuffle a proven card back into the deck and draw a replacement.

        The card goes back before the draw, so the replacement may be the
        same token.
        """
        player = state.get_player(participant_id)
        if player is None:
            return ActionResult.failure(f"Participant {participant_id} not found")
        index = player.find_live(role)
        if index is None:
            return ActionResult.failure(
                f"{player.name} holds no unrevealed {role.value}", error_code="INVALID_CARD"
            )

        new_state = state.clone()
        player = new_state.get_player(participant_id)
        new_state.deck.put_back(player.hand[index], self.rng)
        player.hand[index] = new_state.deck.draw()
        event = _emit(
            new_state, EventType.CARD_REPLACED,
            f"{player.name} shuffles the {role.value} into the deck and draws a new card",
            participant_id=participant_id,
            role=role.value,
        )
        return self._done(new_state, [event])

    def apply_effect(self, state: GameState) -> ActionResult:
        """
        Apply the coin effect of the current declaration.

        Covers Income, Foreign Aid, Tax and Steal. Influence effects and
        Exchange need decisions and are sequenced by the resolver.
        """
        declaration = state.current_action
        if declaration is None:
            return ActionResult.failure("No action to apply", error_code="NO_ACTION")

        new_state = state.clone()
        actor = new_state.get_player(declaration.actor_id)
        rule = get_rule(declaration.kind)

        if declaration.kind == ActionKind.STEAL:
            target = new_state.get_player(declaration.target_id)
            stolen = min(target.coins, STEAL_LIMIT)
            target.coins -= stolen
            actor.coins += stolen
            message = f"Stole {stolen} from {target.name}"
            data = {"amount": stolen, "target_id": target.participant_id}
        elif rule.coins_gained:
            actor.coins += rule.coins_gained
            message = f"{actor.name} takes {rule.coins_gained} coin(s)"
            data = {"amount": rule.coins_gained}
        else:
            return ActionResult.failure(
                f"{declaration.kind.value} has no coin effect", error_code="NO_COIN_EFFECT"
            )

        event = _emit(
            new_state, EventType.EFFECT_APPLIED, message,
            actor_id=actor.participant_id,
            action=declaration.kind.value,
            **data,
        )
        return self._done(new_state, [event])

    def begin_exchange(self, state: GameState, participant_id: int) -> ActionResult:
        """Draw the Exchange cards into the actor's hand."""
        new_state = state.clone()
        player = new_state.get_player(participant_id)
        if player is None:
            return ActionResult.failure(f"Participant {participant_id} not found")
        for _ in range(EXCHANGE_DRAW):
            player.hand.append(new_state.deck.draw())
        return self._done(new_state, [])

    def finish_exchange(self, state: GameState, participant_id: int, keep_indices: list[int]) -> ActionResult:
        """
        Keep the chosen cards and shuffle the other unrevealed ones back.

        Revealed cards stay in hand untouched.
        """
        player = state.get_player(participant_id)
        if player is None:
            return ActionResult.failure(f"Participant {participant_id} not found")
        live = player.live_indices
        if len(set(keep_indices)) != len(keep_indices) or not set(keep_indices) <= set(live):
            return ActionResult.failure(
                f"Invalid cards to keep: {keep_indices}", error_code="INVALID_CARD"
            )

        new_state = state.clone()
        player = new_state.get_player(participant_id)
        returned = [player.hand[i] for i in live if i not in keep_indices]
        player.hand = [c for i, c in enumerate(player.hand) if i not in live or i in keep_indices]
        for card in returned:
            new_state.deck.put_back(card, self.rng)

        event = _emit(
            new_state, EventType.EFFECT_APPLIED, "Exchanged cards.",
            actor_id=participant_id,
            action=ActionKind.EXCHANGE.value,
            returned=len(returned),
        )
        return self._done(new_state, [event])

    def end_turn(self, state: GameState) -> ActionResult:
        """
        Finish the turn and pass play to the next living participant.

        Ends the game when one participant is left.
        """
        new_state = state.clone()
        new_state.current_action = None
        alive = new_state.alive_players

        if len(alive) <= 1:
            new_state.phase = GamePhase.GAME_OVER
            events = []
            if alive:
                winner = alive[0]
                new_state.winner_id = winner.participant_id
                events.append(_emit(
                    new_state, EventType.GAME_OVER, f"{winner.name} WINS!",
                    winner_id=winner.participant_id,
                    name=winner.name,
                ))
                logger.info("Game %s won by %s", new_state.game_id, winner.name)
            return self._done(new_state, events)

        idx = new_state.current_player_idx
        while True:
            idx = (idx + 1) % new_state.num_players
            if new_state.players[idx].alive:
                break
        new_state.current_player_idx = idx
        return self._done(new_state, [])

    def _done(self, new_state: GameState, events: list[GameEvent]) -> ActionResult:
        new_state.check_invariants()
        return ActionResult.success_with_state(
            new_state,
            changes=[e.message for e in events],
            events=events,
        )


def apply_declaration(state: GameState, declaration: ActionDeclaration, rng: random.Random | None = None) -> ActionResult:
    """
    Convenience function to accept a declaration.

    Creates a Reducer and applies the declaration.
    """
    reducer = Reducer(rng=rng or random.Random())
    return reducer.declare(state, declaration)
