"""
Tests for the reducer (state transitions).

Tests:
- Declaration and cost payment
- Coin effects
- Influence loss and elimination
- Card replacement and Exchange
- Turn advancement and game over
"""

import pytest

from ..engine_core.action import ActionDeclaration, ActionKind
from ..engine_core.events import EventType
from ..engine_core.reducer import apply_declaration
from ..engine_core.state import GamePhase, Role
from .conftest import build_state


class TestDeclare:
    """Tests for accepting declarations."""

    def test_cost_debited_on_declaration(self, reducer):
        state = build_state([[Role.ASSASSIN, Role.DUKE], [Role.CONTESSA, Role.CAPTAIN]], coins=[3, 2])
        result = reducer.declare(state, ActionDeclaration(ActionKind.ASSASSINATE, 1, 2))

        assert result.success
        assert result.new_state.players[0].coins == 0
        assert result.new_state.current_action.kind == ActionKind.ASSASSINATE
        assert result.state_changes == ["Bot 1 uses Assassinate on Bot 2"]

    def test_input_state_untouched(self, reducer, three_player_state):
        reducer.declare(three_player_state, ActionDeclaration(ActionKind.TAX, 1))
        assert three_player_state.current_action is None
        assert three_player_state.event_log == []

    def test_rejected_declaration_carries_error_code(self, three_player_state):
        result = apply_declaration(three_player_state, ActionDeclaration(ActionKind.COUP, 1, 2))
        assert not result.success
        assert result.error_code == "INSUFFICIENT_FUNDS"

    def test_declared_event(self, reducer, three_player_state):
        result = reducer.declare(three_player_state, ActionDeclaration(ActionKind.STEAL, 1, 3))
        event = result.events[0]
        assert event.type == EventType.ACTION_DECLARED
        assert event.data["target_id"] == 3
        assert "uses Steal on" in event.message


class TestCoinEffects:
    """Tests for Income, Foreign Aid, Tax and Steal."""

    @pytest.mark.parametrize("kind,expected", [
        (ActionKind.INCOME, 3),
        (ActionKind.FOREIGN_AID, 4),
        (ActionKind.TAX, 5),
    ])
    def test_gains(self, reducer, three_player_state, kind, expected):
        state = reducer.declare(three_player_state, ActionDeclaration(kind, 1)).new_state
        result = reducer.apply_effect(state)
        assert result.success
        assert result.new_state.players[0].coins == expected

    @pytest.mark.parametrize("target_coins,stolen", [(0, 0), (1, 1), (2, 2), (5, 2)])
    def test_steal_takes_at_most_two(self, reducer, target_coins, stolen):
        state = build_state(
            [[Role.CAPTAIN, Role.DUKE], [Role.CONTESSA, Role.ASSASSIN]],
            coins=[2, target_coins],
        )
        state = reducer.declare(state, ActionDeclaration(ActionKind.STEAL, 1, 2)).new_state
        result = reducer.apply_effect(state)
        assert result.new_state.players[0].coins == 2 + stolen
        assert result.new_state.players[1].coins == target_coins - stolen

    def test_no_action_is_failure(self, reducer, three_player_state):
        assert not reducer.apply_effect(three_player_state).success


class TestInfluence:
    """Tests for losing cards."""

    def test_lose_one_of_two(self, reducer, three_player_state):
        result = reducer.lose_influence(three_player_state, 2, 1)
        player = result.new_state.get_player(2)
        assert player.hand[1].revealed
        assert player.alive
        assert [e.type for e in result.events] == [EventType.INFLUENCE_LOST]
        assert result.state_changes == ["Bot 2 lost a Assassin!"]

    def test_losing_last_card_eliminates(self, reducer):
        state = build_state([
            [Role.DUKE, Role.CAPTAIN],
            [(Role.CONTESSA, True), Role.ASSASSIN],
            [Role.AMBASSADOR, Role.DUKE],
        ])
        result = reducer.lose_influence(state, 2, 1)
        player = result.new_state.get_player(2)
        assert not player.alive
        assert len(player.hand) == 2
        assert result.events[-1].type == EventType.PLAYER_ELIMINATED

    def test_revealed_card_cannot_be_lost_again(self, reducer):
        state = build_state([[(Role.DUKE, True), Role.CAPTAIN], [Role.CONTESSA, Role.ASSASSIN]])
        result = reducer.lose_influence(state, 1, 0)
        assert not result.success
        assert result.error_code == "INVALID_CARD"

    def test_replace_keeps_token_counts(self, reducer, three_player_state):
        result = reducer.replace_claimed_card(three_player_state, 1, Role.DUKE)
        assert result.success
        new = result.new_state
        assert len(new.get_player(1).hand) == 2
        assert new.deck.count == three_player_state.deck.count
        assert new.token_count() == 15
        assert result.events[0].type == EventType.CARD_REPLACED

    def test_replace_without_role_fails(self, reducer, three_player_state):
        assert not reducer.replace_claimed_card(three_player_state, 1, Role.CONTESSA).success


class TestExchange:
    """Tests for the Exchange draw and return."""

    def test_draw_two_then_keep_two(self, reducer, three_player_state):
        drawn = [c.role for c in reversed(three_player_state.deck.cards[-2:])]
        state = reducer.begin_exchange(three_player_state, 1).new_state
        assert len(state.get_player(1).hand) == 4
        assert state.deck.count == three_player_state.deck.count - 2

        result = reducer.finish_exchange(state, 1, [2, 3])
        hand = result.new_state.get_player(1).hand
        assert [c.role for c in hand] == drawn
        assert result.new_state.deck.count == three_player_state.deck.count

    def test_revealed_cards_stay(self, reducer):
        state = build_state([[(Role.DUKE, True), Role.AMBASSADOR], [Role.CONTESSA, Role.ASSASSIN]])
        state = reducer.begin_exchange(state, 1).new_state
        result = reducer.finish_exchange(state, 1, [3])
        hand = result.new_state.get_player(1).hand
        assert len(hand) == 2
        assert hand[0].revealed and hand[0].role == Role.DUKE

    def test_cannot_keep_revealed_card(self, reducer):
        state = build_state([[(Role.DUKE, True), Role.AMBASSADOR], [Role.CONTESSA, Role.ASSASSIN]])
        state = reducer.begin_exchange(state, 1).new_state
        assert not reducer.finish_exchange(state, 1, [0]).success


class TestTurnAdvance:
    """Tests for start and end of turn."""

    def test_start_turn_counts_turns(self, reducer, three_player_state):
        result = reducer.start_turn(three_player_state)
        assert result.new_state.turn_number == 1
        assert result.events[0].type == EventType.TURN_STARTED

    def test_next_seat_skips_the_dead(self, reducer):
        state = build_state([
            [Role.DUKE, Role.CAPTAIN],
            [(Role.CONTESSA, True), (Role.ASSASSIN, True)],
            [Role.AMBASSADOR, Role.DUKE],
        ])
        result = reducer.end_turn(state)
        assert result.new_state.current_player.participant_id == 3

    def test_wraps_around(self, reducer, three_player_state):
        three_player_state.current_player_idx = 2
        assert reducer.end_turn(three_player_state).new_state.current_player_idx == 0

    def test_last_survivor_wins(self, reducer):
        state = build_state([
            [Role.DUKE, Role.CAPTAIN],
            [(Role.CONTESSA, True), (Role.ASSASSIN, True)],
        ])
        result = reducer.end_turn(state)
        assert result.new_state.phase == GamePhase.GAME_OVER
        assert result.new_state.winner_id == 1
        assert result.events[-1].message == "Bot 1 WINS!"

    def test_no_turn_after_game_over(self, reducer):
        state = build_state([[Role.DUKE, Role.CAPTAIN], [Role.CONTESSA, Role.ASSASSIN]])
        state.phase = GamePhase.GAME_OVER
        assert not reducer.start_turn(state).success
