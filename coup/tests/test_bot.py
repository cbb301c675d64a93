"""
Tests for the AI decision policy and decision sources.

Tests:
- Action ladders per difficulty
- Targeting the richest opponent
- Challenge and block heuristics
- CoupBot answers every decision kind with a valid index
"""

import pytest

from ..bots import (
    CoupBot,
    FirstLegalPolicy,
    HARD,
    HumanDecisionSource,
    NORMAL,
    RandomPolicy,
    choose_target,
    decide_action,
    decide_block,
    decide_challenge,
    get_profile,
    strongest_opponent,
)
from ..bots.ai_policy import choose_card
from ..engine_core.action import ActionKind, DecisionKind, PASS, CHALLENGE, BLOCK
from ..engine_core.state import Difficulty, Role
from .conftest import StubRng, build_state, play


def duel(my_roles, my_coins=2, their_coins=(2, 5)):
    """Seat 0 is the bot under test; two opponents with the given coins."""
    return build_state(
        [my_roles, [Role.CONTESSA, Role.AMBASSADOR], [Role.CONTESSA, Role.AMBASSADOR]],
        coins=[my_coins, *their_coins],
    )


class TestTargeting:
    """Target selection defaults to the richest living opponent."""

    def test_richest_opponent(self):
        state = duel([Role.DUKE, Role.CAPTAIN], their_coins=(2, 5))
        assert strongest_opponent(state.players[0], state).participant_id == 3

    def test_tie_goes_to_earliest_seat(self):
        state = duel([Role.DUKE, Role.CAPTAIN], their_coins=(4, 4))
        assert strongest_opponent(state.players[0], state).participant_id == 2

    def test_choose_target_among_offered(self):
        state = duel([Role.DUKE, Role.CAPTAIN], their_coins=(2, 5))
        assert choose_target(state.players[0], state, [2]) == 2
        assert choose_target(state.players[0], state, [2, 3]) == 3


class TestNormalLadder:
    """Normal difficulty only claims roles it holds."""

    def test_ten_coins_forces_coup(self):
        state = duel([Role.DUKE, Role.CAPTAIN], my_coins=10)
        assert decide_action(state.players[0], state, NORMAL, StubRng()) == (ActionKind.COUP, 3)

    def test_seven_coins_coups(self):
        state = duel([Role.DUKE, Role.CAPTAIN], my_coins=7)
        assert decide_action(state.players[0], state, NORMAL, StubRng())[0] == ActionKind.COUP

    def test_duke_taxes(self):
        state = duel([Role.DUKE, Role.ASSASSIN], my_coins=3)
        assert decide_action(state.players[0], state, NORMAL, StubRng()) == (ActionKind.TAX, None)

    def test_assassin_assassinates_with_three_coins(self):
        state = duel([Role.ASSASSIN, Role.CAPTAIN], my_coins=3)
        assert decide_action(state.players[0], state, NORMAL, StubRng()) == (ActionKind.ASSASSINATE, 3)

    def test_otherwise_income(self):
        state = duel([Role.ASSASSIN, Role.CAPTAIN], my_coins=2)
        assert decide_action(state.players[0], state, NORMAL, StubRng()) == (ActionKind.INCOME, None)


class TestHardLadder:
    """Hard difficulty bluffs on probability rolls."""

    def test_assassinate_bluff(self):
        state = duel([Role.CAPTAIN, Role.CONTESSA], my_coins=3)
        action, target = decide_action(state.players[0], state, HARD, StubRng([0.5]))
        assert (action, target) == (ActionKind.ASSASSINATE, 3)

    def test_steal_with_captain(self):
        state = duel([Role.CAPTAIN, Role.CONTESSA], my_coins=2)
        assert decide_action(state.players[0], state, HARD, StubRng([0.6]))[0] == ActionKind.STEAL

    def test_steal_roll_fails_then_tax_bluff(self):
        state = duel([Role.CAPTAIN, Role.CONTESSA], my_coins=2)
        assert decide_action(state.players[0], state, HARD, StubRng([0.8, 0.4]))[0] == ActionKind.TAX

    def test_duke_taxes_without_roll(self):
        rng = StubRng([0.0])
        state = duel([Role.DUKE, Role.CONTESSA], my_coins=2)
        assert decide_action(state.players[0], state, HARD, rng)[0] == ActionKind.TAX
        assert rng.rolls == [0.0]

    def test_falls_back_to_foreign_aid(self):
        state = duel([Role.CONTESSA, Role.AMBASSADOR], my_coins=2)
        assert decide_action(state.players[0], state, HARD, StubRng([0.9]))[0] == ActionKind.FOREIGN_AID


class TestChallengeHeuristic:
    """When bots call a claim."""

    def test_normal_never_challenges(self):
        state = duel([Role.DUKE, Role.DUKE])
        assert not decide_challenge(state.players[0], Role.DUKE, NORMAL, StubRng([0.0]))

    def test_hard_challenges_when_holding_two_copies(self):
        state = duel([Role.DUKE, Role.DUKE])
        assert decide_challenge(state.players[0], Role.DUKE, HARD, StubRng())

    @pytest.mark.parametrize("roll,expected", [(0.1, True), (0.2, False)])
    def test_hard_noise(self, roll, expected):
        state = duel([Role.DUKE, Role.CAPTAIN])
        assert decide_challenge(state.players[0], Role.DUKE, HARD, StubRng([roll])) is expected


class TestBlockHeuristic:
    """When bots block."""

    def test_blocks_truthfully(self):
        state = duel([Role.CONTESSA, Role.DUKE])
        assert decide_block(state.players[0], ActionKind.ASSASSINATE, NORMAL, StubRng())

    def test_ambassador_blocks_steal(self):
        state = duel([Role.AMBASSADOR, Role.DUKE])
        assert decide_block(state.players[0], ActionKind.STEAL, NORMAL, StubRng())

    def test_normal_never_bluffs(self):
        state = duel([Role.CAPTAIN, Role.DUKE])
        assert not decide_block(state.players[0], ActionKind.ASSASSINATE, NORMAL, StubRng([0.0]))

    def test_hard_bluffs_assassinate_block(self):
        state = duel([Role.CAPTAIN, Role.DUKE])
        assert decide_block(state.players[0], ActionKind.ASSASSINATE, HARD, StubRng([0.5]))
        assert not decide_block(state.players[0], ActionKind.ASSASSINATE, HARD, StubRng([0.7]))

    def test_hard_never_bluffs_foreign_aid_block(self):
        state = duel([Role.CAPTAIN, Role.CONTESSA])
        assert not decide_block(state.players[0], ActionKind.FOREIGN_AID, HARD, StubRng([0.0]))

    def test_card_choice_uses_rng(self):
        assert choose_card([1, 3], StubRng()) == 1


class TestCoupBot:
    """CoupBot answers resolver decisions."""

    def test_profile_from_difficulty(self):
        assert CoupBot(participant_id=1, difficulty=Difficulty.HARD).profile is get_profile(Difficulty.HARD)

    def test_declares_tax_with_duke(self, resolver, three_player_state):
        pending = resolver.begin_turn(three_player_state)
        bot = CoupBot(participant_id=1, rng=StubRng())
        index = bot.request_decision(resolver.game_state, pending)
        assert pending.options[index] == ActionKind.TAX

    def test_answers_challenge_and_block(self, resolver):
        state = build_state([
            [Role.CAPTAIN, Role.DUKE],
            [Role.CONTESSA, Role.AMBASSADOR],
        ])
        resolver.begin_turn(state)
        play(resolver, [(1, ActionKind.STEAL), (1, 2)])
        bot = CoupBot(participant_id=2, difficulty=Difficulty.HARD, rng=StubRng([0.9]))

        pending = resolver.pending_decision
        assert pending.options[bot.request_decision(resolver.game_state, pending)] == PASS
        play(resolver, [(2, PASS)])

        pending = resolver.pending_decision
        assert pending.options[bot.request_decision(resolver.game_state, pending)] == BLOCK

    def test_hard_bot_challenges_with_both_copies(self, resolver):
        state = build_state([
            [Role.CONTESSA, Role.AMBASSADOR],
            [Role.DUKE, Role.DUKE],
        ])
        resolver.begin_turn(state)
        play(resolver, [(1, ActionKind.TAX)])
        bot = CoupBot(participant_id=2, difficulty=Difficulty.HARD, rng=StubRng())
        pending = resolver.pending_decision
        assert pending.options[bot.request_decision(resolver.game_state, pending)] == CHALLENGE

    def test_picks_card_to_lose(self, resolver):
        state = build_state([
            [Role.CONTESSA, Role.AMBASSADOR],
            [Role.DUKE, Role.CAPTAIN],
        ], coins=[7, 2])
        resolver.begin_turn(state)
        play(resolver, [(1, ActionKind.COUP), (1, 2)])
        pending = resolver.pending_decision
        assert pending.kind == DecisionKind.CARD_TO_LOSE
        bot = CoupBot(participant_id=2, rng=StubRng())
        assert bot.request_decision(resolver.game_state, pending) == 0


class TestSimpleSources:
    """Scripted and baseline sources."""

    def test_human_source_suspends_when_empty(self, resolver, three_player_state):
        pending = resolver.begin_turn(three_player_state)
        human = HumanDecisionSource()
        assert human.request_decision(resolver.game_state, pending) is None
        human.submit(2)
        assert human.has_answer
        assert human.request_decision(resolver.game_state, pending) == 2
        assert not human.has_answer

    def test_random_policy_picks_legal_kinds(self, resolver):
        state = build_state(
            [[Role.DUKE, Role.CAPTAIN], [Role.CONTESSA, Role.ASSASSIN]],
            coins=[10, 2],
        )
        pending = resolver.begin_turn(state)
        policy = RandomPolicy(seed=3)
        for _ in range(10):
            assert pending.options[policy.request_decision(state, pending)] == ActionKind.COUP

    def test_first_legal_policy(self, resolver, three_player_state):
        pending = resolver.begin_turn(three_player_state)
        index = FirstLegalPolicy().request_decision(three_player_state, pending)
        assert pending.options[index] == ActionKind.INCOME
