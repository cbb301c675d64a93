"""
Pytest fixtures for Coup tests.
"""

from collections import Counter

import pytest

from ..engine_core.state import (
    Card,
    Controller,
    COPIES_PER_ROLE,
    Deck,
    GamePhase,
    GameState,
    Participant,
    Role,
)
from ..engine_core.reducer import Reducer
from ..engine_core.resolver import TurnResolver


class StubRng:
    """
    Deterministic stand-in for random.Random.

    random() replays the queued rolls (0.99 once they run out), choice()
    takes the first element and shuffle() keeps the order.
    """

    def __init__(self, rolls=()):
        self.rolls = list(rolls)

    def random(self):
        return self.rolls.pop(0) if self.rolls else 0.99

    def choice(self, seq):
        return seq[0]

    def sample(self, seq, k):
        return list(seq)[:k]

    def shuffle(self, seq):
        pass


def build_state(hands, coins=None, current=0, humans=0):
    """
    Hand-built game state.

    `hands` has one entry per seat, each a list of Role or (Role, revealed).
    Participants get ids 1..n; the first `humans` seats are human.
    The deck holds the remaining tokens in Role order.
    """
    used = Counter()
    players = []
    for seat, roles in enumerate(hands):
        hand = []
        for entry in roles:
            role, revealed = entry if isinstance(entry, tuple) else (entry, False)
            hand.append(Card(role=role, revealed=revealed))
            used[role] += 1
        players.append(Participant(
            participant_id=seat + 1,
            name=f"Player {seat + 1}" if seat < humans else f"Bot {seat + 1 - humans}",
            controller=Controller.HUMAN if seat < humans else Controller.AI,
            coins=coins[seat] if coins else 2,
            hand=hand,
            alive=any(not c.revealed for c in hand),
        ))
    deck = Deck(cards=[
        Card(role=role)
        for role in Role
        for _ in range(COPIES_PER_ROLE - used[role])
    ])
    state = GameState(
        game_id="test_game",
        phase=GamePhase.PLAYING,
        current_player_idx=current,
        players=players,
        deck=deck,
    )
    state.check_invariants()
    return state


def play(resolver, script):
    """Answer pending decisions in order; each step is (participant_id, option value)."""
    for participant_id, value in script:
        pending = resolver.pending_decision
        assert pending is not None, f"nothing pending for {participant_id}: {value!r}"
        assert pending.participant_id == participant_id, (
            f"expected {participant_id}, {pending.participant_id} owes {pending.kind.value}"
        )
        resolver.provide_decision(participant_id, pending.index_of(value))


@pytest.fixture
def stub_rng():
    return StubRng()


@pytest.fixture
def reducer(stub_rng):
    """Reducer whose shuffles keep deck order."""
    return Reducer(rng=stub_rng)


@pytest.fixture
def resolver(reducer):
    return TurnResolver(reducer=reducer)


@pytest.fixture
def three_player_state():
    """
    Seat 0: Duke, Captain
    Seat 1: Contessa, Assassin
    Seat 2: Ambassador, Duke
    """
    return build_state([
        [Role.DUKE, Role.CAPTAIN],
        [Role.CONTESSA, Role.ASSASSIN],
        [Role.AMBASSADOR, Role.DUKE],
    ])
