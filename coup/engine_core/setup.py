"""
Game Setup - Creates the initial game state.

This module handles:
- Validating the participant configuration (2-6 total)
- Building the 15-token deck and shuffling it with a seeded random source
- Seating humans first, then AI participants
- Dealing two cards and two coins to everyone
"""

from __future__ import annotations
from dataclasses import dataclass
import random

from .state import (
    Card,
    Controller,
    COPIES_PER_ROLE,
    Deck,
    Difficulty,
    GamePhase,
    GameState,
    HAND_SIZE,
    Participant,
    Role,
    STARTING_COINS,
)

MIN_PLAYERS = 2
MAX_PLAYERS = 6


@dataclass
class GameConfig:
    """
    Participant configuration collected by the lobby.

    Every AI participant plays at the same difficulty.
    """
    human_count: int = 1
    ai_count: int = 1
    difficulty: Difficulty = Difficulty.NORMAL
    random_seed: int | None = None
    starting_coins: int = STARTING_COINS

    @property
    def total_players(self) -> int:
        return self.human_count + self.ai_count

    def validate(self) -> None:
        """Raise ValueError for an unplayable configuration."""
        if self.human_count < 0 or self.ai_count < 0:
            raise ValueError("Participant counts cannot be negative")
        if not MIN_PLAYERS <= self.total_players <= MAX_PLAYERS:
            raise ValueError(
                f"Coup supports {MIN_PLAYERS}-{MAX_PLAYERS} players, got {self.total_players}"
            )
        if self.starting_coins < 0:
            raise ValueError("Starting coins cannot be negative")


def build_deck(rng: random.Random) -> Deck:
    """Three tokens of each role, shuffled."""
    deck = Deck(cards=[Card(role=role) for role in Role for _ in range(COPIES_PER_ROLE)])
    deck.shuffle(rng)
    return deck


def setup_game(
    config: GameConfig,
    rng: random.Random | None = None,
    game_id: str | None = None,
) -> GameState:
    """
    Set up a new game.

    Args:
        config: Participant counts, difficulty and seed
        rng: Random source for the deck (seeded from config if omitted)
        game_id: Identifier for the game (derived from the seed if omitted)

    Returns:
        Initial GameState with seat 0 to act
    """
    config.validate()
    rng = rng or random.Random(config.random_seed)

    players = _create_players(config)
    deck = build_deck(rng)
    for player in players:
        player.hand = [deck.draw() for _ in range(HAND_SIZE)]

    seed = config.random_seed if config.random_seed is not None else rng.randint(0, 999999)
    state = GameState(
        game_id=game_id or f"coup_{seed}",
        phase=GamePhase.PLAYING,
        turn_number=0,
        current_player_idx=0,
        players=players,
        deck=deck,
        random_seed=seed,
    )
    state.check_invariants()
    return state


def _create_players(config: GameConfig) -> list[Participant]:
    """Humans take the first seats, AI participants the rest."""
    players = []
    for i in range(1, config.human_count + 1):
        players.append(Participant(
            participant_id=i,
            name=f"Player {i}",
            controller=Controller.HUMAN,
            difficulty=Difficulty.NORMAL,
            coins=config.starting_coins,
        ))
    for i in range(1, config.ai_count + 1):
        players.append(Participant(
            participant_id=config.human_count + i,
            name=f"Bot {i}",
            controller=Controller.AI,
            difficulty=config.difficulty,
            coins=config.starting_coins,
        ))
    return players
