"""
Game State - Cards, deck, participants and the shared game container.

Design principles:
- Single owner: only the reducer mutates state, and it mutates a clone
- Serializable: plain dataclasses and enums
- Conservation: 15 role tokens live in the deck or in hands, always
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from copy import deepcopy
from enum import Enum

from .errors import InvariantViolation

if TYPE_CHECKING:
    import random
    from .action import ActionDeclaration
    from .events import GameEvent


class Role(Enum):
    """The five influence roles."""
    DUKE = "Duke"
    ASSASSIN = "Assassin"
    CAPTAIN = "Captain"
    AMBASSADOR = "Ambassador"
    CONTESSA = "Contessa"


COPIES_PER_ROLE = 3
TOTAL_TOKENS = COPIES_PER_ROLE * len(Role)
STARTING_COINS = 2
HAND_SIZE = 2


class GamePhase(Enum):
    """High-level game phases."""
    SETUP = "setup"
    PLAYING = "playing"
    GAME_OVER = "game_over"


class Controller(Enum):
    """Who makes a participant's decisions."""
    HUMAN = "human"
    AI = "ai"


class Difficulty(Enum):
    """AI difficulty levels."""
    NORMAL = "normal"
    HARD = "hard"


@dataclass
class Card:
    """
    A role token.

    Once revealed the role is public and the card counts as lost influence.
    """
    role: Role
    revealed: bool = False


@dataclass
class Deck:
    """
    The court deck: every unrevealed token not held by a participant.

    Order matters only through draw(); returning a token reshuffles.
    """
    cards: list[Card] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.cards)

    def shuffle(self, rng: random.Random) -> None:
        rng.shuffle(self.cards)

    def draw(self) -> Card:
        """Take the top token."""
        if not self.cards:
            raise InvariantViolation("Deck exhausted")
        return self.cards.pop()

    def put_back(self, card: Card, rng: random.Random) -> None:
        """Return a token face-down and reshuffle."""
        if card.revealed:
            raise InvariantViolation(f"Revealed {card.role.value} cannot return to the deck")
        self.cards.append(card)
        self.shuffle(rng)

    def role_count(self, role: Role) -> int:
        return sum(1 for c in self.cards if c.role == role)


@dataclass
class Participant:
    """
    State for a single participant.

    `alive` goes false exactly when every card in hand is revealed,
    and never comes back.
    """
    participant_id: int
    name: str
    controller: Controller = Controller.AI
    difficulty: Difficulty = Difficulty.NORMAL
    coins: int = STARTING_COINS
    hand: list[Card] = field(default_factory=list)
    alive: bool = True

    @property
    def is_human(self) -> bool:
        return self.controller == Controller.HUMAN

    @property
    def live_indices(self) -> list[int]:
        """Hand indices of unrevealed cards."""
        return [i for i, c in enumerate(self.hand) if not c.revealed]

    @property
    def influence(self) -> int:
        return len(self.live_indices)

    @property
    def revealed_roles(self) -> list[Role]:
        return [c.role for c in self.hand if c.revealed]

    def has_role(self, role: Role) -> bool:
        """True when an unrevealed card of this role is in hand."""
        return any(c.role == role and not c.revealed for c in self.hand)

    def count_role(self, role: Role) -> int:
        return sum(1 for c in self.hand if c.role == role and not c.revealed)

    def find_live(self, role: Role) -> int | None:
        """Index of the first unrevealed card of this role, if any."""
        for i, c in enumerate(self.hand):
            if c.role == role and not c.revealed:
                return i
        return None


@dataclass
class GameState:
    """
    Complete game state at a point in time.

    This is the canonical state that the engine operates on.
    All state changes go through the reducer.
    """
    game_id: str

    # Game phase
    phase: GamePhase = GamePhase.SETUP
    turn_number: int = 0
    current_player_idx: int = 0

    # Seating order is list order
    players: list[Participant] = field(default_factory=list)
    deck: Deck = field(default_factory=Deck)

    # Declaration under resolution this turn
    current_action: ActionDeclaration | None = None

    winner_id: int | None = None

    # Emitted events, oldest first
    event_log: list[GameEvent] = field(default_factory=list)

    random_seed: int = 0

    @property
    def current_player(self) -> Participant:
        """Get the participant whose turn it is."""
        return self.players[self.current_player_idx]

    @property
    def num_players(self) -> int:
        return len(self.players)

    @property
    def alive_players(self) -> list[Participant]:
        return [p for p in self.players if p.alive]

    @property
    def is_over(self) -> bool:
        return self.phase == GamePhase.GAME_OVER

    def get_player(self, participant_id: int) -> Participant | None:
        """Get participant by ID."""
        for p in self.players:
            if p.participant_id == participant_id:
                return p
        return None

    def alive_opponents(self, participant_id: int) -> list[Participant]:
        """Living participants other than this one, in seating order."""
        return [
            p for p in self.players
            if p.alive and p.participant_id != participant_id
        ]

    def token_count(self) -> int:
        return self.deck.count + sum(len(p.hand) for p in self.players)

    def role_counts(self) -> dict[Role, int]:
        """Tokens per role across the deck and every hand."""
        counts = {role: self.deck.role_count(role) for role in Role}
        for p in self.players:
            for card in p.hand:
                counts[card.role] += 1
        return counts

    def check_invariants(self) -> None:
        """Raise InvariantViolation if the token or coin invariants are broken."""
        total = self.token_count()
        if total != TOTAL_TOKENS:
            raise InvariantViolation(f"Token count is {total}, expected {TOTAL_TOKENS}")
        for role, count in self.role_counts().items():
            if count != COPIES_PER_ROLE:
                raise InvariantViolation(
                    f"{role.value} count is {count}, expected {COPIES_PER_ROLE}"
                )
        for p in self.players:
            if p.coins < 0:
                raise InvariantViolation(f"{p.name} has negative coins")
            if p.alive == all(c.revealed for c in p.hand):
                raise InvariantViolation(f"{p.name} alive flag disagrees with hand")
        if any(c.revealed for c in self.deck.cards):
            raise InvariantViolation("Revealed card found in the deck")

    def clone(self) -> GameState:
        """Deep copy the state."""
        return deepcopy(self)
