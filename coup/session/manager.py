"""
Session Manager - Creates and manages game sessions.

LIFECYCLE:
1. Lobby collects a GameConfig (humans, AIs, difficulty, seed)
2. create_session deals the game and wires a decision source per seat
3. The game loop runs AI decisions and suspends on human ones
4. Humans answer through submit_decision until one participant is left
5. end_session drops the session from memory

PERSISTENCE RULES:
- No database, sessions live in memory only
- A seed reproduces the whole game given the same human answers
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
import logging
import random
import time
import uuid

from ..engine_core.events import EventBus
from ..engine_core.reducer import Reducer
from ..engine_core.setup import GameConfig, setup_game
from ..engine_core.state import GameState
from ..bots import CoupBot, DecisionSource, HumanDecisionSource
from .game_loop import GameLoop, LoopState, TurnResult

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """State of a game session."""
    CREATED = "created"  # Dealt, loop not started
    ACTIVE = "active"  # Running AI turns
    WAITING_INPUT = "waiting_input"  # A human owes a decision
    GAME_OVER = "game_over"
    ABANDONED = "abandoned"


@dataclass
class Session:
    """
    An ephemeral game session.

    Contains the loop (which owns the canonical state), one decision
    source per participant and the result of the last loop run.
    """
    session_id: str
    config: GameConfig
    created_at: float
    game_loop: GameLoop

    state: SessionState = SessionState.CREATED
    sources: dict[int, DecisionSource] = field(default_factory=dict)
    last_result: TurnResult | None = None

    @property
    def game_state(self) -> GameState:
        return self.game_loop.game_state

    def is_active(self) -> bool:
        """Check if session is still active."""
        return self.state in {
            SessionState.CREATED,
            SessionState.ACTIVE,
            SessionState.WAITING_INPUT,
        }

    def human_ids(self) -> list[int]:
        return [pid for pid, source in self.sources.items() if isinstance(source, HumanDecisionSource)]

    def record(self, result: TurnResult) -> TurnResult:
        """Store a loop result and move the session state along with it."""
        self.last_result = result
        if result.loop_state == LoopState.GAME_OVER:
            self.state = SessionState.GAME_OVER
        elif result.loop_state == LoopState.WAITING_HUMAN:
            self.state = SessionState.WAITING_INPUT
        else:
            self.state = SessionState.ACTIVE
        return result


def build_sources(state: GameState, config: GameConfig, rng: random.Random) -> dict[int, DecisionSource]:
    """A queue-fed source per human, a seeded CoupBot per AI."""
    sources: dict[int, DecisionSource] = {}
    for player in state.players:
        if player.is_human:
            sources[player.participant_id] = HumanDecisionSource()
        else:
            sources[player.participant_id] = CoupBot(
                participant_id=player.participant_id,
                difficulty=config.difficulty,
                rng=random.Random(rng.getrandbits(32)),
            )
    return sources


class SessionManager:
    """
    Manages game sessions.

    Responsibilities:
    - Create sessions from a lobby configuration
    - Track active sessions
    - Clean up completed sessions

    No persistence - sessions are in-memory only.
    """

    def __init__(self, max_turns: int = 500):
        self._sessions: dict[str, Session] = {}
        self.max_turns = max_turns

    def create_session(self, config: GameConfig, start: bool = True) -> Session:
        """
        Create a new game session.

        Args:
            config: Participant counts, difficulty and seed
            start: Run AI turns right away, up to the first human decision

        Returns:
            New Session

        Raises:
            ValueError: for fewer than 2 or more than 6 participants
        """
        config.validate()
        session_id = str(uuid.uuid4())

        master = random.Random(config.random_seed)
        game_state = setup_game(config, rng=random.Random(master.getrandbits(32)))
        sources = build_sources(game_state, config, master)
        loop = GameLoop(
            game_state,
            sources=sources,
            reducer=Reducer(rng=random.Random(master.getrandbits(32))),
            bus=EventBus(),
            max_turns=self.max_turns,
        )

        session = Session(
            session_id=session_id,
            config=config,
            created_at=time.time(),
            game_loop=loop,
            sources=sources,
        )
        self._sessions[session_id] = session
        logger.info(
            "Created session %s: %d humans, %d AIs (%s)",
            session_id, config.human_count, config.ai_count, config.difficulty.value,
        )

        if start:
            session.record(loop.run())
        return session

    def submit_decision(self, session_id: str, participant_id: int, choice_index: int) -> TurnResult:
        """
        Answer the session's pending decision and run until the next one.

        Raises:
            KeyError: unknown session
            InvalidDecisionChoice: wrong participant, bad index or nothing pending
        """
        session = self._sessions.get(session_id)
        if session is None:
            raise KeyError(session_id)
        return session.record(session.game_loop.submit_decision(participant_id, choice_index))

    def get_session(self, session_id: str) -> Session | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def end_session(self, session_id: str, reason: str = "completed") -> bool:
        """
        End a session and drop it from memory.

        Returns whether the session existed.
        """
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        if session.state != SessionState.GAME_OVER:
            session.state = SessionState.ABANDONED
        session.game_loop.bus.clear()
        logger.info("Ended session %s (%s)", session_id, reason)
        return True

    def list_active_sessions(self) -> list[str]:
        """List IDs of active sessions."""
        return [
            sid for sid, session in self._sessions.items()
            if session.is_active()
        ]

    def list_sessions(self) -> list[Session]:
        return list(self._sessions.values())

    def cleanup_stale_sessions(self, max_age_seconds: int = 3600) -> int:
        """Drop finished sessions older than max_age. Returns how many."""
        now = time.time()
        stale = [
            sid for sid, session in self._sessions.items()
            if now - session.created_at > max_age_seconds and not session.is_active()
        ]
        for sid in stale:
            self.end_session(sid, reason="stale")
        return len(stale)
