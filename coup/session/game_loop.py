"""
Game Loop - The outer turn loop.

The loop:
1. Begin the current participant's turn
2. Route each pending decision to its owner's decision source
3. Suspend when a source has no answer yet (a human)
4. Resume when the answer is submitted
5. Advance turns until one participant is left

Exactly one decision is outstanding while suspended.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING
import logging
import random

from ..engine_core.errors import InvalidDecisionChoice
from ..engine_core.events import EventBus, GameEvent
from ..engine_core.reducer import Reducer
from ..engine_core.resolver import TurnResolver

if TYPE_CHECKING:
    from ..engine_core.action import PendingDecision, TurnOutcome
    from ..engine_core.state import GameState
    from ..bots import DecisionSource

logger = logging.getLogger(__name__)

# Consecutive rejected answers tolerated from one source before giving up
MAX_REJECTIONS = 25


class LoopState(Enum):
    """State of the game loop."""
    READY = "ready"
    RUNNING = "running"
    WAITING_HUMAN = "waiting_human"
    GAME_OVER = "game_over"


@dataclass
class TurnResult:
    """
    Result of driving the loop until it stops.

    Contains the decision the loop is waiting on (if any),
    the turns completed meanwhile and what happened in them.
    """
    success: bool
    loop_state: LoopState

    pending_decision: PendingDecision | None = None

    # Turns completed during this call
    outcomes: list[TurnOutcome] = field(default_factory=list)

    # Event messages emitted during this call
    events: list[str] = field(default_factory=list)

    errors: list[str] = field(default_factory=list)

    # Game over info
    winner_id: int | None = None


class GameLoop:
    """
    The main game loop driver.

    Usage:
        loop = GameLoop(state, sources={1: HumanDecisionSource(), 2: CoupBot(2)})

        result = loop.run()
        while result.loop_state == LoopState.WAITING_HUMAN:
            index = ask_the_ui(result.pending_decision)
            result = loop.submit_decision(result.pending_decision.participant_id, index)
    """

    def __init__(
        self,
        game_state: GameState,
        sources: dict[int, DecisionSource],
        reducer: Reducer | None = None,
        bus: EventBus | None = None,
        max_turns: int = 500,
    ):
        missing = [p.participant_id for p in game_state.players if p.participant_id not in sources]
        if missing:
            raise ValueError(f"No decision source for participants {missing}")
        self.sources = sources
        self.bus = bus or EventBus()
        self.resolver = TurnResolver(reducer=reducer or Reducer(rng=random.Random()), bus=self.bus)
        self.max_turns = max_turns
        self.turns_played = 0
        self.state = LoopState.READY
        self._game_state = game_state
        self._recent: list[GameEvent] = []
        self.bus.on_any(self._recent.append)

    @property
    def game_state(self) -> GameState:
        """Latest state, including mid-turn changes."""
        if self.resolver.game_state is not None:
            return self.resolver.game_state
        return self._game_state

    @property
    def pending_decision(self) -> PendingDecision | None:
        return self.resolver.pending_decision

    def run(self) -> TurnResult:
        """
        Drive turns until a decision has no answer yet or the game ends.
        """
        outcomes: list[TurnOutcome] = []
        self.state = LoopState.RUNNING
        while True:
            if self.resolver.is_complete:
                if self._game_state.is_over:
                    self.state = LoopState.GAME_OVER
                    return self._result(outcomes)
                if self.turns_played >= self.max_turns:
                    self.state = LoopState.READY
                    result = self._result(outcomes)
                    result.success = False
                    result.errors.append(f"Turn limit of {self.max_turns} reached")
                    return result
                self.resolver.begin_turn(self._game_state)

            if self._drive() is not None:
                self.state = LoopState.WAITING_HUMAN
                return self._result(outcomes)
            outcomes.append(self._finish_turn())

    def submit_decision(self, participant_id: int, choice_index: int) -> TurnResult:
        """
        Answer the pending decision, then keep driving.

        Raises InvalidDecisionChoice (decision left pending) for a wrong
        participant or an out-of-range index.
        """
        if self.resolver.pending_decision is None:
            raise InvalidDecisionChoice("No decision pending")
        self.resolver.provide_decision(participant_id, choice_index)
        outcomes = []
        if self.resolver.is_complete:
            outcomes.append(self._finish_turn())
        result = self.run()
        result.outcomes = outcomes + result.outcomes
        return result

    def _drive(self) -> PendingDecision | None:
        """Answer decisions while sources can; return the one left waiting."""
        rejections = 0
        pending = self.resolver.pending_decision
        while pending is not None:
            source = self.sources[pending.participant_id]
            choice = source.request_decision(self.resolver.game_state, pending)
            if choice is None:
                logger.debug("waiting on participant %s for %s", pending.participant_id, pending.kind.value)
                return pending
            try:
                pending = self.resolver.provide_decision(pending.participant_id, choice)
                rejections = 0
            except InvalidDecisionChoice as e:
                rejections += 1
                logger.warning(
                    "Rejected answer %r from %s: %s", choice, source.get_name(), e.message
                )
                if rejections >= MAX_REJECTIONS:
                    raise
        return None

    def _finish_turn(self) -> TurnOutcome:
        self._game_state = self.resolver.game_state
        self.turns_played += 1
        return self.resolver.outcome

    def _result(self, outcomes: list[TurnOutcome]) -> TurnResult:
        events = [e.message for e in self._recent]
        self._recent.clear()
        return TurnResult(
            success=True,
            loop_state=self.state,
            pending_decision=self.resolver.pending_decision,
            outcomes=outcomes,
            events=events,
            winner_id=self._game_state.winner_id,
        )
