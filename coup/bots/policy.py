"""
Decision Sources - Who answers a pending decision.

Every participant gets one DecisionSource when the game is created.
The game loop routes each PendingDecision to the owner's source and
never looks at whether the owner is human or AI.

A source answers with an index into the decision's options, or None
when the answer is not available yet (a human who has not replied).
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from collections import deque
from typing import TYPE_CHECKING, Iterable
import random

from ..engine_core.action import DecisionKind

if TYPE_CHECKING:
    from ..engine_core.state import GameState
    from ..engine_core.action import PendingDecision


class DecisionSource(ABC):
    """
    Abstract base class for decision sources.

    Implementations range from AI policies that answer at once
    to human providers that answer when the UI collects input.
    """

    @abstractmethod
    def request_decision(
        self,
        state: GameState,
        pending: PendingDecision,
    ) -> int | None:
        """
        Answer a pending decision.

        Args:
            state: Current game state
            pending: The decision to make

        Returns:
            Index into pending.options, or None to suspend the game
        """
        pass

    def get_name(self) -> str:
        """Get the source's name/identifier."""
        return self.__class__.__name__


class HumanDecisionSource(DecisionSource):
    """
    Human participant fed by an external UI.

    Answers queue up through submit(); with an empty queue the game
    suspends on this participant's decision.

    Used for:
    - API sessions (answers arrive per HTTP request)
    - Tests (canned answers injected up front)
    """

    def __init__(self, answers: Iterable[int] = ()):
        self._answers: deque[int] = deque(answers)

    def submit(self, choice_index: int) -> None:
        self._answers.append(choice_index)

    @property
    def has_answer(self) -> bool:
        return bool(self._answers)

    def request_decision(
        self,
        state: GameState,
        pending: PendingDecision,
    ) -> int | None:
        if not self._answers:
            return None
        return self._answers.popleft()


class RandomPolicy(DecisionSource):
    """
    Random policy - picks uniformly among the offered options.

    Action selection is limited to the legal kinds. Used for:
    - Testing (invariant sweeps over many random games)
    - Baseline comparison
    """

    def __init__(self, seed: int | None = None):
        self.rng = random.Random(seed)

    def request_decision(
        self,
        state: GameState,
        pending: PendingDecision,
    ) -> int | None:
        if not pending.options:
            raise ValueError("No options available")
        if pending.kind == DecisionKind.ACTION_SELECTION:
            legal = pending.context.get("legal") or pending.options
            return pending.index_of(self.rng.choice(legal))
        return self.rng.randrange(len(pending.options))


class FirstLegalPolicy(DecisionSource):
    """
    First-legal policy - always passes, always picks the first option.

    Used for:
    - Deterministic testing
    - Baseline comparison
    """

    def request_decision(
        self,
        state: GameState,
        pending: PendingDecision,
    ) -> int | None:
        if not pending.options:
            raise ValueError("No options available")
        if pending.kind == DecisionKind.ACTION_SELECTION:
            legal = pending.context.get("legal") or pending.options
            return pending.index_of(legal[0])
        return 0
