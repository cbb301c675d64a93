"""
Coup Bot - Decision source backed by the AI policy.

Answers every decision kind immediately:
- Action and target from decide_action / choose_target
- Challenges and blocks from decide_challenge / decide_block
- Cards to lose or keep uniformly at random
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING
import logging
import random

from ..engine_core.action import ActionKind, DecisionKind, PASS, CHALLENGE, BLOCK
from ..engine_core.state import Difficulty, Role
from .policy import DecisionSource
from .difficulty import DifficultyProfile, get_profile
from . import ai_policy

if TYPE_CHECKING:
    from ..engine_core.state import GameState
    from ..engine_core.action import PendingDecision

logger = logging.getLogger(__name__)


@dataclass
class CoupBot(DecisionSource):
    """
    AI participant.

    Usage:
        bot = CoupBot(participant_id=3, difficulty=Difficulty.HARD, rng=random.Random(7))
        index = bot.request_decision(state, pending)
    """
    participant_id: int
    difficulty: Difficulty = Difficulty.NORMAL
    profile: DifficultyProfile = None  # type: ignore
    rng: random.Random = None  # type: ignore

    def __post_init__(self):
        if self.profile is None:
            self.profile = get_profile(self.difficulty)
        if self.rng is None:
            self.rng = random.Random()

    def request_decision(
        self,
        state: GameState,
        pending: PendingDecision,
    ) -> int:
        me = state.get_player(self.participant_id)
        kind = pending.kind

        if kind == DecisionKind.ACTION_SELECTION:
            action, _ = ai_policy.decide_action(me, state, self.profile, self.rng)
            if action not in pending.context.get("legal", pending.options):
                logger.warning("%s picked illegal %s, falling back", me.name, action.value)
                action = pending.context["legal"][0]
            value = action
        elif kind == DecisionKind.TARGET_SELECTION:
            value = ai_policy.choose_target(me, state, pending.options)
        elif kind == DecisionKind.CHALLENGE_OR_PASS:
            role = Role(pending.context["claimed_role"])
            challenge = ai_policy.decide_challenge(me, role, self.profile, self.rng)
            value = CHALLENGE if challenge else PASS
        elif kind == DecisionKind.BLOCK_OR_PASS:
            action = ActionKind(pending.context["action"])
            block = ai_policy.decide_block(me, action, self.profile, self.rng)
            value = BLOCK if block else PASS
        else:
            value = ai_policy.choose_card(pending.options, self.rng)

        logger.debug("%s answers %s with %r", me.name, kind.value, value)
        return pending.index_of(value)

    def get_name(self) -> str:
        return f"CoupBot({self.profile.name})"
