"""
Bots module - Decision sources for participants.

Provides:
- DecisionSource: Interface the game loop asks for every decision
- CoupBot: AI participant driven by the policy functions
- HumanDecisionSource: Participant answered by an external UI
- DifficultyProfile: Tunable bot behavior per difficulty
"""

from .policy import DecisionSource, HumanDecisionSource, RandomPolicy, FirstLegalPolicy
from .difficulty import DifficultyProfile, DIFFICULTIES, NORMAL, HARD, get_profile
from .ai_policy import (
    decide_action,
    decide_challenge,
    decide_block,
    choose_target,
    strongest_opponent,
)
from .coup_bot import CoupBot

__all__ = [
    "DecisionSource",
    "HumanDecisionSource",
    "RandomPolicy",
    "FirstLegalPolicy",
    "DifficultyProfile",
    "DIFFICULTIES",
    "NORMAL",
    "HARD",
    "get_profile",
    "decide_action",
    "decide_challenge",
    "decide_block",
    "choose_target",
    "strongest_opponent",
    "CoupBot",
]
