"""
Coup - Bluffing Card Game Engine

A deterministic, rules-driven engine for playing Coup with human and AI
participants. The engine provides:
- Card, deck and participant state
- The action catalog and legal declaration generation
- Step-by-step action resolution (challenges, blocks, counter-challenges)
- Bot policies for computer-controlled participants
"""

__version__ = "0.1.0"
