"""
Coup CLI - Command-line interface for the engine.

Usage:
    coup play [--humans N] [--bots N] [--difficulty normal|hard] [--seed S]
    coup simulate [--bots N] [--difficulty normal|hard] [--games N] [--seed S]
"""

import argparse
import logging
import random
import sys
from collections import Counter

from .bots import DecisionSource
from .engine_core.events import EventBus
from .engine_core.reducer import Reducer
from .engine_core.setup import GameConfig, setup_game
from .engine_core.state import Difficulty
from .session import GameLoop, LoopState, build_sources

logger = logging.getLogger(__name__)


class TerminalDecisionSource(DecisionSource):
    """Human at the terminal. Re-prompts until the answer is a valid index."""

    def __init__(self, participant_id, read=input, write=print):
        self.participant_id = participant_id
        self._read = read
        self._write = write

    def request_decision(self, state, pending):
        me = state.get_player(self.participant_id)
        hand = ", ".join(
            f"{c.role.value}{' (revealed)' if c.revealed else ''}" for c in me.hand
        )
        self._write(f"\n{me.name} | coins: {me.coins} | hand: {hand}")
        if pending.context.get("error"):
            self._write(f"  ! {pending.context['error']}")
        self._write(pending.prompt)
        for i, option in enumerate(pending.options):
            self._write(f"  [{i}] {self._label(state, pending, option)}")

        while True:
            raw = self._read("> ").strip()
            try:
                index = int(raw)
            except ValueError:
                self._write(f"Enter a number between 0 and {len(pending.options) - 1}")
                continue
            if 0 <= index < len(pending.options):
                return index
            self._write(f"Enter a number between 0 and {len(pending.options) - 1}")

    def _label(self, state, pending, option):
        if hasattr(option, "value"):
            return option.value
        if pending.kind.value == "target_selection":
            target = state.get_player(option)
            return f"{target.name} ({target.coins} coins, {target.influence} cards)"
        if pending.kind.value in ("card_to_lose", "card_to_keep"):
            return state.get_player(self.participant_id).hand[option].role.value
        return str(option)

    def get_name(self):
        return f"Terminal({self.participant_id})"


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Coup - Bluffing Card Game Engine",
        prog="coup",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    play_parser = subparsers.add_parser("play", help="Play in the terminal")
    play_parser.add_argument("--humans", type=int, default=1, help="Number of human players")
    play_parser.add_argument("--bots", type=int, default=3, help="Number of bot players")
    play_parser.add_argument("--difficulty", choices=[d.value for d in Difficulty], default="normal")
    play_parser.add_argument("--seed", type=int, default=None, help="Random seed")

    sim_parser = subparsers.add_parser("simulate", help="Run bot-only games")
    sim_parser.add_argument("--bots", type=int, default=4, help="Number of bot players")
    sim_parser.add_argument("--difficulty", choices=[d.value for d in Difficulty], default="normal")
    sim_parser.add_argument("--games", type=int, default=10, help="Number of games")
    sim_parser.add_argument("--seed", type=int, default=None, help="Random seed")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "play":
        return cmd_play(args)
    elif args.command == "simulate":
        return cmd_simulate(args)
    parser.print_help()
    sys.exit(1)


def _build_loop(config, master, read=input, write=print):
    state = setup_game(config, rng=random.Random(master.getrandbits(32)))
    sources = build_sources(state, config, master)
    for player in state.players:
        if player.is_human:
            sources[player.participant_id] = TerminalDecisionSource(player.participant_id, read, write)
    return GameLoop(
        state,
        sources=sources,
        reducer=Reducer(rng=random.Random(master.getrandbits(32))),
        bus=EventBus(),
    )


def cmd_play(args, read=input, write=print):
    """Interactive game; the log prints as it happens."""
    config = GameConfig(
        human_count=args.humans,
        ai_count=args.bots,
        difficulty=Difficulty(args.difficulty),
        random_seed=args.seed,
    )
    try:
        config.validate()
    except ValueError as e:
        write(f"Error: {e}")
        sys.exit(1)

    loop = _build_loop(config, random.Random(args.seed), read, write)
    loop.bus.on_any(lambda event: write(event.message))
    result = loop.run()

    if result.loop_state != LoopState.GAME_OVER:
        write("Game stopped: " + "; ".join(result.errors))
        return 1
    winner = loop.game_state.get_player(result.winner_id)
    write(f"\nWinner: {winner.name}")
    return 0


def cmd_simulate(args, write=print):
    """Bot-only games; prints each winner and a tally."""
    config = GameConfig(
        human_count=0,
        ai_count=args.bots,
        difficulty=Difficulty(args.difficulty),
    )
    try:
        config.validate()
    except ValueError as e:
        write(f"Error: {e}")
        sys.exit(1)

    master = random.Random(args.seed)
    wins = Counter()
    for game in range(1, args.games + 1):
        loop = _build_loop(config, master)
        result = loop.run()
        if result.loop_state != LoopState.GAME_OVER:
            write(f"Game {game}: stopped after {loop.turns_played} turns")
            continue
        winner = loop.game_state.get_player(result.winner_id)
        wins[winner.name] += 1
        write(f"Game {game}: {winner.name} wins after {loop.turns_played} turns")

    write("\nWins:")
    for name, count in wins.most_common():
        write(f"  {name}: {count}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
