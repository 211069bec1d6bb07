#!/usr/bin/env python
"""Local demo: one room of stub players, printed to the console.

Usage:
    werewolf-party                          # 6 bots, 1 werewolf, fast timings
    werewolf-party --players 8 --werewolves 2 --seers 1 --hunters 1
    werewolf-party --seed 42                # Reproducible game
    werewolf-party --time-scale 1           # Real phase lengths
"""

import argparse
import asyncio
import logging
import random
import sys

# Enable Windows console colors
if sys.platform == "win32":
    import colorama
    colorama.init()

from rich.console import Console

from werewolf_party.ai import StubPlayer, StubTable
from werewolf_party.engine import GameEngine
from werewolf_party.notify import ConsoleNotifier
from werewolf_party.settings import load_settings
from werewolf_party.store import InMemoryPlayerStore, InMemoryRoomStore


async def run_demo(args: argparse.Namespace, console: Console) -> int:
    """Register bots, build a room, configure it and play one round."""
    settings = load_settings()
    settings.timings = settings.timings.scaled(args.time_scale)

    rooms = InMemoryRoomStore()
    players = InMemoryPlayerStore()
    notifier = ConsoleNotifier(console)
    table = StubTable(rooms)
    engine = GameEngine(
        rooms,
        players,
        notifier,
        displays=notifier,
        settings=settings,
        rng=random.Random(args.seed),
        on_phase=table,
    )
    table.engine = engine

    bot_ids = [f"bot{i}" for i in range(args.players)]
    for offset, bot_id in enumerate(bot_ids):
        await engine.register(bot_id, nick=f"Bot {offset}")
        table.seat(StubPlayer(bot_id, seed=args.seed + offset))

    owner = bot_ids[0]
    created = await engine.create_room(owner, channel_id="demo", top_message_ref="demo-top")
    if not created.ok:
        console.print(f"[red]{created.message}[/red]")
        return 1
    room_id = created.data["room_id"]

    for bot_id in bot_ids[1:]:
        await engine.join_room(room_id, bot_id)
    for key, value in (
        ("werewolves", args.werewolves),
        ("seers", args.seers),
        ("hunters", args.hunters),
    ):
        await engine.update_config(owner, key, value)

    started = await engine.start_game(owner)
    if not started.ok:
        console.print(f"[red]{started.message}[/red]")
        return 1

    try:
        game_over = await engine.wait_for_game(room_id)
    finally:
        await engine.shutdown()

    console.print("=" * 50)
    console.print(f"Winner: {game_over.winner.value if game_over.winner else 'none'}")
    console.print("=" * 50)
    return 0


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Werewolf party game engine - local demo with stub players",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--players", type=int, default=6, help="Number of stub players (default: 6)")
    parser.add_argument("--werewolves", type=int, default=1, help="Werewolf quota (default: 1)")
    parser.add_argument("--seers", type=int, default=1, help="Seer quota (default: 1)")
    parser.add_argument("--hunters", type=int, default=1, help="Hunter quota (default: 1)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible games")
    parser.add_argument(
        "--time-scale",
        type=float,
        default=0.01,
        help="Multiplier on every phase timer (default: 0.01, 1 = real time)",
    )
    parser.add_argument("--verbose", action="store_true", help="Log engine activity")
    args = parser.parse_args()

    # Configure logging
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(name)s: %(message)s",
    )

    if args.seed is None:
        args.seed = random.randint(1, 1000000)

    if args.players < 1:
        print("Error: --players must be a positive integer")
        return 1

    console = Console()
    return asyncio.run(run_demo(args, console))


if __name__ == "__main__":
    exit(main())
