"""Seed a Hearth Games roster and catalog, then play rounds for demo purposes.

Usage:
    python scripts/demo_seed.py seed          # Create people, couples, templates + an event
    python scripts/demo_seed.py step [N]      # Play N rounds with random winners (default 1)
    python scripts/demo_seed.py status        # Print event state and leaderboard

Uses a local SQLite database (demo_hearthgames.db).
"""

from __future__ import annotations

import asyncio
import os
import random
import sys

from hearthgames.core.errors import HearthGamesError
from hearthgames.core.service import EventService
from hearthgames.db.engine import create_engine, get_session, init_db
from hearthgames.db.repository import Repository
from hearthgames.models.catalog import TeamType
from hearthgames.models.event import EventStatus, GameStatus

DEMO_DB = os.environ.get("DATABASE_URL", "sqlite+aiosqlite:///demo_hearthgames.db")
EVENT_NAME = "Family Game Night"

# (name, sex, age, weight, athletic_ability)
PEOPLE = [
    ("Ada", "F", 34, 130, 6),
    ("Ben", "M", 36, 185, 7),
    ("Cleo", "F", 29, 140, 8),
    ("Dev", "M", 31, 170, 5),
    ("Esme", "F", 62, 150, 3),
    ("Frank", "M", 65, 200, 4),
    ("Gus", "M", 14, 110, 9),
    ("Hana", "F", 12, 90, 7),
]

COUPLES = [("Ada", "Ben"), ("Cleo", "Dev"), ("Esme", "Frank")]

TEMPLATES = [
    {"name": "Charades", "group_name": "Acting", "default_rounds_per_game": 2},
    {"name": "Pictionary", "group_name": "Drawing", "default_rounds_per_game": 2},
    {"name": "Newlywed Quiz", "group_name": "Trivia",
     "default_team_count": 3, "default_team_type": TeamType.COUPLES_ONLY},
    {"name": "Egg Relay", "group_name": "Outdoor",
     "default_team_count": 2, "default_players_per_team": 4},
    {"name": "Ladies' Pass the Parcel", "group_name": "Party",
     "default_team_count": 2, "default_players_per_team": 2,
     "default_team_type": TeamType.FEMALE_ONLY},
]


async def _find_event(repo: Repository):
    for event in await repo.load_events():
        if event.name == EVENT_NAME:
            return event
    return None


async def seed():
    """Create the demo roster, catalog and event."""
    engine = create_engine(DEMO_DB)
    await init_db(engine)

    async with get_session(engine) as session:
        repo = Repository(session)
        ids: dict[str, str] = {}
        for name, sex, age, weight, ability in PEOPLE:
            row = await repo.create_person(
                name, sex=sex, age=age, weight=weight, athletic_ability=ability
            )
            ids[name] = row.id
        for a, b in COUPLES:
            await repo.link_spouses(ids[a], ids[b])

        for t in TEMPLATES:
            await repo.create_template(**t)

        service = EventService(repo)
        event = await service.create_event(EVENT_NAME, list(ids.values()))
        event, added = await service.import_catalog_games(event.id)
        print(f"Seeded: {len(PEOPLE)} people, {len(COUPLES)} couples, {len(added)} games")
        print(f"Event ID: {event.id}")

    await engine.dispose()


async def step(rounds: int = 1):
    """Play N rounds: generate teams, pick a random winner, advance games as needed."""
    engine = create_engine(DEMO_DB)
    rng = random.Random()
    async with get_session(engine) as session:
        repo = Repository(session)
        service = EventService(repo, rng=rng)
        event = await _find_event(repo)
        if event is None:
            print("No event found. Run 'seed' first.")
            return
        if event.status != EventStatus.ACTIVE:
            event = await service.resume_event(event.id)

        catalog = await repo.load_catalog()
        for _ in range(rounds):
            game = event.current_game()
            if game is None or event.status == EventStatus.COMPLETED:
                print("Event completed.")
                break
            template = catalog.get(game.template_id)
            round_ = game.current_round()
            if round_ is None:
                event, round_ = await service.create_next_round(event.id, game.id)

            try:
                event, teams = await service.generate_teams(event.id, round_.id)
            except HearthGamesError as exc:
                print(f"{template.name}: {exc} Skipping.")
                event, _ = await service.skip_to_next_game(event.id, game.id)
                continue

            winner = rng.choice(teams)
            event = await service.finalize_round(event.id, round_.id, winner.id)
            print(f"{template.name} round {round_.round_index}: winner {winner.member_person_ids}")

            game = event.get_game(game.id)
            if len(game.completed_rounds()) >= game.settings(template).rounds_per_game:
                event = await service.complete_game(event.id, game.id)
                event = await service.resume_event(event.id)

    await engine.dispose()


async def status():
    """Print event state and the leaderboard."""
    engine = create_engine(DEMO_DB)
    async with get_session(engine) as session:
        repo = Repository(session)
        event = await _find_event(repo)
        if event is None:
            print("No event found.")
            return

        catalog = await repo.load_catalog()
        print(f"Event: {event.name} | Status: {event.status}")
        for game in sorted(event.games, key=lambda g: g.order_index):
            template = catalog.get(game.template_id)
            marker = "*" if game.id == event.current_game_id else " "
            done = len(game.completed_rounds())
            name = template.name if template else game.template_id
            print(f" {marker} {name:<25} {game.status:<11} rounds={done}")

        stats = await EventService(repo).player_stats(event.id)
        print(f"{'#':>2} {'Player':<10} {'GP':>3} {'1st':>4} {'2nd':>4} {'3rd':>4} {'PTS':>4}")
        print("-" * 37)
        for s in stats:
            print(
                f"{s.rank:>2} {s.display_name:<10} {s.games_played:>3} {s.first_place:>4} "
                f"{s.second_place:>4} {s.third_place:>4} {s.total_points:>4}"
            )
        in_progress = event.games_with_status(GameStatus.IN_PROGRESS)
        if not in_progress and event.status != EventStatus.COMPLETED:
            print("No game in progress. Run 'step' to continue.")

    await engine.dispose()


def main():
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)

    cmd = sys.argv[1]
    if cmd == "seed":
        asyncio.run(seed())
    elif cmd == "step":
        n = int(sys.argv[2]) if len(sys.argv) > 2 else 1
        asyncio.run(step(n))
    elif cmd == "status":
        asyncio.run(status())
    else:
        print(f"Unknown command: {cmd}")
        print(__doc__)
        sys.exit(1)


if __name__ == "__main__":
    main()
