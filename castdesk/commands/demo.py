"""`castdesk demo`: load a YAML seed file into the state file."""
from __future__ import annotations

from pathlib import Path

from backend.app import config
from backend.app.core.seed import SeedError, load_seed
from backend.app.core.state_store import StateStore


def register(subparsers) -> None:
    p = subparsers.add_parser("demo", help="Load a YAML seed into the casting state file")
    p.add_argument("--seed", default=None, help=f"Seed YAML (default: {config.SEED_PATH})")
    p.add_argument("--state", default=None, help=f"State file to write (default: {config.STATE_PATH})")
    p.add_argument("--force", action="store_true", help="Overwrite an existing state file")
    p.set_defaults(func=run)


def run(args) -> int:
    seed_path = Path(args.seed) if args.seed else config.SEED_PATH
    store = StateStore(args.state or config.STATE_PATH)
    if store.exists() and not args.force:
        print(f"ERROR: {store.path} already exists (use --force to overwrite)")
        return 1
    try:
        state = load_seed(seed_path)
    except SeedError as e:
        print(f"ERROR: {e}")
        return 1
    if not store.save(state):
        print(f"ERROR: could not write {store.path}")
        return 1

    print(f"Seeded {store.path} from {seed_path}")
    for project in state.projects:
        print(f"  {project.name} ({project.id})")
        for character in project.characters:
            count = len(list(character.actors.all_actors()))
            print(f"    - {character.name} ({character.id}): {count} actor(s)")
    return 0
