"""`castdesk config`: show effective configuration."""
from __future__ import annotations

from backend.app.config import effective_config


def register(subparsers) -> None:
    p = subparsers.add_parser("config", help="Show effective configuration (after env overrides)")
    p.set_defaults(func=run)


def run(args) -> int:
    print("Effective castdesk config (after env overrides):")
    print()
    for key, value in effective_config().items():
        print(f"- {key}: {value}")

    print("\nOverride pattern:")
    print("  CASTDESK_<SETTING>, e.g. CASTDESK_STATE_PATH=/tmp/casting.json")
    return 0
