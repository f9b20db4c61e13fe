"""Castdesk – unified CLI dispatcher.

All subcommands live in ``castdesk/commands/*.py`` and expose a
``register(subparsers)`` function that adds themselves to argparse.
"""
from __future__ import annotations

import argparse
import logging
import sys

from shared.config import LOG_LEVEL


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="castdesk",
        description="Castdesk: casting workflow engine CLI",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command")

    from castdesk.commands.registry import register_all

    register_all(sub)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, LOG_LEVEL, logging.INFO),
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        sys.exit(0)

    # Each command stores a ``func`` on the namespace
    rc = args.func(args)
    sys.exit(rc or 0)
