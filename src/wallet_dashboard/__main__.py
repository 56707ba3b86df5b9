"""Operator commands: ``python -m wallet_dashboard <command>``."""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import logging
import sys

from wallet_dashboard.config import Settings, get_settings
from wallet_dashboard.storage.bootstrap import get_storage


def _configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.get_logging_level(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


async def _init_db(settings: Settings) -> int:
    storage = await get_storage(settings)
    try:
        print(f"Storage ready: {type(storage).__name__}")
        return 0
    finally:
        await storage.close()


async def _show_stats(settings: Settings) -> int:
    storage = await get_storage(settings)
    try:
        stats = await storage.get_stats()
        if stats is None:
            print("No stats row found", file=sys.stderr)
            return 1
        print(json.dumps(dataclasses.asdict(stats), indent=2, default=str))
        return 0
    finally:
        await storage.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="wallet_dashboard", description=__doc__)
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("init-db", help="Create the schema and seed defaults on first run")
    sub.add_parser("show-stats", help="Print the current stats row")
    sub.add_parser("show-config", help="Print the effective settings with secrets redacted")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    _configure_logging(settings)

    if args.command == "show-config":
        print(json.dumps(settings.redacted_summary(), indent=2))
        return 0
    if args.command == "init-db":
        return asyncio.run(_init_db(settings))
    return asyncio.run(_show_stats(settings))


if __name__ == "__main__":
    sys.exit(main())
