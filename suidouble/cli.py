"""Command-line interface for quick reads against a Sui network."""
from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any

from .config import default_config, load_config
from .logging_setup import configure_logging
from .master import SuiMaster


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="suidouble",
        description="Read objects, events and balances from a Sui network",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: public full nodes, no file)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--chain",
        default=None,
        help="Chain name from config (default: config's default_chain)",
    )

    sub = parser.add_subparsers(dest="command")

    object_parser = sub.add_parser("object", help="Show one object")
    object_parser.add_argument("object_id", help="Object id")

    owned_parser = sub.add_parser("owned", help="List objects owned by an address")
    owned_parser.add_argument("owner", help="Owner address")
    owned_parser.add_argument(
        "--limit", type=int, default=None, help="Maximum number of objects to list"
    )

    events_parser = sub.add_parser("events", help="List events of a Move module")
    events_parser.add_argument("--package", required=True, help="Package id")
    events_parser.add_argument("--module", required=True, help="Module name")
    events_parser.add_argument(
        "--event-type", default=None, help="Event struct name (default: all events)"
    )
    events_parser.add_argument(
        "--limit", type=int, default=10, help="Maximum number of events (default: 10)"
    )

    balance_parser = sub.add_parser("balance", help="Show coin balance of an address")
    balance_parser.add_argument("owner", help="Owner address")
    balance_parser.add_argument(
        "--coin-type", default="sui", help="Coin type or symbol (default: sui)"
    )

    return parser


def _print_json(value: Any) -> None:
    print(json.dumps(value, indent=2, default=str))


def _object_summary(obj: Any) -> dict[str, Any]:
    return {
        "id": obj.address,
        "type": obj.type,
        "version": obj.version,
        "deleted": obj.is_deleted,
        "fields": obj.fields,
    }


async def _run(args: argparse.Namespace) -> None:
    """Execute the selected command."""
    configure_logging(args.log_level)
    config = load_config(args.config) if args.config else default_config()
    master = SuiMaster.from_config(config, chain=args.chain)

    if args.command == "object":
        obj = await master.get_object(args.object_id)
        _print_json(_object_summary(obj))
    elif args.command == "owned":
        response = await master.get_owned_objects(args.owner)
        rows: list[dict[str, Any]] = []
        await response.for_each(
            lambda obj: rows.append(_object_summary(obj)), max_count=args.limit
        )
        _print_json(rows)
    elif args.command == "events":
        if args.event_type:
            query: dict[str, Any] = {
                "MoveEventType": f"{args.package}::{args.module}::{args.event_type}"
            }
        else:
            query = {"MoveModule": {"package": args.package, "module": args.module}}
        response = await master.fetch_events(query, limit=args.limit)
        events: list[dict[str, Any]] = []
        await response.for_each(lambda event: events.append(event.data), max_count=args.limit)
        _print_json(events)
    elif args.command == "balance":
        coin = master.coins.get(args.coin_type)
        balance = await master.get_balance(args.coin_type, args.owner)
        _print_json({"coin_type": coin.coin_type, "owner": args.owner, "balance": balance})
    else:
        build_parser().print_help()
        sys.exit(1)


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    asyncio.run(_run(args))
