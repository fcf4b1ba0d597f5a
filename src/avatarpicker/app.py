"""Avatar picker headless entry point.

Loads a catalog and every body it lists, applies the requested
selection and prints the inventory data of the visible parts.

Examples:
    avatarpicker assets/data.json
    avatarpicker assets/data.json --sex female --body 2 --item female_dress_1
"""

import argparse
import asyncio
import json
import logging
import sys

from avatarpicker.core.errors import ConfigError
from avatarpicker.session import AvatarSession


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Compose an avatar from a catalog and publish its inventory data",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("config", help="Catalog JSON file (or its directory)")
    parser.add_argument("--sex", help="Switch to this sex after defaults are applied")
    parser.add_argument("--body", help="Body number")
    parser.add_argument("--head", help="Head number")
    parser.add_argument("--item", action="append", default=[],
                        help="Item to wear (repeatable)")
    parser.add_argument("--remove", action="append", default=[],
                        help="Item location to strip (repeatable)")
    parser.add_argument("--skin", help="Skin to apply")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Log every asset load")
    return parser


def apply_selection(session: AvatarSession, args: argparse.Namespace) -> None:
    if args.sex:
        session.set_sex(args.sex)
    if args.body:
        session.set_body_by_body_number(args.body)
    if args.head:
        session.set_body_by_head_number(args.head)
    for location in args.remove:
        session.remove_item_by_location(location)
    for item in args.item:
        session.set_item_by_name(item)
    if args.skin:
        session.set_skin_by_name(args.skin)


async def run(args: argparse.Namespace) -> dict:
    session = AvatarSession.from_config(args.config)
    await session.run()
    apply_selection(session, args)
    return {
        "inventory": session.publish(),
        "complete": session.is_complete,
        "ready": session.is_ready,
        "failed_bodies": list(session.pipeline.failed),
        "selection": session.describe(),
    }


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(name)s: %(message)s",
    )
    try:
        result = asyncio.run(run(args))
    except ConfigError as e:
        logging.getLogger(__name__).error("Invalid catalog: %s", e)
        return 2
    print(json.dumps(result, indent=2))
    return 0 if result["complete"] else 1


if __name__ == "__main__":
    sys.exit(main())
