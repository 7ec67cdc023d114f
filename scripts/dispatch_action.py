#!/usr/bin/env python3
"""
Run one admin operation from the command line against the configured store.

Examples:
    python scripts/dispatch_action.py --list
    python scripts/dispatch_action.py banUser '{"userId": "u-42", "reason": "spam"}'
    STORE_BACKEND=memory python scripts/dispatch_action.py --seed scanUsers '{"filter": "ALL"}'
"""
import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

# Adjust path so imports resolve when running from project root
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from tutor_admin.core.exceptions import ActionError
from tutor_admin.deps import get_dispatcher, get_store

from seed_store import seed

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("dispatch_action")


async def main() -> int:
    parser = argparse.ArgumentParser(description="Dispatch one admin operation")
    parser.add_argument("name", nargs="?", help="Operation name, e.g. grantSubscription")
    parser.add_argument("arguments", nargs="?", default="{}", help="JSON arguments object")
    parser.add_argument("--list", action="store_true", help="Print the tool catalog and exit")
    parser.add_argument("--seed", action="store_true", help="Seed demo users and settings first")
    args = parser.parse_args()

    dispatcher = get_dispatcher()

    if args.list:
        print(json.dumps(dispatcher.tool_schemas(), indent=2))
        return 0

    if not args.name:
        parser.error("operation name is required unless --list is given")

    if args.seed:
        await seed(get_store())

    try:
        result = await dispatcher.execute_tool_call(args.name, args.arguments)
    except ActionError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1

    print(json.dumps(result, indent=2) if isinstance(result, list) else result)
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
