#!/usr/bin/env python3
"""
Standalone callsign lookup against a country file.

Usage:
    python scripts/lookup_callsign.py 9V1AAA DL1ABC
    python scripts/lookup_callsign.py --file /path/to/cty.dat 9V1AAA
    python scripts/lookup_callsign.py --fetch 9V1AAA
"""

import asyncio
import logging
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import config
from cty_client import fetch_table
from cty_loader import load_table
from cty_lookup import lookup

logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def format_result(callsign, result) -> str:
    if result is None:
        return f"{callsign}: no match"
    return (
        f"{result.callsign}: {result.name} ({result.primary_prefix}) "
        f"{result.continent} CQ {result.cq_zone} ITU {result.itu_zone} "
        f"{result.latitude:.2f}/{result.longitude:.2f} UTC {result.utc_offset:+.1f} "
        f"[matched {result.matched_prefix}{' exact' if result.exact_match else ''}]"
    )


async def main(argv) -> int:
    """Look up each callsign given on the command line."""
    args = list(argv)
    path = None
    fetch = False

    if args and args[0] == "--file" and len(args) > 1:
        path = args[1]
        args = args[2:]
    elif args and args[0] == "--fetch":
        fetch = True
        args = args[1:]

    if not args:
        print(__doc__)
        return 2

    table = await fetch_table() if fetch else load_table(path)

    misses = 0
    for callsign in args:
        result = lookup(table, callsign)
        if result is None:
            misses += 1
        print(format_result(callsign.upper(), result))

    if misses:
        logger.info(f"{misses} of {len(args)} callsigns did not resolve")
    return 1 if misses else 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main(sys.argv[1:])))
