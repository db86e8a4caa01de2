"""
ssh-mcp command line entry point.

Reads one request envelope from stdin and writes one response envelope to
stdout. Diagnostics go to stderr so stdout stays machine-readable.
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from dotenv import load_dotenv

from .base import FATAL_CODES
from .config import VERSION, Settings
from .dispatcher import Dispatcher

logger = logging.getLogger(__name__)

EPILOG = """\
examples:
  echo '{"tool":"system.info","args":{"verbose":true}}' | ssh-mcp
  ssh-mcp --list
  ssh-mcp --describe system.info
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ssh-mcp",
        description=(
            "Machine Chat Protocol: read a JSON request from stdin and print a "
            "JSON response envelope."
        ),
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--list", action="store_true", help="list available tools")
    group.add_argument("--describe", metavar="TOOL", help="show details for a specific tool")
    group.add_argument(
        "--version", action="version", version=f"ssh-mcp version {VERSION}"
    )
    return parser


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def main(argv: Optional[List[str]] = None, settings: Optional[Settings] = None) -> int:
    args = build_parser().parse_args(argv)

    if settings is None:
        load_dotenv()
        settings = Settings.from_env()
    configure_logging(settings.log_level)

    dispatcher = Dispatcher(settings)

    if args.list:
        response = asyncio.run(dispatcher.call("meta.discover"))
    elif args.describe is not None:
        response = asyncio.run(dispatcher.call("meta.describe", {"tool": args.describe}))
    else:
        payload = sys.stdin.buffer.read()
        response = asyncio.run(dispatcher.handle(payload))

    sys.stdout.write(response.to_json() + "\n")
    sys.stdout.flush()

    if response.error is not None and response.error.code in FATAL_CODES:
        return 1
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
