"""
Command line tool for storage discovery.

Usage:
    rs-discover alice@surfnet.nl
    rs-discover bob@iriscouch.com --log-level DEBUG --log-format json

Prints the guessed storage info as JSON. Exits with status 1 and the reason
on stderr when no guess can be made.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from .config import ObservabilityConfig
from .discovery import guess_storage_info
from .errors import DiscoveryError
from .logging_setup import setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rs-discover",
        description="Guess the remoteStorage endpoint of a user address",
    )
    parser.add_argument("user_address", help="Address of the form user@host")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ERROR")
    parser.add_argument("--log-format", default=None, choices=["text", "json"])
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the discovery tool.

    Returns:
        Process exit code
    """
    args = build_parser().parse_args(argv)

    overrides = {}
    if args.log_level:
        overrides["log_level"] = args.log_level
    if args.log_format:
        overrides["log_format"] = args.log_format
    setup_logging(ObservabilityConfig(**overrides))

    try:
        info = guess_storage_info(args.user_address)
    except DiscoveryError as e:
        logger.info("Discovery failed", extra={"user_address": args.user_address})
        print(e.message, file=sys.stderr)
        return 1

    print(json.dumps(info.to_dict(), indent=2, sort_keys=True))
    return 0


if __name__ == "__main__":
    sys.exit(main())
