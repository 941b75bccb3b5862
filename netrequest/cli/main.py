from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from netrequest.cli.client_cmds import HANDLED_ERRORS, register_client_commands


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="netrequest", description="Build and send HTTP requests")
    parser.add_argument(
        "--log-level",
        default="warning",
        choices=["debug", "info", "warning", "error"],
        help="Logging level",
    )
    sub = parser.add_subparsers(dest="cmd", required=True)
    register_client_commands(sub)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    try:
        return int(args.func(args))
    except HANDLED_ERRORS as e:
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
