"""
CLI entry point for punch.

Usage:
    punch in
    punch out
    punch card [-w | -m]
"""
import argparse
import logging
import sys
from pathlib import Path

import config
from main import last_session, punch_in, punch_out
from utils.errors import PunchError, UsageError
from utils.helper import load_punches
from utils.report import card, card_month, card_week, format_duration, format_timestamp

__version__ = "0.1.0"


class PunchArgumentParser(argparse.ArgumentParser):
    def error(self, message):
        raise UsageError(f"{self.format_usage()}{self.prog}: error: {message}")


def build_parser() -> PunchArgumentParser:
    parser = PunchArgumentParser(prog="punch", description="A simple time tracker")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--file", type=Path, default=None,
                        help="Punch log to use (default: $PUNCH_LOG_FILE or ~/.punch/punch.log)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output to stderr")

    sub = parser.add_subparsers(dest="command", metavar="{in,out,card}")
    sub.required = True
    sub.add_parser("in", help="Punch in")
    sub.add_parser("out", help="Punch out")

    card_parser = sub.add_parser("card", help="Display the time card")
    span = card_parser.add_mutually_exclusive_group()
    span.add_argument("-w", "--week", action="store_true", help="Display summary for the week to date")
    span.add_argument("-m", "--mtd", action="store_true", help="Display summary for the month to date")
    return parser


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else config.get_log_level(),
        format=config.LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )


def dispatch(args) -> str:
    log_path = args.file or config.get_log_path()

    if args.command == "in":
        punch = punch_in(log_path)
        return f"Punched in at {format_timestamp(punch.timestamp)}"

    if args.command == "out":
        punch = punch_out(log_path)
        session = last_session(load_punches(log_path), punch.timestamp)
        return f"Punched out at {format_timestamp(punch.timestamp)} ({format_duration(session.duration)})"

    punches = load_punches(log_path)
    if args.week:
        return card_week(punches)
    if args.mtd:
        return card_month(punches)
    return card(punches)


def main(argv=None) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except UsageError as e:
        print(e, file=sys.stderr)
        return 2
    except SystemExit as e:
        # --help and --version
        return e.code or 0

    try:
        setup_logging(args.verbose)
        output = dispatch(args)
    except UsageError as e:
        print(f"punch: {e}", file=sys.stderr)
        return 2
    except PunchError as e:
        print(f"punch: {e}", file=sys.stderr)
        return 1

    print(output)
    return 0


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
