"""CLI for window acquisition: python -m wintarget"""

from __future__ import annotations

import argparse
import logging
import sys

import wintarget
from wintarget.config import load_config
from wintarget.errors import ConfigurationError, WinTargetError

EXIT_FAILURE = 1
EXIT_CONFIG = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wintarget",
        description="Acquire an application's top-level window by title pattern",
    )
    parser.add_argument(
        "command",
        nargs="?",
        default="run",
        choices=["run", "count"],
        help="run: launch/attach, wait for and focus the window (default); "
        "count: print the number of running instances",
    )
    parser.add_argument("--config", type=str, default=None, help="JSON settings file")
    parser.add_argument("--exe", type=str, default=None, help="Executable path")
    parser.add_argument("--args", type=str, default=None, help="Executable arguments")
    parser.add_argument("--pattern", type=str, default=None, help="Window title regex")
    parser.add_argument(
        "--backend",
        type=str,
        default=None,
        help="Accessibility backend: auto, win32 or uia (default: auto)",
    )
    parser.add_argument("--timeout-ms", type=int, default=None, help="Total wait budget")
    parser.add_argument("--poll-ms", type=int, default=None, help="Delay between polls")
    parser.add_argument(
        "--all-windows",
        action="store_true",
        help="count: count every matching window instead of distinct processes",
    )
    parser.add_argument("--verbose", action="store_true", help="Log per-poll diagnostics")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )

    try:
        config = load_config(
            args.config,
            overrides={
                "executablePath": args.exe,
                "executableArguments": args.args,
                "windowTitlePattern": args.pattern,
                "backend": args.backend,
                "waitTimeoutMs": args.timeout_ms,
                "pollIntervalMs": args.poll_ms,
            },
        )

        if args.command == "count":
            count = wintarget.count_instances_by_title_regex(
                config.title_regex,
                not args.all_windows,
                backend=config.backend,
            )
            print(count)
            return 0

        window = wintarget.run_once(config)
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return EXIT_CONFIG
    except (WinTargetError, RuntimeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_FAILURE

    print(f'Acquired "{window.title}" handle={window.handle} pid={window.pid}')
    return 0


if __name__ == "__main__":
    sys.exit(main())
