"""Command-line front door for appshelf.

Parses CLI options, configures logging, and loads the launcher config.
Then either prints a computed layout or starts the interactive session.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from . import config as shelf_config
from .errors import ConfigError, ExitCode, ShelfError, user_facing_error
from .geometry import ShelfGeometry
from .logging import configure_logging, default_log_path
from .render import describe_layout
from .runtime import run_shelf

logger = logging.getLogger(__name__)


def _terminal_size(value: str) -> tuple[int, int]:
    """argparse type for ``COLSxROWS`` terminal sizes."""
    cols_s, sep, rows_s = value.lower().partition("x")
    if not sep:
        raise argparse.ArgumentTypeError(f"expected COLSxROWS, got {value!r}")
    try:
        columns = int(cols_s)
        rows = int(rows_s)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid terminal size: {value!r}") from exc
    if columns <= 0 or rows <= 0:
        raise argparse.ArgumentTypeError("terminal size must be >= 1x1")
    return columns, rows


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Show a grid of app icons in the terminal and launch apps on click."
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help=f"Path to config JSON (default: {shelf_config.CONFIG_PATH}).",
    )
    parser.add_argument("--log-level", default="INFO", help="DEBUG, INFO, WARN or ERROR.")
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help=f"Log file path (default: {default_log_path()}).",
    )
    parser.add_argument(
        "--layout",
        metavar="COLSxROWS",
        type=_terminal_size,
        default=None,
        help="Print the grid layout for a terminal of this size and exit.",
    )
    parser.add_argument(
        "--init-config",
        action="store_true",
        help="Write a default config file if none exists and exit.",
    )
    return parser


def _run(args: argparse.Namespace) -> None:
    if args.init_config:
        written = shelf_config.save_default_config(args.config)
        sys.stdout.write(f"{written}\n")
        return

    if args.config is not None and not args.config.exists():
        raise ConfigError(f"Config not found: {args.config}", hint="run with --init-config to create it")
    cfg = shelf_config.load_config(args.config)

    if args.layout is not None:
        columns, rows = args.layout
        geometry = ShelfGeometry.for_config(cfg, columns, rows)
        names = [app.name for app in cfg.display_apps()]
        sys.stdout.write("\n".join(describe_layout(geometry, names)) + "\n")
        return

    if not sys.stdin.isatty() or not sys.stdout.isatty():
        raise ShelfError(
            "appshelf needs an interactive terminal",
            ExitCode.INVALID_ARGS,
            hint="run it in a terminal or use --layout",
        )
    run_shelf(cfg)


def main() -> None:
    """Parse CLI arguments and launch the shelf."""
    args = build_parser().parse_args()
    if args.layout is not None or args.init_config:
        configure_logging(args.log_level, sys.stderr, log_file=args.log_file)
    else:
        configure_logging(args.log_level, log_file=args.log_file or default_log_path())

    try:
        _run(args)
    except ShelfError as exc:
        logger.error("%s", exc)
        sys.stderr.write(user_facing_error(exc.message, hint=exc.hint) + "\n")
        raise SystemExit(int(exc.code)) from exc


if __name__ == "__main__":
    main()
