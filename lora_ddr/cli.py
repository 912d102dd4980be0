"""Command-line interface for lora-ddr."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from . import constants
from .app import LoraDDRApp, StartupError
from .config import ConfigError, load_config, render_config

LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=constants.APP_NAME,
        description="Dynamic data rate bridge between a LoRaWAN network server and a DDR service",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=constants.DEFAULT_CONFIG_PATH,
        help=f"Path to configuration file (default: {constants.DEFAULT_CONFIG_PATH})",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("start", help="Start the ddr monitor")
    subparsers.add_parser(
        "config", help="Print the lora-ddr configuration file"
    )

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigError as exc:
        LOGGER.error("Invalid configuration in %s: %s", args.config, exc)
        return 1

    if args.command == "config":
        sys.stdout.write(render_config(config))
        return 0

    if args.command == "start":
        if not config.path.exists():
            LOGGER.error(
                "no config file found (run '%s config > %s')",
                constants.APP_NAME,
                config.path,
            )
            return 1
        try:
            LoraDDRApp.start(config)
        except StartupError as exc:
            LOGGER.error("%s", exc)
            return 1
        return 0

    LOGGER.error("Unknown command: %s", args.command)
    return 1


if __name__ == "__main__":
    sys.exit(main())
