#!/usr/bin/env python3
"""
ical-filter - HTTP daemon that fetches iCalendar feeds, normalizes them to
UTC and filters their events by title.

This is the main entry point for the server.
"""

import sys
import argparse
from dataclasses import replace
from pathlib import Path

import uvicorn

from icalfilter.config import Config
from icalfilter.errors import ConfigError
from icalfilter.logging_setup import get_logger, setup_logging
from icalfilter.web import create_app


EXAMPLE_CONFIG = """
[Server]
host = "127.0.0.1"
port = 8080

[Logging]
level = "INFO"
format = "console"

[Upstream]
timeout = 30
"""


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="ical-filter - normalize and filter iCalendar feeds over HTTP"
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        help="Path to configuration file (default: auto-detect)"
    )
    parser.add_argument("--host", help="Listen address (overrides config)")
    parser.add_argument("--port", type=int, help="Listen port (overrides config)")
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )
    return parser.parse_args(argv)


def load_config(args) -> Config:
    """Load configuration and apply command line overrides."""
    config = Config.load(args.config)
    if args.host:
        config = replace(config, host=args.host)
    if args.port:
        config = replace(config, port=args.port)
    if args.debug:
        config = replace(config, log_level="DEBUG")
    return config


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)

    try:
        config = load_config(args)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        print("\nExample configuration:", file=sys.stderr)
        print(EXAMPLE_CONFIG, file=sys.stderr)
        sys.exit(1)
    except ConfigError as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        sys.exit(1)

    setup_logging(config.log_level, config.log_format)
    logger = get_logger("ical_filter")
    logger.info("starting_up", socketaddr=config.socketaddr)

    uvicorn.run(
        create_app(config),
        host=config.host,
        port=config.port,
        log_config=None,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
