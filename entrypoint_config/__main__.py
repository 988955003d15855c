"""
Entry point for Entrypoint Config.

Usage:
    python -m entrypoint_config -e "Name:http Address::80" -e "Name:https Address::443 TLS"
    python -m entrypoint_config /path/to/entrypoints.conf --validate
    python -m entrypoint_config --help
"""

import argparse
import json
import sys

from . import __version__
from .config.loader import KNOWN_KEYS, ConfigError, ConfigLoader
from .config.schema import EntryPoints
from .logging import get_logger, setup_logging_from_args


logger = get_logger("main")


def load_entrypoints(loader: ConfigLoader, path: str | None, expressions: list[str]) -> EntryPoints:
    """Load the file first, then command line expressions on top of it."""
    entrypoints = EntryPoints()
    if path:
        loader.load_file(path, entrypoints)
    if expressions:
        loader.load_expressions(expressions, entrypoints, source="<command line>")
    return entrypoints


def validate_entrypoints(loader: ConfigLoader, entrypoints: EntryPoints) -> int:
    """Print warnings and a summary of the loaded entry points."""
    warnings = loader.validate(entrypoints)

    if warnings:
        print(f"Configuration warnings ({len(warnings)}):")
        for warning in warnings:
            print(f"  - {warning}")

    print(f"\nEntry points ({len(entrypoints)}):")
    for name, config in entrypoints.items():
        features = []
        if config.tls is not None:
            features.append("tls")
        if config.redirect is not None:
            features.append("redirect")
        if config.auth is not None:
            features.append("auth")
        if config.compress:
            features.append("compress")
        if config.proxy_protocol is not None:
            features.append("proxy-protocol")
        suffix = f" [{', '.join(features)}]" if features else ""
        print(f"  {name}: {config.address or '<no address>'}{suffix}")

    print("\nConfiguration is valid!")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="entrypoint-config",
        description="Compile entry point expressions into structured listener configuration",
    )

    parser.add_argument(
        "file",
        nargs="?",
        help="File with one entry point expression per line",
    )

    parser.add_argument(
        "-e", "--entrypoint",
        action="append",
        default=[],
        metavar="EXPR",
        help="Entry point expression, e.g. 'Name:http Address::80' (repeatable)",
    )

    parser.add_argument(
        "--validate",
        action="store_true",
        help="Validate entry points and exit",
    )

    parser.add_argument(
        "--list-keys",
        action="store_true",
        help="List recognized keys and exit",
    )

    parser.add_argument(
        "--indent",
        type=int,
        default=2,
        help="JSON indentation (default: 2)",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging (INFO level)",
    )

    parser.add_argument(
        "-d", "--debug",
        action="store_true",
        help="Enable debug logging (DEBUG level)",
    )

    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Quiet mode (only errors)",
    )

    parser.add_argument(
        "--log-file",
        metavar="PATH",
        help="Write logs to file",
    )

    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    setup_logging_from_args(
        verbose=args.verbose,
        debug=args.debug,
        quiet=args.quiet,
        log_file=args.log_file,
        colors=not args.no_color,
    )

    if args.list_keys:
        for key in KNOWN_KEYS:
            print(key)
        return 0

    if not args.file and not args.entrypoint:
        print("No entry point expressions given (use a file or --entrypoint)", file=sys.stderr)
        return 1

    loader = ConfigLoader()
    try:
        entrypoints = load_entrypoints(loader, args.file, args.entrypoint)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    if args.validate:
        return validate_entrypoints(loader, entrypoints)

    logger.debug(f"Rendering {len(entrypoints)} entry point(s)")
    print(json.dumps(entrypoints.to_dict(), indent=args.indent))
    return 0


if __name__ == "__main__":
    sys.exit(main())
