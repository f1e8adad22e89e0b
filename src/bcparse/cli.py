"""Command-line front end.

Usage:
    python -m bcparse ledger.beancount
    python -m bcparse --number float --json ledger.beancount
    python -m bcparse --config bcparse.yaml ledger.beancount
"""

import argparse
import logging
import sys
from collections import Counter

from .config import ConfigError, ParseOptions, load_options
from .parser import ParseError, parse_file

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for ``python -m bcparse``."""
    parser = argparse.ArgumentParser(
        prog="bcparse", description="Parse a Beancount ledger and report its directives"
    )
    parser.add_argument("file", help="Ledger file to parse")
    parser.add_argument("--config", help="YAML options file")
    parser.add_argument(
        "--number",
        choices=["decimal", "float", "fraction"],
        help="Numeric type for amounts (overrides --config)",
    )
    parser.add_argument("--json", action="store_true", help="Print the parsed ledger as JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        options = load_options(args.config) if args.config else ParseOptions()
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    if args.number:
        options = options.model_copy(update={"number": args.number})

    try:
        ledger = parse_file(args.file, options)
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ParseError as e:
        logger.debug("parse of %s failed at offset %d", args.file, e.offset)
        print(f"{args.file}:{e.line}:{e.col}: {e.msg}", file=sys.stderr)
        return 1

    if args.json:
        print(ledger.model_dump_json(indent=2))
        return 0

    counts = Counter(d.content.type for d in ledger.directives)
    print(f"Parsed {len(ledger.directives)} directives from {args.file}")
    for kind, count in sorted(counts.items()):
        print(f"  {kind}: {count}")
    if ledger.includes:
        print(f"  includes: {', '.join(ledger.includes)}")
    return 0
