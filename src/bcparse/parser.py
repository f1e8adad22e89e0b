"""Ledger parser: directive dispatch and the file-level loop.

Grammar (simplified):
    file        = (directive | option | include | any_line)* EOF
    directive   = DATE WS (transaction | keyword_body EOL metadata)
    transaction = (FLAG | "txn") [WS STRING [WS STRING]] (WS tag_or_link)* EOL
                  metadata (posting | empty_line)*
    posting     = WS [FLAG WS] ACCOUNT [WS amount [WS cost] [WS price]] EOL metadata
    cost        = "{" [amount "," date | date "," amount | amount | date] "}"
    price       = "@@" amount | "@" amount
    option      = "option" WS STRING WS STRING EOL
    include     = "include" WS STRING EOL

Lines the grammar does not recognise (comments, blank lines, unknown
keywords) are skipped. A recognised keyword commits its directive, so a
malformed directive fails the whole parse.
"""

import logging
from collections.abc import Callable
from functools import lru_cache
from pathlib import Path
from typing import Any, NamedTuple

from . import ast, metadata
from .combinators import (
    Failure,
    Ok,
    Parser,
    Result,
    alt,
    cut,
    eof,
    many0,
    mapped,
    preceded,
    seq,
    space1,
    terminated,
    value,
)
from .config import ParseOptions
from .directives import directive_content, keyword
from .primitives import GRAMMAR_CACHE_SIZE, date, end_of_line, line, string
from .span import Span
from .transaction import transaction

logger = logging.getLogger(__name__)


class ParseError(Exception):
    def __init__(self, msg: str, line: int, col: int, offset: int = 0, byte_offset: int = 0):
        super().__init__(f"line {line}, col {col}: {msg}")
        self.msg = msg
        self.line = line
        self.col = col
        self.offset = offset
        self.byte_offset = byte_offset

    @classmethod
    def from_failure(cls, failure: Failure) -> "ParseError":
        span = failure.span
        msg = f"expected {failure.expected}" if failure.expected else "syntax error"
        text = span.current_line()
        if text:
            msg += f" in {text!r}"
        return cls(msg, span.line, span.column, span.offset, span.byte_offset)


class _Option(NamedTuple):
    name: str
    value: str


class _Include(NamedTuple):
    path: str


option = keyword(
    "option",
    mapped(
        terminated(seq(string, preceded(space1, string)), cut(end_of_line)),
        lambda pair: _Option(*pair),
    ),
)
include = keyword("include", mapped(terminated(string, cut(end_of_line)), _Include))


@lru_cache(maxsize=GRAMMAR_CACHE_SIZE)
def directive(number_type: Callable[[str], Any]) -> Parser:
    """Date, whitespace, then the first directive keyword that matches.

    Fails softly when no keyword matches so the line can be skipped.
    """
    other = mapped(
        seq(directive_content(number_type), cut(end_of_line), cut(metadata.block(number_type))),
        lambda parts: (parts[0], parts[2]),
    )
    dated = seq(date, space1, alt(transaction(number_type), other))

    def parse(span: Span) -> Result:
        result = dated(span)
        if isinstance(result, Failure):
            return result
        directive_date, _, (content, meta) = result.value
        return Ok(
            result.span,
            ast.Directive(date=directive_date, content=content, metadata=meta, line=span.line),
        )

    return parse


def _build_ledger(entries: list) -> ast.Ledger:
    directives = []
    options = {}
    includes = []
    for entry in entries:
        if isinstance(entry, ast.Directive):
            directives.append(entry)
        elif isinstance(entry, _Option):
            options[entry.name] = entry.value
        elif isinstance(entry, _Include):
            includes.append(entry.path)
    return ast.Ledger(directives=tuple(directives), options=options, includes=tuple(includes))


@lru_cache(maxsize=GRAMMAR_CACHE_SIZE)
def ledger(number_type: Callable[[str], Any]) -> Parser:
    entry = alt(directive(number_type), option, include, value(None, line))
    return mapped(terminated(many0(entry), eof), _build_ledger)


def parse(source: str, options: ParseOptions | None = None) -> ast.Ledger:
    """Parse ledger source text into a ``Ledger``.

    Raises:
        ParseError: at the first position where no rule could continue.
    """
    if options is None:
        options = ParseOptions()
    result = ledger(options.number_type)(Span(source))
    if isinstance(result, Failure):
        error = ParseError.from_failure(result)
        logger.debug("parse failed: %s", error)
        raise error
    logger.debug(
        "parsed %d directives from %d characters",
        len(result.value.directives),
        len(source),
    )
    return result.value


def parse_file(filepath: str | Path, options: ParseOptions | None = None) -> ast.Ledger:
    """Parse a ledger file (UTF-8, optional BOM)."""
    filepath = Path(filepath)
    source = filepath.read_text(encoding="utf-8-sig")
    logger.debug("loaded %s", filepath)
    return parse(source, options)
