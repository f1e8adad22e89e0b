"""Lexical building blocks: dates, accounts, currencies, numbers, strings,
comments and line ends.
"""

import datetime
import re
from collections.abc import Callable
from functools import lru_cache
from typing import Any

from .ast import Account, Amount, Currency
from .combinators import (
    Failure,
    Ok,
    Parser,
    Result,
    alt,
    eof,
    line_ending,
    mapped,
    not_line_ending,
    opt,
    regex,
    satisfy,
    separated_pair,
    seq,
    space0,
    space1,
    tag,
)
from .span import Span

# Bound on the per-numeric-type grammar caches
GRAMMAR_CACHE_SIZE = 16

ACCOUNT_TYPES = ("Assets", "Liabilities", "Equity", "Income", "Expenses")

DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")
NUMBER_PATTERN = r"[-+]?(?:(?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d+)?|\.\d+)"
STRING_RE = re.compile(r'"((?:[^"\\\r\n]|\\.)*)"')

_account = regex(
    r"(?:%s)(?::[A-Z0-9][A-Za-z0-9-]*)+" % "|".join(ACCOUNT_TYPES),
    expected="account",
)
_currency = regex(r"[A-Z](?:[A-Z0-9'._-]*[A-Z0-9])?", expected="currency")
_number = regex(NUMBER_PATTERN, expected="number")


def date(span: Span) -> Result:
    """Parse a ``YYYY-MM-DD`` date. Impossible dates fail like any mismatch."""
    m = DATE_RE.match(span.source, span.offset)
    if m is None:
        return Failure(span, expected="date")
    try:
        parsed = datetime.date.fromisoformat(m.group(0))
    except ValueError:
        return Failure(span, expected="valid date")
    rest, _ = span.take(len(m.group(0)))
    return Ok(rest, parsed)


def account(span: Span) -> Result:
    return mapped(_account, Account)(span)


def currency(span: Span) -> Result:
    return mapped(_currency, Currency)(span)


def string(span: Span) -> Result:
    """Parse a double-quoted string on a single line; ``\\`` escapes."""
    m = STRING_RE.match(span.source, span.offset)
    if m is None:
        return Failure(span, expected="string")
    rest, _ = span.take(m.end() - m.start())
    return Ok(rest, re.sub(r"\\(.)", r"\1", m.group(1)))


@lru_cache(maxsize=GRAMMAR_CACHE_SIZE)
def number(number_type: Callable[[str], Any]) -> Parser:
    """Numeric literal converted with ``number_type`` (thousands commas dropped)."""

    def parse(span: Span) -> Result:
        result = _number(span)
        if isinstance(result, Failure):
            return result
        try:
            converted = number_type(result.value.replace(",", ""))
        except (ValueError, ArithmeticError):
            return Failure(span, expected="number")
        return Ok(result.span, converted)

    return parse


@lru_cache(maxsize=GRAMMAR_CACHE_SIZE)
def amount(number_type: Callable[[str], Any]) -> Parser:
    """``<number> <currency>``."""
    return mapped(
        separated_pair(number(number_type), space1, currency),
        lambda pair: Amount(value=pair[0], currency=pair[1]),
    )


# ---------------------------------------------------------------------------
# Comments and line structure
# ---------------------------------------------------------------------------

comment = seq(tag(";"), not_line_ending)

# Trailing whitespace and comment, then newline or end of input
end_of_line = seq(space0, opt(comment), alt(line_ending, eof))

# Blank or comment-only line; always consumes a newline
empty_line = seq(space0, opt(comment), line_ending)

# Any line at all, used to skip what the grammar does not recognise
line = seq(not_line_ending, alt(line_ending, eof))

# ";" always starts a comment, never a flag
flag = satisfy(
    lambda c: not ("a" <= c <= "z") and not c.isspace() and c != ";",
    expected="flag",
)


def word(name: str) -> Parser:
    """Keyword ``name`` as a whole word: ``opened`` is not ``open``."""
    return regex(rf"{name}(?![A-Za-z0-9_-])", expected=repr(name))
