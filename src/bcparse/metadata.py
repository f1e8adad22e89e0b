"""Indented ``key: value`` lines attached to a directive or posting.

    2024-01-10 * "Coffee"
      receipt: "r-1042"
      Expenses:Food   4.50 USD
        location: Assets:Wallet

Values are tried in order: string, date, account, TRUE/FALSE, amount,
number, currency. An empty value is allowed and yields ``None``.
"""

from collections.abc import Callable
from functools import lru_cache
from typing import Any

from .combinators import (
    Parser,
    alt,
    cut,
    many0,
    mapped,
    opt,
    preceded,
    regex,
    seq,
    space0,
    space1,
    tag,
    value,
)
from .primitives import (
    GRAMMAR_CACHE_SIZE,
    account,
    amount,
    currency,
    date,
    end_of_line,
    number,
    string,
)

_key = regex(r"[a-z][A-Za-z0-9_-]*", expected="metadata key")
_bool = alt(
    value(True, regex(r"TRUE(?![A-Za-z0-9'._-])")),
    value(False, regex(r"FALSE(?![A-Za-z0-9'._-])")),
)


@lru_cache(maxsize=GRAMMAR_CACHE_SIZE)
def metadata_value(number_type: Callable[[str], Any]) -> Parser:
    return alt(
        string,
        date,
        account,
        _bool,
        amount(number_type),
        number(number_type),
        currency,
    )


@lru_cache(maxsize=GRAMMAR_CACHE_SIZE)
def entry(number_type: Callable[[str], Any]) -> Parser:
    """One metadata line. Everything after ``key:`` is committed."""
    return mapped(
        seq(
            preceded(space1, _key),
            tag(":"),
            cut(preceded(space0, opt(metadata_value(number_type)))),
            cut(end_of_line),
        ),
        lambda parts: (parts[0], parts[2]),
    )


@lru_cache(maxsize=GRAMMAR_CACHE_SIZE)
def block(number_type: Callable[[str], Any]) -> Parser:
    """Zero or more metadata lines, returned as an insertion-ordered dict."""
    return mapped(many0(entry(number_type)), dict)
