"""Bodies of the non-transaction directives.

Each parser starts at the keyword. Once the keyword matches the body is
committed; the caller handles the line end and metadata.

    2024-01-01 open Assets:Bank:Checking USD,EUR "STRICT"
    2024-12-31 close Assets:Bank:Checking
    2024-02-01 balance Assets:Bank:Checking 1200.00 USD
    2024-01-02 pad Assets:Bank:Checking Equity:Opening-Balances
    2024-01-03 price VACHR 38.46 USD
    2024-01-01 commodity VACHR
    2024-01-04 event "location" "Paris, France"
    2024-01-05 note Assets:Bank:Checking "Called about the fee"
"""

from collections.abc import Callable
from functools import lru_cache
from typing import Any

from .ast import Balance, Close, Commodity, Event, Note, Open, Pad, Price
from .combinators import (
    Parser,
    alt,
    cut,
    delimited,
    many0,
    mapped,
    opt,
    preceded,
    separated_pair,
    seq,
    space0,
    space1,
    tag,
)
from .primitives import GRAMMAR_CACHE_SIZE, account, amount, currency, string, word


def keyword(name: str, body: Parser) -> Parser:
    """Whole-word ``name``, whitespace and a committed ``body``.

    A longer word such as ``opened`` or ``optional`` does not match, so the
    line fails softly and is skipped.
    """
    return preceded(word(name), cut(preceded(space1, body)))


currencies = mapped(
    seq(currency, many0(preceded(delimited(space0, tag(","), space0), currency))),
    lambda parts: (parts[0], *parts[1]),
)

open_ = keyword(
    "open",
    mapped(
        seq(account, opt(preceded(space1, currencies)), opt(preceded(space1, string))),
        lambda parts: Open(account=parts[0], currencies=parts[1] or (), booking=parts[2]),
    ),
)

close = keyword("close", mapped(account, lambda a: Close(account=a)))

pad = keyword(
    "pad",
    mapped(
        separated_pair(account, space1, account),
        lambda pair: Pad(account=pair[0], source_account=pair[1]),
    ),
)

commodity = keyword("commodity", mapped(currency, lambda c: Commodity(currency=c)))

event = keyword(
    "event",
    mapped(separated_pair(string, space1, string), lambda pair: Event(name=pair[0], value=pair[1])),
)

note = keyword(
    "note",
    mapped(separated_pair(account, space1, string), lambda pair: Note(account=pair[0], comment=pair[1])),
)


@lru_cache(maxsize=GRAMMAR_CACHE_SIZE)
def balance(number_type: Callable[[str], Any]) -> Parser:
    return keyword(
        "balance",
        mapped(
            separated_pair(account, space1, amount(number_type)),
            lambda pair: Balance(account=pair[0], amount=pair[1]),
        ),
    )


@lru_cache(maxsize=GRAMMAR_CACHE_SIZE)
def price(number_type: Callable[[str], Any]) -> Parser:
    return keyword(
        "price",
        mapped(
            separated_pair(currency, space1, amount(number_type)),
            lambda pair: Price(currency=pair[0], amount=pair[1]),
        ),
    )


@lru_cache(maxsize=GRAMMAR_CACHE_SIZE)
def directive_content(number_type: Callable[[str], Any]) -> Parser:
    """Every non-transaction directive, in dispatch order."""
    return alt(
        open_,
        close,
        balance(number_type),
        pad,
        price(number_type),
        commodity,
        event,
        note,
    )
