"""Transaction grammar: header, tags and links, postings, cost and price.

Example:
    2022-05-22 * "Grocery store" "Grocery shopping" #food ^receipt-22
      Assets:Cash           -10 CHF
      Expenses:Groceries

Once the flag (or ``txn``) is read the rest of the transaction is committed:
a malformed header or posting is a parse error, never a skipped line.
"""

from collections.abc import Callable
from functools import lru_cache
from typing import Any

from . import metadata
from .ast import Cost, Link, Posting, Tag, TotalPrice, Transaction, UnitPrice
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
    success,
    tag,
    take_while,
    terminated,
    value,
)
from .primitives import (
    GRAMMAR_CACHE_SIZE,
    account,
    amount,
    date,
    empty_line,
    end_of_line,
    flag,
    string,
    word,
)


def _is_tag_char(c: str) -> bool:
    return (c.isascii() and c.isalnum()) or c in "-_"


# Tags and links
parse_tag = mapped(preceded(tag("#"), take_while(_is_tag_char)), Tag)
parse_link = mapped(preceded(tag("^"), take_while(_is_tag_char)), Link)
tag_or_link = alt(parse_tag, parse_link)


def _collect_tags_and_links(items: list[Tag | Link]) -> tuple[frozenset[Tag], frozenset[Link]]:
    tags = frozenset(item for item in items if isinstance(item, Tag))
    links = frozenset(item for item in items if isinstance(item, Link))
    return tags, links


tags_and_links = mapped(many0(preceded(space1, tag_or_link)), _collect_tags_and_links)


def _payee_and_narration(pair: tuple[str, str | None]) -> tuple[str | None, str]:
    first, second = pair
    if second is None:
        return None, first
    return first, second


payee_and_narration = mapped(
    seq(string, opt(preceded(space1, string))),
    _payee_and_narration,
)


@lru_cache(maxsize=GRAMMAR_CACHE_SIZE)
def cost(number_type: Callable[[str], Any]) -> Parser:
    """``{ ... }`` cost basis.

    Alternatives are tried in order: amount-date, date-amount, amount, date,
    empty. The empty alternative always succeeds so ``{}`` parses.
    """
    amt = amount(number_type)
    comma = delimited(space0, tag(","), space0)
    body = alt(
        separated_pair(amt, comma, date),
        mapped(separated_pair(date, comma, amt), lambda pair: (pair[1], pair[0])),
        mapped(amt, lambda a: (a, None)),
        mapped(date, lambda d: (None, d)),
        success((None, None)),
    )
    return mapped(
        delimited(terminated(tag("{"), space0), body, preceded(space0, tag("}"))),
        lambda pair: Cost(amount=pair[0], date=pair[1]),
    )


@lru_cache(maxsize=GRAMMAR_CACHE_SIZE)
def price(number_type: Callable[[str], Any]) -> Parser:
    """``@@ <amount>`` (total) or ``@ <amount>`` (per unit)."""
    amt = amount(number_type)
    return alt(
        mapped(preceded(seq(tag("@@"), space0), amt), lambda a: TotalPrice(amount=a)),
        mapped(preceded(seq(tag("@"), space0), amt), lambda a: UnitPrice(amount=a)),
    )


def _build_posting(parts: tuple) -> Posting:
    _, posting_flag, posting_account, (amounts, _, meta) = parts
    posting_amount, posting_cost, posting_price = amounts or (None, None, None)
    return Posting(
        flag=posting_flag,
        account=posting_account,
        amount=posting_amount,
        cost=posting_cost,
        price=posting_price,
        metadata=meta,
    )


@lru_cache(maxsize=GRAMMAR_CACHE_SIZE)
def posting(number_type: Callable[[str], Any]) -> Parser:
    """One indented posting line plus its metadata.

    The amount, cost and price are optional as a unit: cost and price are
    only looked for after an amount. Everything after the account is
    committed.
    """
    amounts = seq(
        preceded(space1, amount(number_type)),
        opt(preceded(space1, cost(number_type))),
        opt(preceded(space1, price(number_type))),
    )
    return mapped(
        seq(
            space1,
            opt(terminated(flag, space1)),
            account,
            cut(seq(opt(amounts), end_of_line, metadata.block(number_type))),
        ),
        _build_posting,
    )


def _build_transaction(parts: tuple) -> tuple[Transaction, dict[str, Any]]:
    txn_flag, (names, (tags, links), _, meta, postings) = parts
    payee, narration = names or (None, None)
    txn = Transaction(
        flag=txn_flag,
        payee=payee,
        narration=narration,
        tags=tags,
        links=links,
        postings=tuple(p for p in postings if p is not None),
    )
    return txn, meta


trigger = alt(flag, value(None, word("txn")))


@lru_cache(maxsize=GRAMMAR_CACHE_SIZE)
def transaction(number_type: Callable[[str], Any]) -> Parser:
    """Transaction body after the date; yields ``(Transaction, metadata)``.

    Consumes its own header line end, the directive metadata and the run of
    postings, stopping before the first line that is neither a posting nor
    blank/comment-only.
    """
    body = seq(
        opt(preceded(space1, payee_and_narration)),
        tags_and_links,
        end_of_line,
        metadata.block(number_type),
        many0(alt(value(None, empty_line), posting(number_type))),
    )
    return mapped(seq(trigger, cut(body)), _build_transaction)
