"""Parser combinators over ``Span``.

A parser is any callable ``Span -> Ok | Failure``. Failures come in two
kinds:

- soft (``committed=False``): the parser did not match here. ``alt`` moves on
  to its next branch, ``opt`` yields ``None``, ``many0`` stops.
- hard (``committed=True``): produced by ``cut`` once a keyword has been
  recognised. Every combinator passes it straight up; nothing retries.

Example:
    pair = separated_pair(regex(r"\\d+"), tag(","), regex(r"\\d+"))
    result = pair(Span("12,34"))
    assert result.value == ("12", "34")
"""

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from .span import Span

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    span: Span
    value: T


@dataclass(frozen=True, slots=True)
class Failure:
    span: Span
    committed: bool = False
    expected: str = ""

    def commit(self) -> "Failure":
        return Failure(self.span, True, self.expected)


Result = Ok[Any] | Failure
Parser = Callable[[Span], Result]

HSPACE = " \t"


# ---------------------------------------------------------------------------
# Leaf parsers
# ---------------------------------------------------------------------------


def tag(literal: str) -> Parser:
    """Match an exact literal."""

    def parse(span: Span) -> Result:
        if span.startswith(literal):
            rest, text = span.take(len(literal))
            return Ok(rest, text)
        return Failure(span, expected=repr(literal))

    return parse


def satisfy(predicate: Callable[[str], bool], expected: str) -> Parser:
    """Match a single character accepted by ``predicate``."""

    def parse(span: Span) -> Result:
        c = span.peek()
        if c and predicate(c):
            rest, text = span.take(1)
            return Ok(rest, text)
        return Failure(span, expected=expected)

    return parse


def take_while(predicate: Callable[[str], bool]) -> Parser:
    """Match zero or more characters accepted by ``predicate``. Never fails."""

    def parse(span: Span) -> Result:
        source = span.source
        end = span.offset
        while end < len(source) and predicate(source[end]):
            end += 1
        rest, text = span.take(end - span.offset)
        return Ok(rest, text)

    return parse


def take_while1(predicate: Callable[[str], bool], expected: str) -> Parser:
    inner = take_while(predicate)

    def parse(span: Span) -> Result:
        result = inner(span)
        if not result.value:
            return Failure(span, expected=expected)
        return result

    return parse


def regex(pattern: str, expected: str | None = None) -> Parser:
    """Match a regular expression anchored at the current position."""
    compiled = re.compile(pattern)
    label = expected or f"/{pattern}/"

    def parse(span: Span) -> Result:
        m = compiled.match(span.source, span.offset)
        if m is None:
            return Failure(span, expected=label)
        rest, text = span.take(m.end() - m.start())
        return Ok(rest, text)

    return parse


def space0(span: Span) -> Result:
    return take_while(lambda c: c in HSPACE)(span)


def space1(span: Span) -> Result:
    return take_while1(lambda c: c in HSPACE, "whitespace")(span)


def not_line_ending(span: Span) -> Result:
    return take_while(lambda c: c not in "\r\n")(span)


def line_ending(span: Span) -> Result:
    if span.startswith("\r\n"):
        rest, text = span.take(2)
        return Ok(rest, text)
    if span.startswith("\n"):
        rest, text = span.take(1)
        return Ok(rest, text)
    return Failure(span, expected="end of line")


def eof(span: Span) -> Result:
    if span.at_end:
        return Ok(span, "")
    return Failure(span, expected="end of input")


def success(value: Any) -> Parser:
    def parse(span: Span) -> Result:
        return Ok(span, value)

    return parse


# ---------------------------------------------------------------------------
# Combinators
# ---------------------------------------------------------------------------


def alt(*parsers: Parser) -> Parser:
    """Try each parser from the same position; first success wins.

    A committed failure stops the search. When every branch fails softly,
    the failure that got furthest into the input is reported.
    """

    def parse(span: Span) -> Result:
        best: Failure | None = None
        for parser in parsers:
            result = parser(span)
            if isinstance(result, Ok) or result.committed:
                return result
            if best is None or result.span.offset > best.span.offset:
                best = result
        return best if best is not None else Failure(span)

    return parse


def opt(parser: Parser) -> Parser:
    """Yield ``None`` without consuming input when ``parser`` fails softly."""

    def parse(span: Span) -> Result:
        result = parser(span)
        if isinstance(result, Failure) and not result.committed:
            return Ok(span, None)
        return result

    return parse


def cut(parser: Parser) -> Parser:
    """Turn any failure of ``parser`` into a committed one."""

    def parse(span: Span) -> Result:
        result = parser(span)
        if isinstance(result, Failure) and not result.committed:
            return result.commit()
        return result

    return parse


def mapped(parser: Parser, fn: Callable[[Any], Any]) -> Parser:
    def parse(span: Span) -> Result:
        result = parser(span)
        if isinstance(result, Failure):
            return result
        return Ok(result.span, fn(result.value))

    return parse


def value(constant: Any, parser: Parser) -> Parser:
    return mapped(parser, lambda _: constant)


def seq(*parsers: Parser) -> Parser:
    """Run parsers in order, yielding a tuple of their values."""

    def parse(span: Span) -> Result:
        values = []
        for parser in parsers:
            result = parser(span)
            if isinstance(result, Failure):
                return result
            span = result.span
            values.append(result.value)
        return Ok(span, tuple(values))

    return parse


def preceded(first: Parser, second: Parser) -> Parser:
    return mapped(seq(first, second), lambda pair: pair[1])


def terminated(first: Parser, second: Parser) -> Parser:
    return mapped(seq(first, second), lambda pair: pair[0])


def delimited(left: Parser, inner: Parser, right: Parser) -> Parser:
    return mapped(seq(left, inner, right), lambda triple: triple[1])


def separated_pair(first: Parser, separator: Parser, second: Parser) -> Parser:
    return mapped(seq(first, separator, second), lambda triple: (triple[0], triple[2]))


def many0(parser: Parser) -> Parser:
    """Apply ``parser`` repeatedly until it fails softly or stops consuming."""

    def parse(span: Span) -> Result:
        values = []
        while True:
            result = parser(span)
            if isinstance(result, Failure):
                if result.committed:
                    return result
                return Ok(span, values)
            if result.span.offset == span.offset:
                return Ok(span, values)
            values.append(result.value)
            span = result.span

    return parse
