"""AST nodes for parsed ledgers."""

import datetime
from collections.abc import Mapping
from types import MappingProxyType
from typing import Annotated, Any
from typing import Literal as TypingLiteral

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    SerializationInfo,
    field_serializer,
)
from pydantic_core import core_schema


# Symbols - immutable strings compared and hashed by content
class _Symbol(str):
    __slots__ = ()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str.__repr__(self)})"

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type: Any, handler: Any) -> core_schema.CoreSchema:
        return core_schema.no_info_after_validator_function(
            cls,
            core_schema.str_schema(),
            serialization=core_schema.to_string_ser_schema(),
        )


class Tag(_Symbol):
    """Transaction tag, written ``#name``."""


class Link(_Symbol):
    """Transaction link, written ``^name``."""


class Currency(_Symbol):
    """Commodity code (e.g., 'USD', 'VACHR')."""


class Account(_Symbol):
    """Colon-separated account name (e.g., 'Assets:Bank:Checking')."""

    @property
    def type(self) -> str:
        return self.split(":", 1)[0]

    @property
    def components(self) -> tuple[str, ...]:
        return tuple(self.split(":"))


# Metadata values are str, datetime.date, Account, Currency, bool or a number
# of the configured numeric type.
MetadataValue = Any


def _metadata_to_plain(
    metadata: Mapping[str, MetadataValue], info: SerializationInfo
) -> dict[str, Any]:
    if not info.mode_is_json():
        return dict(metadata)
    return {
        key: value
        if value is None or isinstance(value, (str, bool, int, float, datetime.date))
        else str(value)
        for key, value in metadata.items()
    }


def _freeze(mapping: Mapping) -> Mapping:
    return MappingProxyType(dict(mapping))


def _empty() -> Mapping:
    return MappingProxyType({})


# Read-only views; a frozen model alone would still allow item assignment
Metadata = Annotated[
    Mapping[str, MetadataValue],
    AfterValidator(_freeze),
    PlainSerializer(_metadata_to_plain),
]
Options = Annotated[
    Mapping[str, str],
    AfterValidator(_freeze),
    PlainSerializer(lambda options: dict(options)),
]


class _Node(BaseModel):
    model_config = ConfigDict(frozen=True)


class Amount(_Node):
    value: Any  # numeric type chosen by ParseOptions
    currency: Currency

    @field_serializer("value", when_used="json")
    def serialize_value(self, value: Any) -> Any:
        if isinstance(value, (int, float)):
            return value
        return str(value)

    def __str__(self) -> str:
        return f"{self.value} {self.currency}"


class Cost(_Node):
    """Cost basis, the content between ``{`` and ``}``."""

    amount: Amount | None = None
    date: datetime.date | None = None


# Posting prices
class UnitPrice(_Node):
    """Per-unit price (``@``)."""

    type: TypingLiteral["unit"] = "unit"
    amount: Amount


class TotalPrice(_Node):
    """Total price (``@@``)."""

    type: TypingLiteral["total"] = "total"
    amount: Amount


PostingPrice = Annotated[UnitPrice | TotalPrice, Field(discriminator="type")]


class Posting(_Node):
    """One account movement inside a transaction."""

    flag: str | None = None
    account: Account
    amount: Amount | None = None  # None = to be inferred when balancing
    cost: Cost | None = None
    price: PostingPrice | None = None
    metadata: Metadata = Field(default_factory=_empty)


# Directive contents - discriminated on ``type``
class Transaction(_Node):
    type: TypingLiteral["transaction"] = "transaction"
    flag: str | None = None  # None exactly when written with the 'txn' keyword
    payee: str | None = None
    narration: str | None = None
    tags: frozenset[Tag] = frozenset()
    links: frozenset[Link] = frozenset()
    postings: tuple[Posting, ...] = ()


class Open(_Node):
    type: TypingLiteral["open"] = "open"
    account: Account
    currencies: tuple[Currency, ...] = ()
    booking: str | None = None  # e.g., "FIFO", "STRICT"


class Close(_Node):
    type: TypingLiteral["close"] = "close"
    account: Account


class Balance(_Node):
    """Balance assertion."""

    type: TypingLiteral["balance"] = "balance"
    account: Account
    amount: Amount


class Pad(_Node):
    type: TypingLiteral["pad"] = "pad"
    account: Account
    source_account: Account


class Price(_Node):
    """Market price of a commodity."""

    type: TypingLiteral["price"] = "price"
    currency: Currency
    amount: Amount


class Commodity(_Node):
    type: TypingLiteral["commodity"] = "commodity"
    currency: Currency


class Event(_Node):
    type: TypingLiteral["event"] = "event"
    name: str
    value: str


class Note(_Node):
    type: TypingLiteral["note"] = "note"
    account: Account
    comment: str


DirectiveContent = Annotated[
    Transaction | Open | Close | Balance | Pad | Price | Commodity | Event | Note,
    Field(discriminator="type"),
]


class Directive(_Node):
    """A dated top-level statement."""

    date: datetime.date
    content: DirectiveContent
    metadata: Metadata = Field(default_factory=_empty)
    line: int = 0  # 1-based source line of the date token


class Ledger(_Node):
    """A parsed ledger file."""

    directives: tuple[Directive, ...] = ()
    options: Options = Field(default_factory=_empty)
    includes: tuple[str, ...] = ()
