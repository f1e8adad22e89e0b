"""bcparse — parse Beancount ledger text into typed directives.

Pipeline: ledger source -> directive dispatch -> transaction/posting grammar
-> immutable pydantic records.

Example:
    from bcparse import parse

    ledger = parse(open("main.beancount").read())
    for directive in ledger.directives:
        print(directive.date, directive.content.type)
"""

__version__ = "0.1.0"

from .ast import (
    Account,
    Amount,
    Balance,
    Close,
    Commodity,
    Cost,
    Currency,
    Directive,
    DirectiveContent,
    Event,
    Ledger,
    Link,
    Note,
    Open,
    Pad,
    Posting,
    PostingPrice,
    Price,
    Tag,
    TotalPrice,
    Transaction,
    UnitPrice,
)
from .config import ConfigError, ParseOptions, load_options
from .parser import ParseError, parse, parse_file

__all__ = [
    # Parse
    "parse",
    "parse_file",
    "ParseError",
    # Options
    "ParseOptions",
    "load_options",
    "ConfigError",
    # AST
    "Ledger",
    "Directive",
    "DirectiveContent",
    "Transaction",
    "Posting",
    "Amount",
    "Cost",
    "PostingPrice",
    "UnitPrice",
    "TotalPrice",
    "Open",
    "Close",
    "Balance",
    "Pad",
    "Price",
    "Commodity",
    "Event",
    "Note",
    # Symbols
    "Account",
    "Currency",
    "Tag",
    "Link",
]
