"""Tests for the transaction and posting grammar."""

from datetime import date
from decimal import Decimal

import pytest

from bcparse import (
    Amount,
    Cost,
    Currency,
    ParseError,
    TotalPrice,
    Transaction,
    UnitPrice,
    parse,
)


def parse_transaction(source: str) -> Transaction:
    ledger = parse(source)
    assert len(ledger.directives) == 1
    content = ledger.directives[0].content
    assert isinstance(content, Transaction)
    return content


def posting_line(line: str):
    """Parse a single posting under a minimal transaction header."""
    txn = parse_transaction(f'2023-01-01 * "test"\n  {line}\n')
    assert len(txn.postings) == 1
    return txn.postings[0]


GROCERIES = """
2022-05-22 * "Grocery store" "Grocery shopping" #food
  Assets:Cash           -10 CHF
  Expenses:Groceries
"""


class TestHeader:
    def test_grocery_example(self):
        ledger = parse(GROCERIES)
        assert len(ledger.directives) == 1
        directive = ledger.directives[0]
        assert directive.date == date(2022, 5, 22)
        txn = directive.content
        assert txn.type == "transaction"
        assert txn.flag == "*"
        assert txn.payee == "Grocery store"
        assert txn.narration == "Grocery shopping"
        assert txn.tags == {"food"}
        assert len(txn.postings) == 2

    def test_single_string_is_narration(self):
        txn = parse_transaction('2022-05-22 * "Grocery shopping"\n')
        assert txn.payee is None
        assert txn.narration == "Grocery shopping"

    def test_no_strings(self):
        txn = parse_transaction("2022-05-22 *\n")
        assert txn.payee is None
        assert txn.narration is None
        assert txn.postings == ()

    def test_txn_keyword_has_no_flag(self):
        txn = parse_transaction('2022-05-22 txn "Narration"\n')
        assert txn.flag is None
        assert txn.narration == "Narration"

    def test_pending_flag(self):
        txn = parse_transaction('2022-05-22 ! "Unsure"\n')
        assert txn.flag == "!"

    def test_comment_after_date_is_not_a_flag(self):
        ledger = parse("2022-05-22 ; reconcile later\n2022-05-23 txn\n")
        assert len(ledger.directives) == 1
        assert ledger.directives[0].line == 2

    def test_escaped_quote_in_string(self):
        txn = parse_transaction('2022-05-22 * "Joe\'s" "The \\"big\\" one"\n')
        assert txn.payee == "Joe's"
        assert txn.narration == 'The "big" one'

    def test_trailing_comment(self):
        txn = parse_transaction('2022-05-22 * "Coffee" ; morning\n')
        assert txn.narration == "Coffee"

    def test_last_line_without_newline(self):
        txn = parse_transaction('2022-05-22 * "Coffee"\n  Expenses:Food  3 EUR')
        assert len(txn.postings) == 1


class TestTagsAndLinks:
    def test_duplicate_tags_collapse(self):
        txn = parse_transaction('2022-05-22 * "Dinner" #food #food\n')
        assert txn.tags == {"food"}
        assert len(txn.tags) == 1

    def test_tags_and_links_are_separated(self):
        txn = parse_transaction(
            '2014-02-05 * "Invoice for January" ^invoice-pepe-studios-jan14 #work #client_a ^invoice-pepe-studios-jan14\n'
        )
        assert txn.tags == {"work", "client_a"}
        assert txn.links == {"invoice-pepe-studios-jan14"}

    def test_tags_without_strings(self):
        txn = parse_transaction("2022-05-22 * #trip\n")
        assert txn.narration is None
        assert "trip" in txn.tags

    def test_empty_tag_is_accepted(self):
        txn = parse_transaction('2022-05-22 * "x" #\n')
        assert txn.tags == {""}

    def test_comment_ends_tag(self):
        txn = parse_transaction('2022-05-22 * "x" #food;no space needed\n')
        assert txn.tags == {"food"}


class TestPostings:
    def test_posting_order_preserved(self):
        txn = parse_transaction(GROCERIES)
        assert [p.account for p in txn.postings] == ["Assets:Cash", "Expenses:Groceries"]

    def test_amount(self):
        posting = posting_line("Assets:Cash  -10 CHF")
        assert posting.amount == Amount(value=Decimal("-10"), currency=Currency("CHF"))

    def test_account_only_posting(self):
        posting = posting_line("Expenses:Groceries")
        assert posting.amount is None
        assert posting.cost is None
        assert posting.price is None
        assert posting.flag is None

    def test_account_components(self):
        posting = posting_line("Assets:Bank:Checking  1 USD")
        assert posting.account.type == "Assets"
        assert posting.account.components == ("Assets", "Bank", "Checking")

    def test_posting_flag(self):
        posting = posting_line("! Assets:Cash  -10 CHF")
        assert posting.flag == "!"
        assert posting.account == "Assets:Cash"

    def test_posting_comment(self):
        posting = posting_line("Assets:Cash  -10 CHF ; paid in coins")
        assert posting.amount.value == Decimal("-10")

    def test_blank_and_comment_lines_between_postings(self):
        txn = parse_transaction(
            '2022-05-22 * "Split"\n'
            "  Assets:Cash  -10 CHF\n"
            "\n"
            "  ; shared with Bob\n"
            "; column-zero comment\n"
            "  Expenses:Food\n"
        )
        assert [p.account for p in txn.postings] == ["Assets:Cash", "Expenses:Food"]

    def test_commented_out_posting_is_skipped(self):
        txn = parse_transaction(
            '2024-01-01 * "Lunch"\n'
            "  ; Assets:Old  10 USD\n"
            "  Expenses:Food  10 USD\n"
            "  ;! Assets:Older  5 USD\n"
            "  Assets:Cash\n"
        )
        assert [(p.flag, p.account) for p in txn.postings] == [
            (None, "Expenses:Food"),
            (None, "Assets:Cash"),
        ]

    def test_postings_stop_at_next_directive(self):
        ledger = parse(
            '2022-05-22 * "One"\n'
            "  Assets:Cash  -1 CHF\n"
            "  Expenses:Food\n"
            '2022-05-23 * "Two"\n'
            "  Assets:Cash  -2 CHF\n"
            "  Expenses:Food\n"
        )
        assert len(ledger.directives) == 2
        assert ledger.directives[1].content.narration == "Two"
        assert len(ledger.directives[1].content.postings) == 2

    def test_thousands_separator_and_decimals(self):
        posting = posting_line("Assets:Bank  1,234,567.89 USD")
        assert posting.amount.value == Decimal("1234567.89")


class TestCost:
    def test_amount_cost(self):
        posting = posting_line("Assets:Broker  1 CHF {2 PLN}")
        assert posting.cost == Cost(amount=Amount(value=Decimal("2"), currency=Currency("PLN")))

    def test_amount_then_date_equals_date_then_amount(self):
        first = posting_line("Assets:Broker  1 CHF {2 PLN, 2023-01-01}")
        second = posting_line("Assets:Broker  1 CHF {2023-01-01, 2 PLN}")
        expected = Cost(
            amount=Amount(value=Decimal("2"), currency=Currency("PLN")),
            date=date(2023, 1, 1),
        )
        assert first.cost == expected
        assert second.cost == expected

    def test_date_only_cost(self):
        posting = posting_line("Assets:Broker  1 CHF {2023-01-01}")
        assert posting.cost.amount is None
        assert posting.cost.date == date(2023, 1, 1)

    @pytest.mark.parametrize("cost", ["{}", "{ }", "{  }"])
    def test_empty_cost(self, cost):
        posting = posting_line(f"Assets:Broker  1 CHF {cost}")
        assert posting.cost == Cost(amount=None, date=None)

    def test_inner_whitespace(self):
        posting = posting_line("Assets:Broker  1 CHF {  2 PLN ,2023-01-01  }")
        assert posting.cost.amount.currency == "PLN"
        assert posting.cost.date == date(2023, 1, 1)

    def test_unclosed_cost_is_an_error(self):
        with pytest.raises(ParseError) as exc:
            parse('2023-01-01 * "x"\n  Assets:Broker  1 CHF {2 PLN\n')
        assert exc.value.line == 2
        assert exc.value.col == 24


class TestPrice:
    def test_unit_price(self):
        posting = posting_line("Assets:Cash  1 CHF {2 PLN} @ 3 EUR")
        assert posting.cost.amount.value == Decimal("2")
        assert posting.price == UnitPrice(amount=Amount(value=Decimal("3"), currency=Currency("EUR")))

    def test_total_price_is_not_unit_price(self):
        posting = posting_line("Assets:Cash  -10 CHF @@ 12 USD")
        assert isinstance(posting.price, TotalPrice)
        assert posting.price.type == "total"
        assert posting.price.amount == Amount(value=Decimal("12"), currency=Currency("USD"))

    def test_price_without_cost(self):
        posting = posting_line("Assets:Cash  -10 CHF @ 1.1 USD")
        assert posting.cost is None
        assert isinstance(posting.price, UnitPrice)

    def test_price_without_space(self):
        posting = posting_line("Assets:Cash  -10 CHF @1.1 USD")
        assert posting.price.amount.value == Decimal("1.1")

    def test_cost_and_total_price(self):
        posting = posting_line("Assets:Broker  5 AAPL {150 USD, 2023-02-01} @@ 800 USD")
        assert posting.cost.date == date(2023, 2, 1)
        assert isinstance(posting.price, TotalPrice)
        assert posting.price.amount.value == Decimal("800")


class TestCommittedFailures:
    def test_unclosed_payee_fails_at_quote(self):
        with pytest.raises(ParseError) as exc:
            parse('2022-05-22 * "Grocery store\n  Assets:Cash  -10 CHF\n')
        assert exc.value.line == 1
        assert exc.value.col == 14

    def test_bad_amount_fails_at_token(self):
        source = '2022-05-22 * "x"\n  Assets:Cash  ten CHF\n'
        with pytest.raises(ParseError) as exc:
            parse(source)
        assert exc.value.line == 2
        assert exc.value.col == 16

    def test_error_message_names_the_line(self):
        with pytest.raises(ParseError, match="Assets:Cash  ten CHF"):
            parse('2022-05-22 * "x"\n  Assets:Cash  ten CHF\n')

    def test_txn_keyword_must_be_followed_by_valid_header(self):
        with pytest.raises(ParseError):
            parse("2022-05-22 txn oops\n")
