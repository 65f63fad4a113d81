"""Tests for the locale-aware decimal primitive."""

from decimal import Decimal

import pytest
from hypothesis import event, given
from hypothesis import strategies as st

from parsekit.core.errors import GrammarError
from parsekit.diagnostics.codes import DiagnosticCode
from parsekit.grammar.numbers import locale_decimal, normalize_locale
from parsekit.grammar.parser import parse_text
from parsekit.grammar.primitives import char
from parsekit.syntax.cursor import Cursor, CursorPosition
from parsekit.syntax.result import Failure, Success
from parsekit.syntax.source import TextSource

babel_numbers = pytest.importorskip("babel.numbers")


class TestLocaleDecimal:
    """Parsing numbers formatted for a locale."""

    @pytest.mark.parametrize(
        ("locale", "text", "expected"),
        [
            ("en-US", "1,234.56", Decimal("1234.56")),
            ("en_US", "-12.5", Decimal("-12.5")),
            ("de-DE", "1.234,56", Decimal("1234.56")),
            ("en-US", "42", Decimal("42")),
        ],
    )
    def test_formatted_numbers(self, locale: str, text: str, expected: Decimal) -> None:
        """Grouping and decimal symbols follow the locale."""
        assert parse_text(locale_decimal(locale), text).unwrap() == expected

    def test_latvian_grouping(self) -> None:
        """Latvian groups with its CLDR group symbol and decimal comma."""
        group = babel_numbers.get_group_symbol("lv_LV")
        value = parse_text(locale_decimal("lv-LV"), f"1{group}234,56").unwrap()
        assert value == Decimal("1234.56")

    def test_plain_space_accepted_for_nbsp_locales(self) -> None:
        """A plain space stands in for a no-break-space group symbol."""
        if babel_numbers.get_group_symbol("lv_LV") not in {"\xa0", " "}:
            pytest.skip("CLDR data does not group lv_LV with a space")
        grammar = locale_decimal("lv-LV")
        assert " " in grammar.group_symbols
        assert parse_text(grammar, "1 234,56").unwrap() == Decimal("1234.56")

    def test_trailing_separator_not_consumed(self) -> None:
        """A separator without a following digit ends the number."""
        cursor = Cursor(TextSource("12. next"))
        result = locale_decimal("en-US").attempt(cursor)
        assert isinstance(result, Success)
        assert result.value == Decimal("12")
        assert cursor.position() == CursorPosition(2)

    def test_number_then_punctuation(self) -> None:
        """The primitive composes with others."""
        grammar = locale_decimal("en-US").terminated(char(";"))
        assert parse_text(grammar, "3.5;").unwrap() == Decimal("3.5")

    def test_no_digits(self) -> None:
        """Input without digits fails without consuming."""
        cursor = Cursor(TextSource("-x"))
        result = locale_decimal("en-US").attempt(cursor)
        assert isinstance(result, Failure)
        assert result.diagnostics[0].code is DiagnosticCode.UNEXPECTED_ATOM
        assert result.diagnostics[0].expected == ("number",)
        assert cursor.position() == CursorPosition(0)

    def test_unknown_locale(self) -> None:
        """Unknown locales are rejected at grammar construction."""
        with pytest.raises(GrammarError, match="xx-YY"):
            locale_decimal("xx-YY")

    def test_describe(self) -> None:
        """The description names the locale."""
        assert locale_decimal("de-DE").describe() == "number (de-DE)"

    def test_normalize_locale(self) -> None:
        """BCP-47 codes become POSIX codes."""
        assert normalize_locale("lv-LV") == "lv_LV"
        assert normalize_locale("en_US") == "en_US"

    @given(st.decimals(min_value=-(10**9), max_value=10**9, places=2, allow_nan=False))
    def test_reads_babel_formatting(self, value: Decimal) -> None:
        """PROPERTY: numbers Babel formats for en-US parse back to the same value."""
        event(f"negative={value < 0}")
        text = babel_numbers.format_decimal(value, format="#,##0.00", locale="en_US")
        assert parse_text(locale_decimal("en-US"), text).unwrap() == value
