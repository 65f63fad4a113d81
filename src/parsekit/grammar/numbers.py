"""Locale-aware number primitive.

:func:`locale_decimal` scans the digits and locale symbols (decimal
separator, grouping separator, sign) at the cursor and converts the text
with Babel's CLDR-based ``parse_decimal``. The result is a ``Decimal``, so
no float precision is lost.

Babel Dependency:
    Requires the optional ``babel`` extra. The import is deferred to grammar
    construction time, so text and token parsing work without Babel.

Python 3.13+.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING

from parsekit.core.babel_compat import (
    get_babel_numbers,
    get_locale_class,
    get_number_format_error_class,
    get_unknown_locale_error_class,
    require_babel,
)
from parsekit.core.errors import GrammarError
from parsekit.diagnostics.templates import ErrorTemplate
from parsekit.syntax.cursor import Cursor
from parsekit.syntax.result import Failure, ParseResult, Success

from .node import Grammar
from .primitives import unexpected_here

if TYPE_CHECKING:
    from babel import Locale

__all__ = ["LocaleDecimal", "locale_decimal", "normalize_locale"]

_ASCII_DIGITS: frozenset[str] = frozenset("0123456789")

# Babel accepts a plain space where the locale groups with a no-break space
_SPACE_GROUPS: frozenset[str] = frozenset({"\xa0", "\u202f"})


def normalize_locale(locale_code: str) -> str:
    """Convert BCP-47 locale code to POSIX format for Babel.

    Example:
        >>> normalize_locale("lv-LV")
        'lv_LV'
    """
    return locale_code.replace("-", "_")


@dataclass(frozen=True, slots=True, eq=False, repr=False)
class LocaleDecimal(Grammar[Decimal]):
    """Decimal number formatted for one locale.

    Signs are accepted only in leading position; decimal and grouping
    separators only when a digit follows, so ``"12."`` at the end of a
    sentence consumes ``12`` alone.
    """

    locale_code: str
    locale: Locale
    decimal_symbol: str
    group_symbols: frozenset[str]
    sign_symbols: frozenset[str]

    def _digit_at(self, cursor: Cursor, n: int) -> bool:
        atom = cursor.peek(n)
        return atom is not None and atom.value in _ASCII_DIGITS

    def attempt(self, cursor: Cursor) -> ParseResult[Decimal]:
        start = cursor.position()
        text: list[str] = []
        while (atom := cursor.peek()) is not None:
            value = atom.value
            if value in _ASCII_DIGITS:
                pass
            elif not text and value in self.sign_symbols:
                pass
            elif value == self.decimal_symbol or value in self.group_symbols:
                if not text or not self._digit_at(cursor, 1):
                    break
            else:
                break
            text.append(str(value))
            cursor.advance()

        if not any(c in _ASCII_DIGITS for c in text):
            cursor.restore(start)
            return unexpected_here(cursor, ("number",))

        span = cursor.span_since(start)
        scanned = "".join(text)
        number_format_error_class = get_number_format_error_class()
        try:
            value = get_babel_numbers().parse_decimal(scanned, locale=self.locale)
        except (number_format_error_class, InvalidOperation, ValueError) as e:
            return Failure.of(ErrorTemplate.invalid_number(scanned, self.locale_code, str(e), span))
        return Success(value, span)

    def describe(self) -> str:
        return f"number ({self.locale_code})"


def locale_decimal(locale_code: str) -> LocaleDecimal:
    """Number in ``locale_code``'s format, parsed to ``Decimal``.

    Args:
        locale_code: BCP-47 or POSIX locale identifier (``"lv-LV"``, ``"en_US"``)

    Raises:
        BabelImportError: If Babel is not installed
        GrammarError: If the locale is unknown

    Example:
        >>> parse_text(locale_decimal("lv-LV"), "1 234,56").unwrap()
        Decimal('1234.56')
    """
    require_babel("locale_decimal")
    locale_class = get_locale_class()
    unknown_locale_error_class = get_unknown_locale_error_class()
    try:
        locale = locale_class.parse(normalize_locale(locale_code))
    except (unknown_locale_error_class, ValueError) as e:
        msg = f"Unknown locale {locale_code!r}: {e}"
        raise GrammarError(msg) from e

    numbers = get_babel_numbers()
    group = numbers.get_group_symbol(locale)
    groups = {group}
    if group in _SPACE_GROUPS:
        groups.add(" ")
    return LocaleDecimal(
        locale_code=locale_code,
        locale=locale,
        decimal_symbol=numbers.get_decimal_symbol(locale),
        group_symbols=frozenset(groups),
        sign_symbols=frozenset(
            {numbers.get_minus_sign_symbol(locale), numbers.get_plus_sign_symbol(locale), "-", "+"}
        ),
    )
