"""Babel compatibility layer for optional dependency handling.

Provides centralized, lazy import infrastructure for Babel to ensure consistent
error messaging and import behavior across all Babel-dependent modules.

Design Rationale:
    parsekit supports two installation modes:
    - Core: `pip install parsekit` (no external dependencies)
    - Locale-aware primitives: `pip install parsekit[babel]`

    This module ensures that:
    1. Core installations never trigger Babel imports
    2. Locale-aware grammar nodes get consistent, helpful error messages
       when Babel is missing
    3. Babel types are available for TYPE_CHECKING without runtime import

Python 3.13+.
"""

from __future__ import annotations

from decimal import Decimal
from functools import lru_cache
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from babel import Locale
    from babel.core import UnknownLocaleError as UnknownLocaleErrorType
    from babel.numbers import NumberFormatError as NumberFormatErrorType


# pylint: disable=unnecessary-ellipsis
class BabelNumbersProtocol(Protocol):
    """Protocol for Babel numbers module interface.

    Defines the subset of babel.numbers API actually used by parsekit.
    """

    def parse_decimal(self, string: str, locale: Locale | str | None = None) -> Decimal:
        """Parse a locale-formatted decimal string."""
        ...

    def get_decimal_symbol(self, locale: Locale | str | None = None) -> str:
        """Decimal separator for a locale."""
        ...

    def get_group_symbol(self, locale: Locale | str | None = None) -> str:
        """Grouping separator for a locale."""
        ...

    def get_minus_sign_symbol(self, locale: Locale | str | None = None) -> str:
        """Minus sign for a locale."""
        ...

    def get_plus_sign_symbol(self, locale: Locale | str | None = None) -> str:
        """Plus sign for a locale."""
        ...
# pylint: enable=unnecessary-ellipsis


__all__ = [
    "BabelImportError",
    "BabelNumbersProtocol",
    "get_babel_numbers",
    "get_locale_class",
    "get_number_format_error_class",
    "get_unknown_locale_error_class",
    "is_babel_available",
    "require_babel",
]


@lru_cache(maxsize=1)
def _check_babel_available() -> bool:
    """Check if Babel is installed (computed once, cached via lru_cache)."""
    try:
        import babel  # noqa: F401, PLC0415  # pylint: disable=unused-import

        return True
    except ImportError:
        return False


class BabelImportError(ImportError):
    """Raised when Babel is required but not installed."""

    def __init__(self, feature: str) -> None:
        """Create error with feature-specific message.

        Args:
            feature: Name of the feature/function requiring Babel
        """
        message = (
            f"{feature} requires Babel for CLDR locale data. "
            "Install with: pip install parsekit[babel]"
        )
        super().__init__(message)
        self.feature = feature


def is_babel_available() -> bool:
    """Check if Babel is installed.

    Returns:
        True if Babel is installed and importable, False otherwise.
    """
    return _check_babel_available()


def require_babel(feature: str) -> None:
    """Assert that Babel is available, raising BabelImportError if not.

    Use at the entry point of functions/methods that require Babel.

    Args:
        feature: Name of the feature requiring Babel (for error message)

    Raises:
        BabelImportError: If Babel is not installed
    """
    if not _check_babel_available():
        raise BabelImportError(feature)


def get_locale_class() -> type[Locale]:
    """Get the Babel Locale class.

    Raises:
        BabelImportError: If Babel is not installed
    """
    require_babel("get_locale_class")
    from babel import Locale  # noqa: PLC0415

    return Locale


def get_unknown_locale_error_class() -> type[UnknownLocaleErrorType]:
    """Get the Babel UnknownLocaleError exception class.

    Raises:
        BabelImportError: If Babel is not installed
    """
    require_babel("get_unknown_locale_error_class")
    from babel.core import UnknownLocaleError  # noqa: PLC0415

    return UnknownLocaleError


def get_number_format_error_class() -> type[NumberFormatErrorType]:
    """Get the Babel NumberFormatError exception class.

    Raises:
        BabelImportError: If Babel is not installed
    """
    require_babel("get_number_format_error_class")
    from babel.numbers import NumberFormatError  # noqa: PLC0415

    return NumberFormatError


def get_babel_numbers() -> BabelNumbersProtocol:
    """Get the Babel numbers module.

    Returns:
        The babel.numbers module (typed via BabelNumbersProtocol)

    Raises:
        BabelImportError: If Babel is not installed
    """
    require_babel("get_babel_numbers")
    from babel import numbers  # noqa: PLC0415

    return numbers
