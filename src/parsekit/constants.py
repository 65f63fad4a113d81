"""Shared constants for parsekit.

This module provides centralized configuration constants used across the
syntax, grammar and diagnostics packages. Placing constants here avoids
circular imports and provides a single source of truth.

Constants are grouped by domain:
- Depth limits: Recursion protection for recursive grammars
- Input limits: DoS prevention via size constraints
- Unit names: Default source unit identifiers for diagnostics
- Reporting: Defaults for rendered source excerpts

Python 3.13+. Zero external dependencies.
"""

# ruff: noqa: RUF022 - __all__ organized by category for readability
__all__ = [
    # Depth limits
    "MAX_DEPTH",
    # Input limits
    "MAX_SOURCE_SIZE",
    # Unit names
    "DEFAULT_TEXT_UNIT",
    "DEFAULT_STREAM_UNIT",
    # Reporting
    "DEFAULT_CONTEXT_LINES",
    "DEFAULT_MAX_CONTENT_LENGTH",
]

# ============================================================================
# DEPTH LIMITS
# ============================================================================
#
# Applies to Forward (recursive) grammar nodes. Each entry into a Forward
# node counts as one level of nesting on the owning Cursor's DepthGuard.
# The value is clamped against sys.getrecursionlimit() at guard creation,
# since every level costs several Python frames.

MAX_DEPTH: int = 50

# ============================================================================
# INPUT LIMITS
# ============================================================================

# Maximum text source size in characters accepted by Parser (10 MB).
MAX_SOURCE_SIZE: int = 10 * 1024 * 1024

# ============================================================================
# UNIT NAMES
# ============================================================================

DEFAULT_TEXT_UNIT: str = "<string>"
DEFAULT_STREAM_UNIT: str = "<tokens>"

# ============================================================================
# REPORTING
# ============================================================================

# Lines of context shown before and after the primary span in excerpts.
DEFAULT_CONTEXT_LINES: int = 1

# Truncation length used by sanitizing formatters.
DEFAULT_MAX_CONTENT_LENGTH: int = 100
