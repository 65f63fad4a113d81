"""Hypothesis strategies for parsekit property-based testing.

Strategies are organized by domain:

- spans: Span values within one or several source units
- text: Source text for TextSource and the tokenizer

Usage:
    from tests.strategies import spans, same_unit_span_pairs
    from tests.strategies.text import grapheme_text, token_text

Event-Emitting Strategies (HypoFuzz-Optimized):
    These strategies emit hypothesis.event() calls for coverage-guided fuzzing:
    - spans, same_unit_span_pairs
    - grapheme_text, token_text
"""

from .spans import same_unit_span_pairs, spans, unit_names
from .text import digit_strings, grapheme_text, line_text, token_text

__all__ = [
    "digit_strings",
    "grapheme_text",
    "line_text",
    "same_unit_span_pairs",
    "spans",
    "token_text",
    "unit_names",
]
