"""Tests for input sources: grapheme atoms, line tracking, token streams."""

import pytest
from hypothesis import given

from parsekit.core.span import Span
from parsekit.enums import UnitKind
from parsekit.syntax.source import (
    InputSource,
    StreamPosition,
    TextPosition,
    TextSource,
    TokenStreamSource,
    cluster_end,
)
from tests.strategies import grapheme_text, line_text


def _drain(source: InputSource) -> list[object]:
    atoms = []
    while (atom := source.advance()) is not None:
        atoms.append(atom)
    return atoms


# ============================================================================
# TEXT SOURCE
# ============================================================================


class TestTextSourceAtoms:
    """Grapheme-level atoms."""

    def test_plain_ascii(self) -> None:
        """Each ASCII character is one atom."""
        atoms = _drain(TextSource("abc"))
        assert [a.value for a in atoms] == ["a", "b", "c"]
        assert [(a.span.start, a.span.end) for a in atoms] == [(0, 1), (1, 2), (2, 3)]

    def test_combining_sequence_is_one_atom(self) -> None:
        """A base character with combining marks is a single atom."""
        atoms = _drain(TextSource("e\u0301x"))
        assert [a.value for a in atoms] == ["e\u0301", "x"]
        assert atoms[0].span.length == 2
        assert atoms[1].span.start_column == 2

    def test_zwj_sequence_is_one_atom(self) -> None:
        """Zero-width-joiner sequences stay together."""
        family = "\U0001f468\u200d\U0001f469"
        atoms = _drain(TextSource(family + "!"))
        assert [a.value for a in atoms] == [family, "!"]

    def test_emoji_modifier_is_one_atom(self) -> None:
        """Skin-tone modifiers attach to the preceding emoji."""
        thumbs = "\U0001f44d\U0001f3fd"
        assert [a.value for a in _drain(TextSource(thumbs))] == [thumbs]

    def test_regional_indicator_pairs(self) -> None:
        """Flags pair up regional indicators, two by two."""
        us, fr = "\U0001f1fa\U0001f1f8", "\U0001f1eb\U0001f1f7"
        atoms = _drain(TextSource(us + fr))
        assert [a.value for a in atoms] == [us, fr]
        assert atoms[1].span.start == 2
        assert atoms[1].span.start_column == 2

    def test_hangul_jamo_syllable_is_one_atom(self) -> None:
        """Conjoining L, V and T jamo form one syllable."""
        syllable = "\u1100\u1161\u11a8"
        atoms = _drain(TextSource(syllable + "a"))
        assert [a.value for a in atoms] == [syllable, "a"]
        assert atoms[0].span.length == 3

    def test_prepend_joins_following_character(self) -> None:
        """Prepended marks belong to the character after them."""
        signed = "\u0600\u0661"
        assert [a.value for a in _drain(TextSource(signed))] == [signed]

    def test_crlf_is_one_atom(self) -> None:
        """CRLF is a single line-terminator atom."""
        atoms = _drain(TextSource("a\r\nb"))
        assert [a.value for a in atoms] == ["a", "\r\n", "b"]

    def test_cluster_end(self) -> None:
        """cluster_end finds the end of the cluster at an offset."""
        assert cluster_end("e\u0301x", 0) == 2
        assert cluster_end("\r\nx", 0) == 2
        assert cluster_end("ab", 1) == 2
        assert cluster_end("\U0001f1fa\U0001f1f8!", 0) == 2
        assert cluster_end("x", 1) == 1

    def test_exhausted_source_stays_exhausted(self) -> None:
        """After end of input, peek and advance return None forever."""
        source = TextSource("a")
        source.advance()
        for _ in range(3):
            assert source.peek_atom() is None
            assert source.advance() is None

    def test_empty_text(self) -> None:
        """An empty source has no atoms and a point span at 1:1."""
        source = TextSource("", "empty")
        assert source.peek_atom() is None
        span = source.point_span()
        assert (span.start, span.end, span.start_line, span.start_column) == (0, 0, 1, 1)

    @given(grapheme_text())
    def test_atoms_tile_the_text(self, text: str) -> None:
        """PROPERTY: atom spans are contiguous and cover the whole text."""
        atoms = _drain(TextSource(text))
        assert "".join(a.value for a in atoms) == text
        offset = 0
        for atom in atoms:
            assert atom.span.start == offset
            offset = atom.span.end
        assert offset == len(text)


class TestTextSourceLines:
    """Line and column tracking."""

    def test_lf_advances_line(self) -> None:
        """LF moves to the next line and resets the column."""
        atoms = _drain(TextSource("ab\nc", "demo"))
        assert atoms[0].span.render() == "demo:1:1-1:2"
        assert atoms[2].span.render() == "demo:1:3-2:1"
        assert atoms[3].span.render() == "demo:2:1-2:2"

    def test_cr_only_advances_line(self) -> None:
        """A lone CR ends a line too."""
        atoms = _drain(TextSource("a\rb"))
        assert atoms[2].span.start_line == 2

    def test_crlf_advances_one_line(self) -> None:
        """CRLF counts as one line break."""
        atoms = _drain(TextSource("a\r\nb"))
        assert (atoms[2].span.start_line, atoms[2].span.start_column) == (2, 1)

    @given(line_text())
    def test_final_line_matches_terminator_count(self, text: str) -> None:
        """PROPERTY: the end line equals the number of terminators plus one."""
        source = TextSource(text)
        atoms = _drain(source)
        breaks = sum(1 for a in atoms if a.value in {"\n", "\r\n", "\r"})
        assert source.point_span().start_line == breaks + 1


class TestTextSourceCheckpoints:
    """checkpoint() and restore()."""

    def test_restore_replays_identical_atoms(self) -> None:
        """Restoring a checkpoint re-reads identical atoms and spans."""
        source = TextSource("ab\ncd")
        source.advance()
        mark = source.checkpoint()
        first = _drain(source)
        source.restore(mark)
        assert _drain(source) == first

    def test_checkpoint_is_text_position(self) -> None:
        """Checkpoints carry offset, line and column."""
        source = TextSource("a\nb")
        source.advance()
        source.advance()
        assert source.checkpoint() == TextPosition(2, 2, 1)

    def test_foreign_checkpoint_rejected(self) -> None:
        """A stream checkpoint cannot restore a text source."""
        with pytest.raises(TypeError):
            TextSource("a").restore(StreamPosition(0))

    def test_out_of_range_checkpoint_rejected(self) -> None:
        """A position beyond the text raises ValueError."""
        with pytest.raises(ValueError, match="outside"):
            TextSource("a").restore(TextPosition(5, 1, 6))

    def test_satisfies_protocol(self) -> None:
        """TextSource structurally satisfies InputSource."""
        assert isinstance(TextSource(""), InputSource)


# ============================================================================
# TOKEN STREAM SOURCE
# ============================================================================


class _SpannedToken:
    def __init__(self, text: str, span: Span) -> None:
        self.text = text
        self.span = span


class TestTokenStreamSource:
    """One atom per token."""

    def test_plain_tokens_get_stream_spans(self) -> None:
        """Tokens without spans are assigned [i, i+1) in the stream unit."""
        atoms = _drain(TokenStreamSource(["let", "x"], "macro"))
        assert [a.value for a in atoms] == ["let", "x"]
        assert atoms[1].span == Span.stream("macro", 1, 2)
        assert atoms[1].span.kind is UnitKind.STREAM

    def test_token_spans_are_kept(self) -> None:
        """A token's own Span is used unchanged."""
        span = Span.text("src.txt", 4, 7, 1, 5, 1, 8)
        atoms = _drain(TokenStreamSource([_SpannedToken("abc", span)]))
        assert atoms[0].span is span

    def test_restore(self) -> None:
        """Stream checkpoints restore exactly."""
        source = TokenStreamSource(["a", "b", "c"])
        source.advance()
        mark = source.checkpoint()
        assert mark == StreamPosition(1)
        _drain(source)
        source.restore(mark)
        assert source.advance().value == "b"  # type: ignore[union-attr]

    def test_foreign_checkpoint_rejected(self) -> None:
        """A text checkpoint cannot restore a stream source."""
        with pytest.raises(TypeError):
            TokenStreamSource([]).restore(TextPosition(0, 1, 1))

    def test_out_of_range_checkpoint_rejected(self) -> None:
        """An index beyond the stream raises ValueError."""
        with pytest.raises(ValueError, match="outside"):
            TokenStreamSource(["a"]).restore(StreamPosition(3))

    def test_point_span_at_end(self) -> None:
        """At end of stream the point span sits after the last token."""
        source = TokenStreamSource(["a", "b"], "s")
        _drain(source)
        assert source.point_span() == Span.stream("s", 2, 2)

    def test_point_span_empty_stream(self) -> None:
        """An empty stream has a point span at 0."""
        assert TokenStreamSource([], "s").point_span() == Span.stream("s", 0, 0)

    def test_satisfies_protocol(self) -> None:
        """TokenStreamSource structurally satisfies InputSource."""
        assert isinstance(TokenStreamSource([]), InputSource)
