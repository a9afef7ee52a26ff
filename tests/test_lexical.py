"""
Lexical Utilities Test Suite
============================

Tests for the scanning helpers shared by the transpiler and the linter.

Test Organization
-----------------
- TestBracketScanning: find_matching_paren / find_matching_bracket
- TestSmartSplit: top-level comma splitting
- TestComments: comment removal with block-comment carry
- TestMasking: string and field-access masking
- TestIdentifiers: identifier and type helpers
"""

import pytest

from psc_lua.transpiler.lexical import (
    NOT_FOUND,
    clean_line_from_comments,
    cut_at_unbalanced_paren,
    find_matching_bracket,
    find_matching_paren,
    is_simple_identifier,
    leading_indentation,
    mask_field_access,
    mask_strings,
    normalize_type,
    smart_split_args,
    split_comments,
)


# =============================================================================
# Bracket Scanning
# =============================================================================

class TestBracketScanning:
    """Tests for matching-bracket lookup."""

    def test_simple_pair(self):
        """A flat pair matches its closer."""
        assert find_matching_paren("f(x)", 1) == 3

    def test_nested_pairs(self):
        """Inner pairs are skipped when counting."""
        text = "f(g(a), (b))"
        assert find_matching_paren(text, 1) == len(text) - 1
        assert find_matching_paren(text, 3) == 5

    def test_unbalanced_returns_not_found(self):
        """An unclosed parenthesis yields -1, never an exception."""
        assert find_matching_paren("f(a, (b)", 1) == NOT_FOUND
        assert find_matching_paren("(", 0) == NOT_FOUND

    def test_quoted_parens_are_counted(self):
        """Parentheses inside quotes are not skipped."""
        assert find_matching_paren('f(")")', 1) == 3

    def test_square_brackets(self):
        """The generic form works for other bracket kinds."""
        assert find_matching_bracket("a[b[1]]", 1, "[", "]") == 6

    def test_cut_at_unbalanced_paren(self):
        """Header capture is cut before a trailing return annotation."""
        assert cut_at_unbalanced_paren("a : entier) : tableau(3") == "a : entier"
        assert cut_at_unbalanced_paren("a : entier") == "a : entier"


# =============================================================================
# Smart Split
# =============================================================================

class TestSmartSplit:
    """Tests for smart_split_args."""

    def test_nested_and_quoted_items(self):
        """Commas inside brackets and strings do not split."""
        assert smart_split_args('a, (b, c), "d,e"') == ["a", "(b, c)", '"d,e"']

    def test_blank_input(self):
        """Blank input gives an empty list."""
        assert smart_split_args("") == []
        assert smart_split_args("   ") == []

    def test_items_are_stripped(self):
        """Whitespace around each item is removed."""
        assert smart_split_args("  x ,y  ") == ["x", "y"]

    def test_brackets_and_braces(self):
        """Square brackets and braces also deepen."""
        assert smart_split_args("t[i, j], {1, 2}") == ["t[i, j]", "{1, 2}"]

    def test_escaped_quote(self):
        """A backslash-escaped quote does not close the string."""
        assert smart_split_args(r'"a\", b", c') == [r'"a\", b"', "c"]

    def test_character_literal(self):
        """Single-quoted character literals are opaque."""
        assert smart_split_args("',', x") == ["','", "x"]


# =============================================================================
# Comments
# =============================================================================

class TestComments:
    """Tests for comment removal and splitting."""

    def test_line_comment(self):
        """Text after // is removed."""
        scan = clean_line_from_comments("x ← 1 // un")
        assert scan.text == "x ← 1 "
        assert not scan.in_block_comment

    def test_inline_block_comment(self):
        """A closed /* */ comment is removed in place."""
        scan = clean_line_from_comments("x /* note */ ← 1")
        assert scan.text == "x  ← 1"

    def test_block_comment_carry(self):
        """An unterminated /* carries to the next line."""
        first = clean_line_from_comments("x ← 1 /* début")
        assert first.text == "x ← 1 "
        assert first.in_block_comment

        middle = clean_line_from_comments("tout ceci est ignoré", first.in_block_comment)
        assert middle.text == ""
        assert middle.in_block_comment

        last = clean_line_from_comments("fin */ y ← 2", middle.in_block_comment)
        assert last.text == " y ← 2"
        assert not last.in_block_comment

    def test_split_returns_comment_body(self):
        """split_comments returns the // body verbatim."""
        result = split_comments("x ← 1 //  garde  ceci ")
        assert result.code == "x ← 1 "
        assert result.line_comment == "  garde  ceci "

    def test_double_slash_inside_string(self):
        """// inside a string literal is not a comment."""
        result = split_comments('écrire("http://exemple.fr") // url')
        assert result.code == 'écrire("http://exemple.fr") '
        assert result.line_comment == " url"

    def test_no_comment(self):
        """A line without comments is returned unchanged."""
        result = split_comments("x ← 1")
        assert result.code == "x ← 1"
        assert result.line_comment is None


# =============================================================================
# Masking
# =============================================================================

class TestMasking:
    """Tests for string and field-access masking."""

    def test_mask_strings_preserves_length(self):
        """String and character literals become blanks of equal length."""
        text = 'écrire("a b", \'c\', x)'
        masked = mask_strings(text)
        assert len(masked) == len(text)
        assert "a b" not in masked
        assert masked.endswith("x)")

    def test_field_chain(self):
        """Only the base variable of a field chain stays visible."""
        assert mask_field_access("date.jour.mois") == "date          "

    def test_field_after_index(self):
        """Fields after an index keep the indexed base."""
        assert mask_field_access("t[i].nom") == "t[i]    "

    @pytest.mark.parametrize("text", [
        "a.b.c + t[i].x",
        "p.nom ← q.age",
        "x ← 3.5",
        "",
    ])
    def test_idempotent(self, text):
        """Masking a masked text changes nothing."""
        once = mask_field_access(text)
        assert mask_field_access(once) == once
        assert len(once) == len(text)

    def test_decimal_numbers_untouched(self):
        """A decimal point is not a field access."""
        assert mask_field_access("x ← 3.5") == "x ← 3.5"


# =============================================================================
# Identifiers and Types
# =============================================================================

class TestIdentifiers:
    """Tests for identifier and type helpers."""

    @pytest.mark.parametrize("text,expected", [
        ("x", True),
        ("élève", True),
        ("_tmp2", True),
        ("2x", False),
        ("t[i]", False),
        ("p.x", False),
        ("f(x)", False),
        ("", False),
    ])
    def test_is_simple_identifier(self, text, expected):
        assert is_simple_identifier(text) is expected

    def test_normalize_type(self):
        """Accent and case variants map to the canonical spelling."""
        assert normalize_type("booleen") == "booléen"
        assert normalize_type("Chaine") == "chaîne"
        assert normalize_type("REEL") == "réel"

    def test_normalize_unknown_type(self):
        """Unknown names pass through unchanged."""
        assert normalize_type("Point") == "Point"

    def test_leading_indentation(self):
        assert leading_indentation("\t  x ← 1") == "\t  "
        assert leading_indentation("x") == ""
