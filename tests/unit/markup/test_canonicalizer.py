"""Tests for markup canonicalization of selected fragments."""

from __future__ import annotations

import pytest

from notegrimoire.markup.canonicalizer import (
    canonicalize,
    find_protected_ranges,
    normalize_block_separators,
    strip_generic_wrappers,
    strip_presentational_attributes,
)
from notegrimoire.models import SpanKind

FORMULA = (
    '<span class="katex"><span class="katex-mathml"><math><semantics><mrow>'
    "<mi>E</mi><mo>=</mo><mi>m</mi><msup><mi>c</mi><mn>2</mn></msup>"
    '</mrow></semantics></math></span><span class="katex-html" aria-hidden="true">'
    '<span class="base"><span class="strut" style="height:0.68em;"></span>'
    '<span class="mord mathnormal" style="margin-right:0.05em;">E</span>'
    "</span></span></span>"
)


class TestCanonicalizeBasics:
    """Tests for canonicalize() on ordinary rendered markup."""

    def test_paragraph_with_strong(self) -> None:
        raw = (
            '<p class="md" style="color:red">Hello '
            '<strong class="x">world</strong></p>'
        )
        assert canonicalize(raw) == "Hello <strong>world</strong><br>"

    def test_bold_and_italic_become_strong_and_em(self) -> None:
        assert canonicalize("<b>bold</b> <i>it</i>") == (
            "<strong>bold</strong> <em>it</em>"
        )

    def test_code_attributes_removed(self) -> None:
        raw = '<code class="language-py">x = 1</code>'
        assert canonicalize(raw) == "<code>x = 1</code>"

    def test_links_stripped_keeping_text(self) -> None:
        raw = '<em>see <a href="http://example.org" class="l">the docs</a></em>'
        assert canonicalize(raw) == "<em>see the docs</em>"

    def test_generic_span_unwrapped(self) -> None:
        raw = '<em><span class="token" style="x">lac</span> operon</em>'
        assert canonicalize(raw) == "<em>lac operon</em>"

    def test_block_runs_collapse_to_one_break(self) -> None:
        raw = "<div><p>One</p></div><hr><p>Two</p><br><br>"
        assert canonicalize(raw) == "One<br>Two<br>"

    def test_whitespace_collapsed(self) -> None:
        raw = "<p>lots   of\n\n  space</p>"
        assert canonicalize(raw) == "lots of space<br>"

    def test_table_cells_flattened(self) -> None:
        raw = (
            "<table><thead><tr><th>Gene</th><th>Role</th></tr></thead>"
            "<tbody><tr><td>lacZ</td><td>β-gal</td></tr></tbody></table>"
        )
        assert canonicalize(raw) == "Gene Role <br>lacZ β-gal <br>"

    def test_list_items_become_lines(self) -> None:
        raw = "<ul><li>lacZ</li><li>lacY</li></ul>"
        assert canonicalize(raw) == "lacZ<br>lacY<br>"

    def test_heading_becomes_line(self) -> None:
        assert canonicalize("<h2 id='x'>Title</h2>text") == "Title<br>text"

    def test_empty_markup(self) -> None:
        assert canonicalize("") == ""
        assert canonicalize(None) == ""


class TestProtectedSpans:
    """Tests for formula, superscript and subscript pass-through."""

    def test_formula_byte_identical(self) -> None:
        raw = f"<p>Energy {FORMULA} here</p>"
        result = canonicalize(raw)
        assert FORMULA in result
        assert result == f"Energy {FORMULA} here<br>"

    def test_formula_marker_configurable(self) -> None:
        formula = '<span class="mjx" style="x"><span>y</span></span>'
        result = canonicalize(f"<p>{formula}</p>", formula_marker="mjx")
        assert result == f"{formula}<br>"

    def test_formula_marker_from_settings(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("CAPTURE__FORMULA_MARKER", "mjx")
        formula = '<span class="mjx" style="x">y</span>'
        assert canonicalize(f"<p>{formula}</p>") == f"{formula}<br>"

    def test_unbalanced_formula_not_protected(self) -> None:
        """A formula container that never closes is sanitised like the rest."""
        raw = '<span class="katex" style="x">E'
        assert canonicalize(raw) == "<span>E"

    def test_explicit_sup_verbatim(self) -> None:
        raw = '<p>mc<sup class="s" style="x">2</sup></p>'
        assert canonicalize(raw) == 'mc<sup class="s" style="x">2</sup><br>'

    def test_explicit_sub_verbatim(self) -> None:
        raw = "<p>H<sub data-x='1'>2</sub>O</p>"
        assert canonicalize(raw) == "H<sub data-x='1'>2</sub>O<br>"

    def test_superscript_wrapper_verbatim(self) -> None:
        raw = '<span class="gene" style="x">Lac⁺</span> operon'
        assert canonicalize(raw) == raw

    def test_subscript_wrapper_verbatim(self) -> None:
        raw = '<p><span class="chem">H₂O</span> water</p>'
        assert canonicalize(raw) == '<span class="chem">H₂O</span> water<br>'

    def test_whitespace_inside_protected_span_kept(self) -> None:
        raw = "<p>x<sup>  2 </sup></p>"
        assert canonicalize(raw) == "x<sup>  2 </sup><br>"

    def test_wrapper_holding_placeholder_kept_bare(self) -> None:
        """A wrapper around an explicit sup is not itself protected."""
        raw = '<span class="w" style="x">a⁺ <sup>2</sup></span>'
        assert canonicalize(raw) == "<span>a⁺ <sup>2</sup></span>"

    def test_formula_inside_wrapper(self) -> None:
        raw = f'<span class="outer">{FORMULA}</span>'
        assert canonicalize(raw) == FORMULA

    def test_subscript_wrapper_around_superscript_kept_bare(self) -> None:
        """A subscript wrapper holding a superscript is not itself protected."""
        raw = '<span class="c">H₂ <sup class="q">2</sup></span>'
        assert canonicalize(raw) == '<span>H₂ <sup class="q">2</sup></span>'

    def test_subscript_wrapper_around_formula_kept_bare(self) -> None:
        raw = '<span class="c">H₂ <span class="katex">E</span></span>'
        assert canonicalize(raw) == '<span>H₂ <span class="katex">E</span></span>'

    def test_subscript_wrapper_around_subscript_verbatim(self) -> None:
        """Only subscript tokens inside: the whole wrapper is protected."""
        raw = '<span class="c">H₂<sub class="q">2</sub></span>'
        assert canonicalize(raw) == raw

    def test_subscript_letter_wrapper_verbatim(self) -> None:
        raw = '<p><span class="idx" style="x">xₙ</span></p>'
        assert canonicalize(raw) == '<span class="idx" style="x">xₙ</span><br>'

    def test_data_class_attribute_is_not_a_formula(self) -> None:
        """Only a real class attribute marks a formula container."""
        raw = '<p><span data-class="katex" style="s">y</span> z</p>'
        assert canonicalize(raw) == "y z<br>"


class TestFallback:
    """Tests for the no-tags-left fallback."""

    def test_tagless_markup_uses_plain_text(self) -> None:
        assert canonicalize("A⁺", plain_text="A⁺") == "A<sup>+</sup>"

    def test_plain_text_is_normalized(self) -> None:
        result = canonicalize('<a href="#">Lac+Lac+</a>', plain_text="Lac+Lac+")
        assert result == "Lac+"

    def test_empty_markup_with_plain_text(self) -> None:
        assert canonicalize("", plain_text="H₂O") == "H<sub>2</sub>O"

    def test_without_plain_text_converts_markup_text(self) -> None:
        assert canonicalize('<a href="#">x²</a>') == "x<sup>2</sup>"

    def test_without_plain_text_normalizes_markup_text(self) -> None:
        assert canonicalize('<a href="#">abcabc</a>') == "abc"

    def test_without_plain_text_decodes_entities(self) -> None:
        assert canonicalize('<a href="#">a &amp; b</a>') == "a & b"


class TestCanonicalizeIdempotent:
    """Canonical markup passes through canonicalize() unchanged."""

    @pytest.mark.parametrize(
        "raw",
        [
            '<p class="md" style="color:red">Hello '
            '<strong class="x">world</strong></p>',
            f"<div><p>Energy {FORMULA} here</p></div>",
            '<span class="gene">Lac⁺</span> and <sup>2</sup>',
            "<ul><li><b>lacZ</b></li><li><i>lacY</i></li></ul>",
            '<span class="w">a⁺ <sup>2</sup></span>',
        ],
    )
    def test_second_pass_is_noop(self, raw: str) -> None:
        once = canonicalize(raw)
        assert canonicalize(once) == once


class TestPhases:
    """Tests for individual canonicalization phases."""

    def test_block_separators(self) -> None:
        assert normalize_block_separators("<p>a</p><p>b</p>") == "a<br>b<br>"

    def test_strip_presentational_attributes_only_in_tags(self) -> None:
        markup = '<em class="x" id="y" title="t">class="keep"</em>'
        assert strip_presentational_attributes(markup) == (
            '<em title="t">class="keep"</em>'
        )

    def test_strip_generic_wrappers_unmatched_left(self) -> None:
        assert strip_generic_wrappers("a</span><span>b") == "a</span><span>b"

    def test_strip_generic_wrappers_nested(self) -> None:
        markup = "<span><span>x²</span> y</span>"
        assert strip_generic_wrappers(markup) == "<span><span>x²</span> y</span>"
        assert strip_generic_wrappers("<span><span>x</span> y</span>") == "x y"


class TestFindProtectedRanges:
    """Tests for find_protected_ranges()."""

    def test_finds_each_kind(self) -> None:
        markup = f"{FORMULA} <span>Lac⁺</span> H<sub>2</sub>"
        kinds = [kind for _s, _e, kind in find_protected_ranges(markup, "katex")]
        assert sorted(kinds) == sorted(
            [SpanKind.FORMULA, SpanKind.SUPERSCRIPT, SpanKind.SUBSCRIPT]
        )

    def test_ranges_cover_exact_text(self) -> None:
        markup = "a <span>Lac⁺</span> b"
        [(start, end, kind)] = find_protected_ranges(markup, "katex")
        assert markup[start:end] == "<span>Lac⁺</span>"
        assert kind == SpanKind.SUPERSCRIPT

    def test_sup_inside_formula_not_listed_separately(self) -> None:
        markup = '<span class="katex"><sup>2</sup></span>'
        ranges = find_protected_ranges(markup, "katex")
        assert [kind for _s, _e, kind in ranges] == [SpanKind.FORMULA]
