"""Tests for USCN canonicalization.

Covers the canonical subpackage:

1. **Encoding substitution** -- table order, overlapping entries, hex case.
2. **Case folding and whitespace collapsing**.
3. **Bounded output** -- truncation status and the holding area.
4. **Idempotence** -- normalizing a canonical form changes nothing.
5. **Canonical equivalence** -- bool and raising variants.
"""
from __future__ import annotations

import logging

import pytest

from obiprotocol.canonical import (
    DEFAULT_ENCODING_TABLE,
    EncodingRule,
    NormalizationResult,
    USCNContext,
    equivalent,
    find_rule,
    require_equivalent,
    shadowed_rules,
)
from obiprotocol.core.config import EngineConfig
from obiprotocol.core.errors import InvalidInput, ZeroTrustViolation

# ===================================================================
# Fixtures
# ===================================================================


@pytest.fixture
def ctx() -> USCNContext:
    """A context with the default flags (all phases enabled)."""
    return USCNContext()


@pytest.fixture
def case_sensitive_ctx() -> USCNContext:
    """A context that preserves ASCII case."""
    return USCNContext(case_fold=False)


# ===================================================================
# Test: Encoding substitution
# ===================================================================


class TestEncodingSubstitution:
    """Tests for phase 1 of normalization."""

    def test_percent_encoded_traversal(self, ctx: USCNContext) -> None:
        """%2e%2e%2f canonicalizes to ../"""
        assert ctx.normalize("%2e%2e%2f").text == "../"

    def test_encoded_slash(self, ctx: USCNContext) -> None:
        """%2f canonicalizes to /"""
        assert ctx.normalize("%2f").text == "/"

    def test_mixed_encoding_scenario(self, ctx: USCNContext) -> None:
        """..%2e/ canonicalizes to ../ with reported length 3."""
        result = ctx.normalize("..%2e/")
        assert result.text == "../"
        assert result.length == 3
        assert not result.truncated

    def test_single_dot_mixed_encoding(self, ctx: USCNContext) -> None:
        """.%2e/ canonicalizes to ../"""
        assert ctx.normalize(".%2e/").text == "../"

    def test_partially_encoded_traversal(self, ctx: USCNContext) -> None:
        """%2e%2e/ canonicalizes to ../"""
        assert ctx.normalize("%2e%2e/etc").text == "../etc"

    def test_encoded_space(self, ctx: USCNContext) -> None:
        """%20 canonicalizes to a space."""
        assert ctx.normalize("a%20b").text == "a b"

    def test_protocol_delimiters(self, ctx: USCNContext) -> None:
        """%3A and %7C canonicalize to : and |"""
        assert ctx.normalize("SEC%3Ax%7Cy").text == "sec:x|y"

    def test_overlong_dot(self, ctx: USCNContext) -> None:
        """Overlong UTF-8 %c0%ae canonicalizes to a dot."""
        assert ctx.normalize("%c0%ae").text == "."

    def test_hex_digits_are_case_insensitive(self, ctx: USCNContext) -> None:
        """Upper-case percent encodings decode like lower-case ones."""
        assert ctx.normalize("%2E%2E%2F").text == "../"
        assert ctx.normalize("%C0%AE").text == "."

    def test_unencoded_text_copied(self, case_sensitive_ctx: USCNContext) -> None:
        """Text without encodings passes through unchanged."""
        assert case_sensitive_ctx.normalize("Plain-Text_42").text == "Plain-Text_42"

    def test_literal_percent_kept(self, ctx: USCNContext) -> None:
        """A percent sign with no matching rule is copied verbatim."""
        assert ctx.normalize("100%25").text == "100%25"

    def test_encoding_phase_can_be_disabled(self) -> None:
        """With encoding_normalize off, encoded forms are left alone."""
        ctx = USCNContext(encoding_normalize=False)
        assert ctx.normalize("%2f").text == "%2f"

    def test_bytes_input(self, ctx: USCNContext) -> None:
        """Bytes are accepted and mapped one-to-one."""
        assert ctx.normalize(b"%2fetc%2fpasswd").text == "/etc/passwd"


class TestEncodingTable:
    """Tests for table order and overlapping entries."""

    def test_overlong_slash_takes_earliest_rule(self, ctx: USCNContext) -> None:
        """%c0%af maps to the earliest listed canonical form, ../"""
        assert ctx.normalize("%c0%af").text == "../"

    def test_find_rule_returns_first_in_table_order(self) -> None:
        """find_rule returns the first matching rule, not the longest."""
        rule = find_rule("%c0%af", 0)
        assert rule is not None
        assert rule.canonical == "../"
        assert rule.security_risk == "utf8_overlong"

    def test_find_rule_no_match(self) -> None:
        """No rule matches plain text."""
        assert find_rule("abc", 0) is None

    def test_shadowed_rules_reports_overlong_conflict(self) -> None:
        """The duplicate %c0%af entry is reported as shadowed."""
        pairs = shadowed_rules()
        assert len(pairs) == 1
        shadowed, winner = pairs[0]
        assert shadowed.encoded == winner.encoded == "%c0%af"
        assert shadowed.canonical == "/"
        assert winner.canonical == "../"

    def test_shadowed_rules_clean_table(self) -> None:
        """A table without prefix conflicts reports nothing."""
        table = (EncodingRule("%2f", "/", "basic_encoding"),
                 EncodingRule("%2e", ".", "basic_encoding"))
        assert shadowed_rules(table) == []

    def test_custom_table(self) -> None:
        """A context can carry its own substitution table."""
        ctx = USCNContext(table=(EncodingRule("%5c", "\\", "basic_encoding"),))
        assert ctx.normalize("a%5Cb").text == "a\\b"
        assert ctx.normalize("%2f").text == "%2f"

    def test_default_table_is_ordered_longest_first_for_traversal(self) -> None:
        """The multi-character traversal forms precede %2e and %2f."""
        encoded = [rule.encoded for rule in DEFAULT_ENCODING_TABLE]
        assert encoded.index("%2e%2e%2f") < encoded.index("%2e")
        assert encoded.index("%2e%2e/") < encoded.index("%2f")


# ===================================================================
# Test: Case folding and whitespace
# ===================================================================


class TestCaseAndWhitespace:
    """Tests for phases 2 and 3."""

    def test_ascii_case_folding(self, ctx: USCNContext) -> None:
        """ASCII upper-case letters are lowered."""
        assert ctx.normalize("ABC").text == "abc"

    def test_non_ascii_not_folded(self, ctx: USCNContext) -> None:
        """Only ASCII letters are folded."""
        assert ctx.normalize("ÄBC").text == "Äbc"

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("\u017fEC:", "\u017fec:"),
            ("\u212aEY", "\u212aey"),
            ("AUD\u0131T", "aud\u0131t"),
        ],
    )
    def test_unicode_case_variants_kept(
        self, ctx: USCNContext, raw: str, expected: str
    ) -> None:
        """Long s, Kelvin sign and dotless i are not folded to ASCII."""
        assert ctx.normalize(raw).text == expected

    def test_case_preserved_when_disabled(self, case_sensitive_ctx: USCNContext) -> None:
        """Case folding can be switched off."""
        assert case_sensitive_ctx.normalize("ABC").text == "ABC"

    def test_whitespace_runs_collapse(self, ctx: USCNContext) -> None:
        """Mixed whitespace runs collapse to one space."""
        assert ctx.normalize("a \t\n\r b").text == "a b"

    def test_leading_and_trailing_whitespace_kept(self, ctx: USCNContext) -> None:
        """Collapsing does not trim."""
        assert ctx.normalize("  a  ").text == " a "

    def test_encoded_space_joins_whitespace_run(self, ctx: USCNContext) -> None:
        """A decoded %20 collapses with adjacent whitespace."""
        assert ctx.normalize("a%20\tb").text == "a b"

    def test_whitespace_preserved_when_disabled(self) -> None:
        """Whitespace collapsing can be switched off."""
        ctx = USCNContext(whitespace_collapse=False)
        assert ctx.normalize("a \t b").text == "a \t b"


# ===================================================================
# Test: Bounded output
# ===================================================================


class TestBoundedOutput:
    """Tests for truncation and the canonical holding area."""

    def test_output_fits_bound(self, ctx: USCNContext) -> None:
        """Output shorter than the bound is not truncated."""
        result = ctx.normalize("abc", bound=4)
        assert result == NormalizationResult(text="abc", length=3, truncated=False)

    def test_output_truncated_to_bound_minus_one(self, ctx: USCNContext) -> None:
        """One slot of the bound is reserved for the terminator."""
        result = ctx.normalize("abcdef", bound=4)
        assert result.text == "abc"
        assert result.length == 3
        assert result.truncated

    def test_rewrite_never_split_by_bound(self, ctx: USCNContext) -> None:
        """A rewrite that does not fit stops the output instead of leaking raw bytes."""
        result = ctx.normalize("a%2e%2e%2f", bound=3)
        assert result.text == "a"
        assert result.truncated

    def test_truncation_logged(
        self, ctx: USCNContext, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Truncation is logged as a warning."""
        with caplog.at_level(logging.WARNING, logger="obiprotocol.canonical.normalizer"):
            ctx.normalize("abcdef", bound=3)
        assert "truncated" in caplog.text

    def test_default_bound_is_buffer_size(self) -> None:
        """Without an explicit bound the buffer size applies."""
        ctx = USCNContext(buffer_size=5)
        result = ctx.normalize("abcdefgh")
        assert result.text == "abcd"
        assert result.truncated

    def test_invalid_bound_rejected(self, ctx: USCNContext) -> None:
        """A bound below 1 is invalid."""
        with pytest.raises(InvalidInput):
            ctx.normalize("abc", bound=0)

    def test_none_input_rejected(self, ctx: USCNContext) -> None:
        """None is invalid input."""
        with pytest.raises(InvalidInput):
            ctx.normalize(None)  # type: ignore[arg-type]

    def test_non_text_input_rejected(self, ctx: USCNContext) -> None:
        """Only str and bytes are accepted."""
        with pytest.raises(InvalidInput):
            ctx.normalize(42)  # type: ignore[arg-type]

    def test_empty_input(self, ctx: USCNContext) -> None:
        """Empty input normalizes to empty output."""
        assert ctx.normalize("") == NormalizationResult(text="", length=0)

    def test_holding_area_refreshed(self, ctx: USCNContext) -> None:
        """The holding area keeps the latest canonical output."""
        ctx.normalize("FIRST")
        ctx.normalize("%2fSecond")
        assert ctx.canonical_buffer == "/second"

    def test_holding_area_keeps_previous_when_output_too_large(self) -> None:
        """Output that does not fit the holding area leaves it unchanged."""
        ctx = USCNContext(buffer_size=4)
        ctx.normalize("ab")
        ctx.normalize("abcdefgh", bound=20)
        assert ctx.canonical_buffer == "ab"

    def test_tiny_buffer_rejected(self) -> None:
        """A holding area must fit at least one character plus terminator."""
        with pytest.raises(InvalidInput):
            USCNContext(buffer_size=1)

    def test_from_config(self) -> None:
        """Contexts can be built from an EngineConfig."""
        ctx = USCNContext.from_config(
            EngineConfig(case_fold=False, canonical_buffer_size=64)
        )
        assert ctx.buffer_size == 64
        assert ctx.normalize("ABC").text == "ABC"


# ===================================================================
# Test: Idempotence
# ===================================================================


class TestIdempotence:
    """normalize(normalize(x)) == normalize(x) within the bound."""

    @pytest.mark.parametrize(
        "raw",
        [
            "%2e%2e%2f",
            "..%2e/",
            "%2E",
            "%%2e2e",
            "%2%2ee",
            ".%2e%2e/",
            "%c0%af%c0%ae",
            "GET /a%20b%3Ac HTTP/1.1\r\n",
            "OBI-PROTOCOL-1.0:SEC:ABCDEF",
            "\t\t  mixed   %20  runs \n",
        ],
    )
    def test_idempotent(self, ctx: USCNContext, raw: str) -> None:
        """A canonical form is a fixed point of normalization."""
        once = ctx.normalize(raw).text
        assert ctx.normalize(once).text == once

    def test_idempotent_case_sensitive(self, case_sensitive_ctx: USCNContext) -> None:
        """Idempotence also holds without case folding."""
        once = case_sensitive_ctx.normalize("%2E%2e%2F..%2E/").text
        assert case_sensitive_ctx.normalize(once).text == once


# ===================================================================
# Test: Canonical equivalence
# ===================================================================


class TestEquivalence:
    """Tests for equivalent() and require_equivalent()."""

    def test_encoded_traversal_equivalent(self, ctx: USCNContext) -> None:
        """%2e%2e%2f and ../ are the same value."""
        assert equivalent("%2e%2e%2f", "../", ctx)

    def test_encoded_slash_equivalent(self, ctx: USCNContext) -> None:
        """%2f and / are the same value."""
        assert equivalent("%2f", "/", ctx)

    def test_case_equivalent_when_folding(self, ctx: USCNContext) -> None:
        """ABC and abc are the same value when case folding is on."""
        assert equivalent("ABC", "abc", ctx)

    def test_case_distinct_without_folding(self, case_sensitive_ctx: USCNContext) -> None:
        """ABC and abc differ when case folding is off."""
        assert not equivalent("ABC", "abc", case_sensitive_ctx)

    def test_different_values(self, ctx: USCNContext) -> None:
        """Different canonical forms are not equivalent."""
        assert not equivalent("/etc", "/var", ctx)

    def test_truncated_never_equivalent(self, ctx: USCNContext) -> None:
        """Truncated forms cannot establish identity."""
        assert not equivalent("abcdef", "abcdef", ctx, bound=3)

    def test_holding_area_holds_second_input(self, ctx: USCNContext) -> None:
        """After a comparison the holding area holds the second canonical form."""
        equivalent("%2f", "%2e", ctx)
        assert ctx.canonical_buffer == "."

    def test_require_equivalent_returns_canonical(self, ctx: USCNContext) -> None:
        """require_equivalent returns the shared canonical form."""
        assert require_equivalent("%2E%2E%2F", "../", ctx) == "../"

    def test_require_equivalent_raises(self, ctx: USCNContext) -> None:
        """Differing forms raise ZeroTrustViolation."""
        with pytest.raises(ZeroTrustViolation) as exc_info:
            require_equivalent("%2f", "\\", ctx)
        assert exc_info.value.code == "OBI-E400"

    def test_require_equivalent_truncated_raises(self, ctx: USCNContext) -> None:
        """Truncated forms raise ZeroTrustViolation."""
        with pytest.raises(ZeroTrustViolation):
            require_equivalent("abcdef", "abcdef", ctx, bound=2)
