"""USCN encoding substitution table.

The table lists encoded forms that denote the same semantic content as a
shorter canonical form.  It is scanned in order and the first matching
rule wins, so more specific (longer) encodings must precede the shorter
encodings they contain.

Encoded forms are compared ASCII case-insensitively: percent-encoding hex
digits are case-insensitive, and folding them here keeps normalization
idempotent when case folding later lowers an undecoded ``%2E``.
"""
from __future__ import annotations

import string
from collections.abc import Sequence
from dataclasses import dataclass

_ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)


def ascii_lower(text: str) -> str:
    """Lower ASCII ``A-Z`` only; other characters are left untouched."""
    return text.translate(_ASCII_LOWER)


# ---------------------------------------------------------------------------
# Encoding rule data structure
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class EncodingRule:
    """A single ``encoded -> canonical`` rewrite rule.

    Attributes
    ----------
    encoded:
        The raw encoded form, stored lowercase.
    canonical:
        The canonical replacement.
    security_risk:
        Category of bypass the rule neutralises (``"path_traversal"``,
        ``"utf8_overlong"``, ``"mixed_encoding"``, ``"basic_encoding"``,
        ``"whitespace_encoding"`` or ``"delimiter_encoding"``).
    """

    encoded: str
    canonical: str
    security_risk: str

    def matches(self, text: str, pos: int) -> bool:
        """Return ``True`` if the encoded form occurs in *text* at *pos*."""
        end = pos + len(self.encoded)
        if end > len(text):
            return False
        return ascii_lower(text[pos:end]) == self.encoded


# ---------------------------------------------------------------------------
# Default table (order is priority)
# ---------------------------------------------------------------------------

DEFAULT_ENCODING_TABLE: tuple[EncodingRule, ...] = (
    # Path traversal
    EncodingRule("%2e%2e%2f", "../", "path_traversal"),
    EncodingRule("..%2e/", "../", "mixed_encoding"),
    EncodingRule("%c0%af", "../", "utf8_overlong"),
    EncodingRule(".%2e/", "../", "mixed_encoding"),
    EncodingRule("%2e%2e/", "../", "mixed_encoding"),
    # Single characters
    EncodingRule("%2f", "/", "basic_encoding"),
    EncodingRule("%2e", ".", "basic_encoding"),
    EncodingRule("%20", " ", "whitespace_encoding"),
    # Overlong UTF-8
    EncodingRule("%c0%ae", ".", "utf8_overlong"),
    EncodingRule("%c0%af", "/", "utf8_overlong"),
    # Protocol delimiters
    EncodingRule("%3a", ":", "delimiter_encoding"),
    EncodingRule("%7c", "|", "delimiter_encoding"),
)


def find_rule(
    text: str, pos: int, table: Sequence[EncodingRule] = DEFAULT_ENCODING_TABLE
) -> EncodingRule | None:
    """Return the first rule in *table* whose encoded form occurs at *pos*."""
    for rule in table:
        if rule.matches(text, pos):
            return rule
    return None


def shadowed_rules(
    table: Sequence[EncodingRule] = DEFAULT_ENCODING_TABLE,
) -> list[tuple[EncodingRule, EncodingRule]]:
    """Return ``(shadowed, winner)`` pairs for rules that can never fire.

    A rule is shadowed when an earlier rule's encoded form is a prefix of
    its own: wherever it would match, the earlier rule matches first.  In
    the default table the overlong ``%c0%af -> /`` entry is shadowed by
    ``%c0%af -> ../``, so that sequence canonicalises to ``../``.
    """
    pairs: list[tuple[EncodingRule, EncodingRule]] = []
    for index, rule in enumerate(table):
        for earlier in table[:index]:
            if rule.encoded.startswith(earlier.encoded):
                pairs.append((rule, earlier))
                break
    return pairs
