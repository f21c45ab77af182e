"""USCN normalization -- canonical form before any validation.

Rewrites raw input into a single canonical representation so that no
pattern is ever tested against a non-canonical encoding.  Three ordered
phases are applied:

1. Encoding substitution (see :mod:`obiprotocol.canonical.encoding`)
2. ASCII case folding
3. Whitespace collapsing (space, tab, CR, LF runs become one space)

Output is bounded.  Rather than erroring, normalization stops at the
bound and reports ``truncated=True``; callers making security decisions
must reject truncated results.
"""
from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass

from obiprotocol.canonical.encoding import (
    DEFAULT_ENCODING_TABLE,
    EncodingRule,
    ascii_lower,
    find_rule,
    shadowed_rules,
)
from obiprotocol.core.config import EngineConfig
from obiprotocol.core.errors import InvalidInput

logger = logging.getLogger(__name__)

CANONICAL_BUFFER_SIZE = 8192
"""Default size of the canonical holding area (terminator slot included)."""

_WHITESPACE_RUN_RE = re.compile(r"[ \t\n\r]+")


@dataclass(frozen=True, slots=True)
class NormalizationResult:
    """The canonical form produced by one normalization call."""

    text: str
    length: int
    truncated: bool = False

    def __str__(self) -> str:
        return self.text


def coerce_input(data: str | bytes | bytearray | None) -> str:
    """Return *data* as ``str``; bytes map one-to-one via latin-1.

    Raises
    ------
    InvalidInput
        If *data* is ``None`` or not text/bytes.
    """
    if data is None:
        raise InvalidInput("Input must not be None")
    if isinstance(data, (bytes, bytearray)):
        return bytes(data).decode("latin-1")
    if isinstance(data, str):
        return data
    raise InvalidInput(
        f"Expected str or bytes, got {type(data).__name__}",
        details={"type": type(data).__name__},
    )


class USCNContext:
    """Canonicalization context: flags, encoding table and holding area.

    One context lives for the lifetime of an engine and is mutated on
    every :meth:`normalize` call (the holding area is refreshed).  It is
    not safe for concurrent use.

    Parameters
    ----------
    case_fold:
        Lower ASCII letters in phase 2.
    whitespace_collapse:
        Collapse whitespace runs in phase 3.
    encoding_normalize:
        Apply the encoding substitution table in phase 1.
    buffer_size:
        Size of the canonical holding area and the default output bound.
    table:
        Ordered encoding substitution rules.
    """

    def __init__(
        self,
        *,
        case_fold: bool = True,
        whitespace_collapse: bool = True,
        encoding_normalize: bool = True,
        buffer_size: int = CANONICAL_BUFFER_SIZE,
        table: Sequence[EncodingRule] = DEFAULT_ENCODING_TABLE,
    ) -> None:
        if buffer_size < 2:
            raise InvalidInput(
                "buffer_size must leave room for at least one character",
                details={"buffer_size": buffer_size},
            )
        self.case_fold = case_fold
        self.whitespace_collapse = whitespace_collapse
        self.encoding_normalize = encoding_normalize
        self._buffer_size = buffer_size
        self._table: tuple[EncodingRule, ...] = tuple(table)
        self._canonical_buffer = ""

        for shadowed, winner in shadowed_rules(self._table):
            logger.debug(
                "Encoding rule %r -> %r is shadowed by %r -> %r",
                shadowed.encoded,
                shadowed.canonical,
                winner.encoded,
                winner.canonical,
            )

    @classmethod
    def from_config(cls, config: EngineConfig) -> USCNContext:
        """Build a context from an :class:`EngineConfig`."""
        return cls(
            case_fold=config.case_fold,
            whitespace_collapse=config.whitespace_collapse,
            encoding_normalize=config.encoding_normalize,
            buffer_size=config.canonical_buffer_size,
        )

    # -- public properties --------------------------------------------------

    @property
    def buffer_size(self) -> int:
        """Return the size of the canonical holding area."""
        return self._buffer_size

    @property
    def table(self) -> tuple[EncodingRule, ...]:
        """Return the ordered encoding substitution table."""
        return self._table

    @property
    def canonical_buffer(self) -> str:
        """Return the most recent canonical output that fit the holding area."""
        return self._canonical_buffer

    # -- normalization ------------------------------------------------------

    def normalize(
        self, data: str | bytes | bytearray, bound: int | None = None
    ) -> NormalizationResult:
        """Canonicalize *data* into at most ``bound - 1`` characters.

        ``bound`` defaults to :attr:`buffer_size`; one slot is reserved for
        the terminator of the wire representation.

        Raises
        ------
        InvalidInput
            If *data* is ``None`` or *bound* is smaller than 1.
        """
        text = coerce_input(data)
        limit = self._buffer_size if bound is None else bound
        if limit < 1:
            raise InvalidInput(
                "Output bound must be at least 1", details={"bound": limit}
            )

        substituted, consumed = self._substitute(text, limit - 1)
        truncated = consumed < len(text)

        if self.case_fold:
            substituted = ascii_lower(substituted)
        if self.whitespace_collapse:
            substituted = _WHITESPACE_RUN_RE.sub(" ", substituted)

        if len(substituted) < self._buffer_size:
            self._canonical_buffer = substituted

        if truncated:
            logger.warning(
                "Canonical output truncated at %d characters (%d of %d input "
                "characters consumed)",
                limit - 1,
                consumed,
                len(text),
            )

        return NormalizationResult(
            text=substituted, length=len(substituted), truncated=truncated
        )

    # -- internal -----------------------------------------------------------

    def _substitute(self, text: str, capacity: int) -> tuple[str, int]:
        """Phase 1: apply the encoding table left to right.

        Returns the substituted text and the number of input characters
        consumed.  Stops before a rewrite or character that would exceed
        *capacity*, so a raw encoded prefix is never emitted.
        """
        out: list[str] = []
        used = 0
        pos = 0
        while pos < len(text):
            rule = find_rule(text, pos, self._table) if self.encoding_normalize else None
            if rule is not None:
                piece, step = rule.canonical, len(rule.encoded)
            else:
                piece, step = text[pos], 1
            if used + len(piece) > capacity:
                break
            out.append(piece)
            used += len(piece)
            pos += step
        return "".join(out), pos
