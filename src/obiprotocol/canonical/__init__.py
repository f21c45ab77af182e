"""USCN canonicalization.

This subpackage implements the canonicalization step that runs before any
pattern is tested.  It provides:

* **USCNContext** -- normalization flags, encoding table and the canonical
  holding area; :meth:`USCNContext.normalize` runs the three phases.
* **NormalizationResult** -- canonical text, length and truncation flag.
* **EncodingRule** / **DEFAULT_ENCODING_TABLE** -- the ordered rewrite
  table, plus :func:`shadowed_rules` to report unreachable entries.
* **equivalent** / **require_equivalent** -- canonical identity checks.
"""
from __future__ import annotations

from obiprotocol.canonical.encoding import (
    DEFAULT_ENCODING_TABLE,
    EncodingRule,
    find_rule,
    shadowed_rules,
)
from obiprotocol.canonical.equivalence import equivalent, require_equivalent
from obiprotocol.canonical.normalizer import (
    CANONICAL_BUFFER_SIZE,
    NormalizationResult,
    USCNContext,
)

__all__ = [
    "CANONICAL_BUFFER_SIZE",
    "DEFAULT_ENCODING_TABLE",
    "EncodingRule",
    "NormalizationResult",
    "USCNContext",
    "equivalent",
    "find_rule",
    "require_equivalent",
    "shadowed_rules",
]
