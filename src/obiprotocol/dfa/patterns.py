"""Predefined cross-layer semantic patterns.

These literals are the pattern vocabulary shared by every layer of the
protocol stack and by existing deployments; their matching semantics
must not change.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

from obiprotocol.core.types import PatternType

if TYPE_CHECKING:
    from obiprotocol.dfa.engine import ProtocolDFA

HEADER_MARKER = r"^OBI-PROTOCOL-[0-9]+\.[0-9]+:"
"""Protocol identification header, e.g. ``OBI-PROTOCOL-1.0:``."""

SECURITY_TOKEN = r"SEC:[A-F0-9]{64}"
"""Security token: ``SEC:`` followed by 64 hex characters."""

PAYLOAD_DELIMITER = r"PAYLOAD\|[0-9]+\|"
"""Payload block delimiter carrying the declared payload length."""

SCHEMA_REFERENCE = r"SCHEMA:[A-Za-z0-9_-]+\.[0-9]+"
"""Schema reference, e.g. ``SCHEMA:order_v2.1``."""

AUDIT_TIMESTAMP = r"AUDIT:[0-9]{13}"
"""Audit marker carrying a 13-digit millisecond timestamp."""


# Recommended registration order: more specific patterns first.
STANDARD_PATTERNS: tuple[tuple[PatternType, str], ...] = (
    (PatternType.PROTOCOL_HEADER, HEADER_MARKER),
    (PatternType.SECURITY_TOKEN, SECURITY_TOKEN),
    (PatternType.SCHEMA_REFERENCE, SCHEMA_REFERENCE),
    (PatternType.DATA_PAYLOAD, PAYLOAD_DELIMITER),
    (PatternType.AUDIT_MARKER, AUDIT_TIMESTAMP),
)


def register_standard_patterns(
    engine: ProtocolDFA, *, include_header: bool = False
) -> list[int]:
    """Register the standard vocabulary on *engine* and return the state ids.

    The header marker is already installed as state 0 by
    :meth:`ProtocolDFA.initialize`, so it is skipped unless
    *include_header* is set.
    """
    state_ids: list[int] = []
    for pattern_type, rule in STANDARD_PATTERNS:
        if rule == HEADER_MARKER and not include_header:
            continue
        state_ids.append(engine.register_pattern(pattern_type, rule))
    return state_ids
