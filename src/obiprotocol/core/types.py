"""OBI protocol shared domain types.

This module defines the closed enumerations shared across the
canonicalizer, the pattern registry, the IR emitter and the export layer.
All public symbols are re-exported from ``obiprotocol.core``.

Enums use *string* values so they serialise cleanly to JSON and YAML.
"""
from __future__ import annotations

import enum

# ---------------------------------------------------------------------------
# Semantic pattern types
# ---------------------------------------------------------------------------

class PatternType(enum.StrEnum):
    """Semantic pattern types recognised by the engine.

    The set is closed; it determines both the IR node a match produces
    and whether the state registered for it is accepting.
    """

    PROTOCOL_HEADER = "protocol_header"
    SECURITY_TOKEN = "security_token"
    DATA_PAYLOAD = "data_payload"
    SCHEMA_REFERENCE = "schema_reference"
    AUDIT_MARKER = "audit_marker"
    TRANSITION_BOUNDARY = "transition_boundary"
    CANONICAL_DELIMITER = "canonical_delimiter"
    ERROR_RECOVERY = "error_recovery"

    @property
    def is_accepting(self) -> bool:
        """Return ``True`` for payload and audit-marker patterns."""
        return self in (PatternType.DATA_PAYLOAD, PatternType.AUDIT_MARKER)


class IRNodeType(enum.StrEnum):
    """Intermediate representation node types."""

    PROTOCOL_MESSAGE = "protocol_message"
    SECURITY_CONTEXT = "security_context"
    PAYLOAD_BLOCK = "payload_block"
    SCHEMA_VALIDATION = "schema_validation"
    AUDIT_RECORD = "audit_record"
    ERROR_CONDITION = "error_condition"


# ---------------------------------------------------------------------------
# Results and policy
# ---------------------------------------------------------------------------

class ScanStatus(enum.StrEnum):
    """Outcome of a single scan.

    * **complete** -- every canonical character was covered by a match
    * **partial** -- at least one match, some characters skipped
    * **no_match** -- nothing matched; every character was skipped
    * **truncated** -- the canonical input was cut at the buffer bound
    """

    COMPLETE = "complete"
    PARTIAL = "partial"
    NO_MATCH = "no_match"
    TRUNCATED = "truncated"


class GovernanceZone(enum.StrEnum):
    """Topology governance zones derived from the governance cost."""

    AUTONOMOUS = "autonomous"
    WARNING = "warning"
    GOVERNANCE = "governance"


class ExportFormat(enum.StrEnum):
    """Specification export formats."""

    YAML = "yaml"
    JSON = "json"
    HEADER = "header"
