"""OBI protocol engine error-code hierarchy.

Every fatal condition the canonicalization and pattern-recognition engine
can report is represented as a concrete exception class.  Non-fatal
conditions (truncated normalization, unmatched scan regions) are not
errors; they are reported as status fields on the returned results.

Hierarchy
---------
::

    OBIProtocolError
    +-- InputError        (OBI-E1xx)
    +-- CapacityError     (OBI-E2xx)
    +-- ValidationError   (OBI-E3xx)
    +-- ZeroTrustError    (OBI-E4xx)
    +-- EngineError       (OBI-E5xx)

Usage
-----
Raise concrete subclasses directly::

    raise TableFull(details={"max_states": 256})

Catch by category::

    try:
        ...
    except CapacityError:
        # handles TableFull and TransitionTableFull
        ...
"""
from __future__ import annotations

from typing import Any

# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------

class OBIProtocolError(Exception):
    """Base exception for all OBI protocol engine errors.

    Attributes
    ----------
    code : str
        Engine error code, e.g. ``"OBI-E100"``.
    message : str
        Human-readable description.
    details : dict[str, Any]
        Machine-readable context specific to the error instance.
    resolution : str
        Suggested action for the caller.
    """

    code: str = "OBI-E000"
    message: str = "Unknown OBI protocol error"
    resolution: str = ""

    def __init__(
        self,
        message: str | None = None,
        *,
        details: dict[str, Any] | None = None,
        resolution: str | None = None,
    ) -> None:
        self.details: dict[str, Any] = details or {}
        if message is not None:
            self.message = message
        if resolution is not None:
            self.resolution = resolution
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialise the error to a structured error payload."""
        payload: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            payload["detail"] = self.details
        if self.resolution:
            payload["resolution"] = self.resolution
        return {"error": payload}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


# ===================================================================
# Category base classes
# ===================================================================

class InputError(OBIProtocolError):
    """OBI-E1xx -- Missing or malformed arguments."""

    code = "OBI-E1XX"


class CapacityError(OBIProtocolError):
    """OBI-E2xx -- A bounded registry table is exhausted."""

    code = "OBI-E2XX"


class ValidationError(OBIProtocolError):
    """OBI-E3xx -- Input did not satisfy the caller's acceptance policy."""

    code = "OBI-E3XX"


class ZeroTrustError(OBIProtocolError):
    """OBI-E4xx -- Canonical identity could not be established."""

    code = "OBI-E4XX"


class EngineError(OBIProtocolError):
    """OBI-E5xx -- Engine lifecycle and unsupported operations."""

    code = "OBI-E5XX"


# ===================================================================
# OBI-E1xx  Input Errors
# ===================================================================

class InvalidInput(InputError):
    """OBI-E100 -- A required argument is missing, empty or malformed."""

    code = "OBI-E100"
    message = "Invalid input"
    resolution = "Pass a non-empty str or bytes value."


class MissingPatternRule(InputError):
    """OBI-E101 -- A pattern registration did not carry a match rule."""

    code = "OBI-E101"
    message = "Pattern registration requires a match rule"
    resolution = "Supply a regular-expression match rule for the pattern."


class PatternCompileError(InputError):
    """OBI-E102 -- A match rule is too long or is not a valid expression."""

    code = "OBI-E102"
    message = "Pattern match rule could not be compiled"
    resolution = (
        "Check the rule against the engine's regex dialect and the "
        "configured maximum pattern length."
    )


# ===================================================================
# OBI-E2xx  Capacity Errors
# ===================================================================

class TableFull(CapacityError):
    """OBI-E200 -- The state table has reached its configured capacity."""

    code = "OBI-E200"
    message = "State table is full"
    resolution = "Raise EngineConfig.max_states or register fewer patterns."


class TransitionTableFull(CapacityError):
    """OBI-E201 -- The transition table has reached its configured capacity."""

    code = "OBI-E201"
    message = "Transition table is full"
    resolution = "Raise EngineConfig.max_transitions or declare fewer transitions."


# ===================================================================
# OBI-E3xx  Validation Errors
# ===================================================================

class ValidationFailed(ValidationError):
    """OBI-E300 -- No accepting pattern was reached for the input."""

    code = "OBI-E300"
    message = "Input did not reach an accepting state"
    resolution = (
        "Ensure the input carries a payload or audit marker recognised "
        "by a registered accepting pattern."
    )


# ===================================================================
# OBI-E4xx  Zero Trust Errors
# ===================================================================

class ZeroTrustViolation(ZeroTrustError):
    """OBI-E400 -- Canonical identity was required but not established."""

    code = "OBI-E400"
    message = "Zero Trust violation: canonical forms differ"
    resolution = (
        "Reject the input; validation must only be performed on a "
        "complete canonical representation."
    )


# ===================================================================
# OBI-E5xx  Engine Errors
# ===================================================================

class EngineNotInitialized(EngineError):
    """OBI-E500 -- The engine was used before initialize or after teardown."""

    code = "OBI-E500"
    message = "Engine is not initialized"
    resolution = "Call ProtocolDFA.initialize() before using the engine."


class ExportFormatNotSupported(EngineError):
    """OBI-E501 -- The requested specification export format is unknown."""

    code = "OBI-E501"
    message = "Specification export format is not supported"
    resolution = "Use one of 'yaml', 'json' or 'header'."
