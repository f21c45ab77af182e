"""OBI Protocol -- canonicalization and pattern-recognition engine.

Untrusted input is normalized into one canonical form (USCN) before any
pattern is tested, then scanned against an ordered registry of semantic
patterns to produce an intermediate representation and a running
governance cost.

Packages
--------
* Core types, errors and configuration (:mod:`obiprotocol.core`)
* USCN canonicalization (:mod:`obiprotocol.canonical`)
* Pattern registry, scanner, IR and governance (:mod:`obiprotocol.dfa`)
"""
from __future__ import annotations

__version__ = "1.0.0a1"

from obiprotocol.canonical import (
    DEFAULT_ENCODING_TABLE,
    EncodingRule,
    NormalizationResult,
    USCNContext,
    equivalent,
    require_equivalent,
    shadowed_rules,
)
from obiprotocol.core.config import EngineConfig
from obiprotocol.core.errors import (
    CapacityError,
    EngineError,
    EngineNotInitialized,
    ExportFormatNotSupported,
    InputError,
    InvalidInput,
    MissingPatternRule,
    OBIProtocolError,
    PatternCompileError,
    TableFull,
    TransitionTableFull,
    ValidationError,
    ValidationFailed,
    ZeroTrustError,
    ZeroTrustViolation,
)
from obiprotocol.core.types import (
    ExportFormat,
    GovernanceZone,
    IRNodeType,
    PatternType,
    ScanStatus,
)
from obiprotocol.dfa import (
    AUDIT_TIMESTAMP,
    HEADER_MARKER,
    PAYLOAD_DELIMITER,
    SCHEMA_REFERENCE,
    SECURITY_TOKEN,
    IRList,
    IRNode,
    PatternEngine,
    ProtocolDFA,
    ScanResult,
    State,
    Transition,
    classify_zone,
    initialize,
    register_standard_patterns,
)

__all__ = [
    "AUDIT_TIMESTAMP",
    "CapacityError",
    "DEFAULT_ENCODING_TABLE",
    "EncodingRule",
    "EngineConfig",
    "EngineError",
    "EngineNotInitialized",
    "ExportFormat",
    "ExportFormatNotSupported",
    "GovernanceZone",
    "HEADER_MARKER",
    "IRList",
    "IRNode",
    "IRNodeType",
    "InputError",
    "InvalidInput",
    "MissingPatternRule",
    "NormalizationResult",
    "OBIProtocolError",
    "PAYLOAD_DELIMITER",
    "PatternCompileError",
    "PatternEngine",
    "PatternType",
    "ProtocolDFA",
    "SCHEMA_REFERENCE",
    "SECURITY_TOKEN",
    "ScanResult",
    "ScanStatus",
    "State",
    "TableFull",
    "Transition",
    "TransitionTableFull",
    "USCNContext",
    "ValidationError",
    "ValidationFailed",
    "ZeroTrustError",
    "ZeroTrustViolation",
    "__version__",
    "classify_zone",
    "equivalent",
    "initialize",
    "register_standard_patterns",
    "require_equivalent",
    "shadowed_rules",
]
