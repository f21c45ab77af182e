"""OBI protocol core: shared types, errors and configuration."""
from __future__ import annotations

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

__all__ = [
    "CapacityError",
    "EngineConfig",
    "EngineError",
    "EngineNotInitialized",
    "ExportFormat",
    "ExportFormatNotSupported",
    "GovernanceZone",
    "IRNodeType",
    "InputError",
    "InvalidInput",
    "MissingPatternRule",
    "OBIProtocolError",
    "PatternCompileError",
    "PatternType",
    "ScanStatus",
    "TableFull",
    "TransitionTableFull",
    "ValidationError",
    "ValidationFailed",
    "ZeroTrustError",
    "ZeroTrustViolation",
]
