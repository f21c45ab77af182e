"""Protocol DFA -- semantic pattern recognition over canonical input.

This subpackage provides:

* **ProtocolDFA** / **initialize** -- the caller-owned engine: USCN
  normalization, pattern registration, scanning, governance cost and
  specification export.
* **PatternRegistry** / **State** / **Transition** -- the ordered state
  table and declared transitions.
* **PatternEngine** -- anchored prefix matching with ``google-re2``
  when installed and stdlib ``re`` otherwise.
* **scan** / **ScanResult** -- the left-to-right first-match scanner.
* **IRNode** / **IRList** -- the intermediate representation.
* **classify_zone** / **governance_cost** -- governance accounting.
* The predefined cross-layer patterns and
  :func:`register_standard_patterns`.
"""
from __future__ import annotations

from obiprotocol.dfa.engine import INITIAL_STATE, ProtocolDFA, initialize
from obiprotocol.dfa.export import (
    DFASpecification,
    build_specification,
    export_specification,
    render_specification,
)
from obiprotocol.dfa.governance import (
    CostAccumulator,
    classify_zone,
    governance_cost,
)
from obiprotocol.dfa.ir import IRList, IRNode, create_ir_node, ir_node_type_for
from obiprotocol.dfa.matcher import ScanResult, scan
from obiprotocol.dfa.pattern_engine import PatternEngine
from obiprotocol.dfa.patterns import (
    AUDIT_TIMESTAMP,
    HEADER_MARKER,
    PAYLOAD_DELIMITER,
    SCHEMA_REFERENCE,
    SECURITY_TOKEN,
    STANDARD_PATTERNS,
    register_standard_patterns,
)
from obiprotocol.dfa.registry import PatternRegistry, State, Transition, Validator

__all__ = [
    "AUDIT_TIMESTAMP",
    "CostAccumulator",
    "DFASpecification",
    "HEADER_MARKER",
    "INITIAL_STATE",
    "IRList",
    "IRNode",
    "PAYLOAD_DELIMITER",
    "PatternEngine",
    "PatternRegistry",
    "ProtocolDFA",
    "SCHEMA_REFERENCE",
    "SECURITY_TOKEN",
    "STANDARD_PATTERNS",
    "ScanResult",
    "State",
    "Transition",
    "Validator",
    "build_specification",
    "classify_zone",
    "create_ir_node",
    "export_specification",
    "governance_cost",
    "initialize",
    "ir_node_type_for",
    "register_standard_patterns",
    "render_specification",
    "scan",
]
