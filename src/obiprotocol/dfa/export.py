"""Cross-language specification export.

Renders the live configuration of an engine -- normalization flags,
encoding table, registered states, declared transitions, governance
figures and the IR mapping -- as YAML, JSON or a C header so that other
language bindings can be generated from the same source of truth.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

import yaml
from pydantic import BaseModel, ConfigDict, Field

from obiprotocol.canonical.encoding import shadowed_rules
from obiprotocol.core.errors import ExportFormatNotSupported
from obiprotocol.core.types import ExportFormat, GovernanceZone, IRNodeType, PatternType
from obiprotocol.dfa import patterns
from obiprotocol.dfa.ir import ir_node_type_for

if TYPE_CHECKING:
    from obiprotocol.dfa.engine import ProtocolDFA

PROTOCOL_VERSION = "1.0"
SCHEMA_VERSION = "AEGIS-DFA-2025.1"

_FORMAT_ALIASES: dict[str, ExportFormat] = {
    "yml": ExportFormat.YAML,
    "c_header": ExportFormat.HEADER,
}

# ---------------------------------------------------------------------------
# Pydantic models
# ---------------------------------------------------------------------------


class TransitionSpec(BaseModel):
    model_config = ConfigDict(strict=True)

    to_state: int
    input_symbol: str
    cost_weight: float


class StateSpec(BaseModel):
    """One registered state as exported."""

    model_config = ConfigDict(strict=True)

    id: int
    pattern_type: PatternType
    regex: str
    is_initial: bool
    is_accepting: bool
    zero_trust_validation: bool
    has_validator: bool = False
    transitions: list[TransitionSpec] = Field(default_factory=list)


class EncodingSpec(BaseModel):
    model_config = ConfigDict(strict=True)

    encoded: str
    canonical: str
    security_risk: str
    shadowed: bool = False


class GovernanceSpec(BaseModel):
    model_config = ConfigDict(strict=True)

    cost_threshold: float
    warning_threshold: float
    current_cost: float
    zone: GovernanceZone


class LimitsSpec(BaseModel):
    model_config = ConfigDict(strict=True)

    max_states: int
    max_transitions: int
    max_pattern_length: int
    canonical_buffer_size: int


class IRMappingSpec(BaseModel):
    model_config = ConfigDict(strict=True)

    state_pattern: PatternType
    ir_node_type: IRNodeType


class DFASpecification(BaseModel):
    """Serializable description of a configured engine."""

    model_config = ConfigDict(strict=True)

    protocol_version: str = PROTOCOL_VERSION
    schema_version: str = SCHEMA_VERSION
    zero_trust_enforced: bool
    uscn_normalization_enabled: bool
    case_fold: bool
    whitespace_collapse: bool
    limits: LimitsSpec
    governance: GovernanceSpec
    uscn_mappings: list[EncodingSpec]
    states: list[StateSpec]
    ir_generation: list[IRMappingSpec]


# ---------------------------------------------------------------------------
# Building and rendering
# ---------------------------------------------------------------------------


def parse_format(fmt: ExportFormat | str) -> ExportFormat:
    """Resolve *fmt* to an :class:`ExportFormat`.

    Raises
    ------
    ExportFormatNotSupported
        If *fmt* names no known format.
    """
    if isinstance(fmt, ExportFormat):
        return fmt
    key = str(fmt).strip().lower()
    if key in _FORMAT_ALIASES:
        return _FORMAT_ALIASES[key]
    try:
        return ExportFormat(key)
    except ValueError as exc:
        raise ExportFormatNotSupported(
            f"Specification export format is not supported: {fmt!r}",
            details={"format": str(fmt), "supported": [f.value for f in ExportFormat]},
        ) from exc


def build_specification(engine: ProtocolDFA) -> DFASpecification:
    """Snapshot *engine* into a :class:`DFASpecification`."""
    config = engine.config
    context = engine.context
    registry = engine.registry
    shadowed = {id(rule) for rule, _ in shadowed_rules(context.table)}
    cost = engine.cost()

    states = [
        StateSpec(
            id=state.state_id,
            pattern_type=state.pattern_type,
            regex=state.rule,
            is_initial=state.state_id == 0,
            is_accepting=state.is_accepting,
            zero_trust_validation=state.requires_zero_trust,
            has_validator=state.validator is not None,
            transitions=[
                TransitionSpec(
                    to_state=t.to_state,
                    input_symbol=t.input_symbol,
                    cost_weight=float(t.cost_weight),
                )
                for t in registry.transitions_from(state.state_id)
            ],
        )
        for state in registry.states
    ]

    return DFASpecification(
        zero_trust_enforced=engine.zero_trust_enforced,
        uscn_normalization_enabled=context.encoding_normalize,
        case_fold=context.case_fold,
        whitespace_collapse=context.whitespace_collapse,
        limits=LimitsSpec(
            max_states=registry.max_states,
            max_transitions=registry.max_transitions,
            max_pattern_length=config.max_pattern_length,
            canonical_buffer_size=context.buffer_size,
        ),
        governance=GovernanceSpec(
            cost_threshold=config.autonomous_threshold,
            warning_threshold=config.warning_threshold,
            current_cost=cost,
            zone=engine.zone(),
        ),
        uscn_mappings=[
            EncodingSpec(
                encoded=rule.encoded,
                canonical=rule.canonical,
                security_risk=rule.security_risk,
                shadowed=id(rule) in shadowed,
            )
            for rule in context.table
        ],
        states=states,
        ir_generation=[
            IRMappingSpec(state_pattern=p, ir_node_type=ir_node_type_for(p))
            for p in PatternType
        ],
    )


def render_specification(spec: DFASpecification, fmt: ExportFormat | str) -> str:
    """Render *spec* in the requested format."""
    export_format = parse_format(fmt)
    if export_format is ExportFormat.JSON:
        return spec.model_dump_json(indent=2)
    if export_format is ExportFormat.YAML:
        return yaml.safe_dump(
            spec.model_dump(mode="json"), sort_keys=False, allow_unicode=True
        )
    return _render_header(spec)


def export_specification(engine: ProtocolDFA, fmt: ExportFormat | str) -> str:
    """Export *engine* as ``yaml``, ``json`` or a C ``header``."""
    return render_specification(build_specification(engine), fmt)


# ---------------------------------------------------------------------------
# C header rendering
# ---------------------------------------------------------------------------

_HEADER_CONSTANTS: tuple[tuple[str, str], ...] = (
    ("OBI_PATTERN_HEADER_MARKER", patterns.HEADER_MARKER),
    ("OBI_PATTERN_SECURITY_TOKEN", patterns.SECURITY_TOKEN),
    ("OBI_PATTERN_PAYLOAD_DELIMITER", patterns.PAYLOAD_DELIMITER),
    ("OBI_PATTERN_SCHEMA_REF", patterns.SCHEMA_REFERENCE),
    ("OBI_PATTERN_AUDIT_TIMESTAMP", patterns.AUDIT_TIMESTAMP),
)


def _c_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _render_header(spec: DFASpecification) -> str:
    lines = [
        "/*",
        " * OBI Protocol DFA Specification (generated)",
        f" * protocol {spec.protocol_version}, schema {spec.schema_version}",
        " */",
        "",
        "#ifndef OBIPROTOCOL_DFA_SPEC_H",
        "#define OBIPROTOCOL_DFA_SPEC_H",
        "",
        f"#define OBI_MAX_STATES {spec.limits.max_states}",
        f"#define OBI_MAX_TRANSITIONS {spec.limits.max_transitions}",
        f"#define OBI_MAX_PATTERN_LENGTH {spec.limits.max_pattern_length}",
        f"#define OBI_CANONICAL_BUFFER_SIZE {spec.limits.canonical_buffer_size}",
        f"#define OBI_ZERO_TRUST_ENFORCED {int(spec.zero_trust_enforced)}",
        f"#define OBI_STATE_COUNT {len(spec.states)}",
        "",
    ]
    for name, value in _HEADER_CONSTANTS:
        lines.append(f"static const char *{name} = {_c_string(value)};")
    lines.extend([
        "",
        "typedef struct {",
        "    unsigned int state_id;",
        "    const char *pattern_type;",
        "    const char *regex;",
        "    int is_accepting;",
        "    int requires_zero_trust;",
        "} obi_dfa_state_spec_t;",
        "",
        "static const obi_dfa_state_spec_t OBI_DFA_STATES[] = {",
    ])
    for state in spec.states:
        lines.append(
            f"    {{{state.id}, {_c_string(state.pattern_type.value)}, "
            f"{_c_string(state.regex)}, {int(state.is_accepting)}, "
            f"{int(state.zero_trust_validation)}}},"
        )
    lines.extend([
        "};",
        "",
        "#endif /* OBIPROTOCOL_DFA_SPEC_H */",
        "",
    ])
    return "\n".join(lines)
