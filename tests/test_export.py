"""Tests for specification export (YAML, JSON and C header)."""
from __future__ import annotations

import json

import pytest
import yaml

from obiprotocol import (
    ExportFormat,
    ExportFormatNotSupported,
    PatternType,
    ProtocolDFA,
    initialize,
    register_standard_patterns,
)
from obiprotocol.dfa.export import (
    SCHEMA_VERSION,
    DFASpecification,
    build_specification,
    parse_format,
)

# ===================================================================
# Fixtures
# ===================================================================


@pytest.fixture
def engine() -> ProtocolDFA:
    """An engine with the standard vocabulary and one transition."""
    dfa = initialize(zero_trust_mode=True)
    register_standard_patterns(dfa)
    dfa.add_transition(0, 1, "s", 0.25)
    return dfa


# ===================================================================
# Test: Specification model
# ===================================================================


class TestBuildSpecification:
    """Tests for the snapshot model."""

    def test_states(self, engine: ProtocolDFA) -> None:
        """Every registered state is described in order."""
        spec = build_specification(engine)
        assert [s.id for s in spec.states] == [0, 1, 2, 3, 4]
        assert spec.states[0].is_initial
        assert not spec.states[1].is_initial
        assert [s.is_accepting for s in spec.states] == [False, False, False, True, True]

    def test_transitions(self, engine: ProtocolDFA) -> None:
        """Declared transitions are listed under their source state."""
        spec = build_specification(engine)
        transitions = spec.states[0].transitions
        assert len(transitions) == 1
        assert transitions[0].to_state == 1
        assert transitions[0].input_symbol == "s"
        assert transitions[0].cost_weight == pytest.approx(0.25)

    def test_shadowed_encoding_flagged(self, engine: ProtocolDFA) -> None:
        """The unreachable overlong entry is flagged."""
        spec = build_specification(engine)
        shadowed = [m for m in spec.uscn_mappings if m.shadowed]
        assert len(shadowed) == 1
        assert shadowed[0].encoded == "%c0%af"
        assert shadowed[0].canonical == "/"

    def test_governance_snapshot(self, engine: ProtocolDFA) -> None:
        """The governance section reflects the live cost."""
        spec = build_specification(engine)
        assert spec.governance.current_cost == pytest.approx(engine.cost())
        assert spec.governance.zone == engine.zone()
        assert spec.zero_trust_enforced

    def test_ir_mapping_covers_all_pattern_types(self, engine: ProtocolDFA) -> None:
        """The IR mapping lists every pattern type."""
        spec = build_specification(engine)
        assert {m.state_pattern for m in spec.ir_generation} == set(PatternType)


# ===================================================================
# Test: Rendering
# ===================================================================


class TestRender:
    """Tests for the rendered formats."""

    def test_json(self, engine: ProtocolDFA) -> None:
        """JSON output parses and validates against the model."""
        text = engine.export_specification("json")
        data = json.loads(text)
        assert data["schema_version"] == SCHEMA_VERSION
        assert data["states"][0]["regex"] == r"^OBI-PROTOCOL-[0-9]+\.[0-9]+:"
        assert DFASpecification.model_validate_json(text).states[4].pattern_type is (
            PatternType.AUDIT_MARKER
        )

    def test_yaml(self, engine: ProtocolDFA) -> None:
        """YAML output carries the same content as JSON."""
        from_yaml = yaml.safe_load(engine.export_specification(ExportFormat.YAML))
        from_json = json.loads(engine.export_specification(ExportFormat.JSON))
        assert from_yaml["states"] == from_json["states"]
        assert from_yaml["uscn_mappings"] == from_json["uscn_mappings"]
        assert from_yaml["limits"] == from_json["limits"]

    def test_header(self, engine: ProtocolDFA) -> None:
        """The C header carries limits, patterns and the state table."""
        header = engine.export_specification("header")
        assert "#ifndef OBIPROTOCOL_DFA_SPEC_H" in header
        assert "#define OBI_MAX_STATES 256" in header
        assert "#define OBI_STATE_COUNT 5" in header
        assert r'"^OBI-PROTOCOL-[0-9]+\\.[0-9]+:"' in header
        assert r'"PAYLOAD\\|[0-9]+\\|"' in header
        assert header.rstrip().endswith("#endif /* OBIPROTOCOL_DFA_SPEC_H */")

    def test_c_header_alias(self, engine: ProtocolDFA) -> None:
        """c_header is accepted as an alias of header."""
        assert engine.export_specification("c_header") == (
            engine.export_specification("header")
        )

    @pytest.mark.parametrize("fmt", ["xml", "", "toml"])
    def test_unsupported_format(self, engine: ProtocolDFA, fmt: str) -> None:
        """Unknown formats raise ExportFormatNotSupported."""
        with pytest.raises(ExportFormatNotSupported) as exc_info:
            engine.export_specification(fmt)
        assert exc_info.value.code == "OBI-E501"

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("YAML", ExportFormat.YAML),
            ("yml", ExportFormat.YAML),
            (" json ", ExportFormat.JSON),
            ("header", ExportFormat.HEADER),
            (ExportFormat.JSON, ExportFormat.JSON),
        ],
    )
    def test_parse_format(self, raw: str, expected: ExportFormat) -> None:
        """Format names are case-insensitive and allow aliases."""
        assert parse_format(raw) is expected
