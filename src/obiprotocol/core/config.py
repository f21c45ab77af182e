"""OBI protocol engine configuration.

Defines the validated configuration model consumed by the canonicalizer,
the pattern registry and the engine.  Defaults mirror the limits of the
deployed protocol stack so that ``EngineConfig()`` is interoperable with
existing peers.
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator


class EngineConfig(BaseModel):
    """Configuration for a :class:`~obiprotocol.dfa.engine.ProtocolDFA`.

    The numeric caps are configurable limits rather than hard ceilings;
    keep the defaults when compatibility with the original bounds is
    required.
    """

    model_config = ConfigDict(strict=True, frozen=True)

    max_states: int = Field(
        default=256,
        ge=1,
        description="Maximum number of registered pattern states.",
    )
    max_transitions: int = Field(
        default=1024,
        ge=0,
        description="Maximum number of declared state transitions.",
    )
    max_pattern_length: int = Field(
        default=512,
        ge=1,
        description="Maximum length of a single match rule, in characters.",
    )
    canonical_buffer_size: int = Field(
        default=8192,
        ge=2,
        description=(
            "Size of the canonical holding area; normalization output is "
            "bounded to this size minus one terminator slot."
        ),
    )
    case_fold: bool = Field(
        default=True,
        description="Lower ASCII letters during normalization.",
    )
    whitespace_collapse: bool = Field(
        default=True,
        description="Collapse runs of space/tab/CR/LF to a single space.",
    )
    encoding_normalize: bool = Field(
        default=True,
        description="Apply the encoding substitution table.",
    )
    reject_truncated: bool = Field(
        default=False,
        description=(
            "When True, processing raises ZeroTrustViolation if the "
            "canonical input had to be truncated."
        ),
    )
    prefer_re2: bool = Field(
        default=True,
        description="Use google-re2 for rule matching when it is installed.",
    )
    autonomous_threshold: float = Field(
        default=0.5,
        ge=0.0,
        description="Upper governance-cost bound of the autonomous zone.",
    )
    warning_threshold: float = Field(
        default=0.6,
        ge=0.0,
        description="Upper governance-cost bound of the warning zone.",
    )

    @model_validator(mode="after")
    def _check_thresholds(self) -> EngineConfig:
        if self.warning_threshold < self.autonomous_threshold:
            msg = "warning_threshold must not be below autonomous_threshold"
            raise ValueError(msg)
        return self
