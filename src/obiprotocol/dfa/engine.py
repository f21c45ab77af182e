"""Protocol DFA engine -- canonicalize, scan, emit IR, account cost.

A :class:`ProtocolDFA` is an explicit, caller-owned engine instance; there
is no process-wide engine.  Its lifecycle is::

    engine = ProtocolDFA()
    engine.initialize(zero_trust_mode=True)   # installs state 0
    engine.register_pattern(PatternType.SECURITY_TOKEN, SECURITY_TOKEN)
    result = engine.process("OBI-PROTOCOL-1.0:SEC:...")
    engine.teardown()                          # idempotent

or, equivalently, ``with initialize(True) as engine: ...``.

Every input is normalized (USCN) before any rule is tested.  The engine
is single-threaded and holds mutable state without locking; serialize
access or use one engine per worker.
"""
from __future__ import annotations

import logging

from obiprotocol.canonical import equivalence
from obiprotocol.canonical.normalizer import (
    NormalizationResult,
    USCNContext,
    coerce_input,
)
from obiprotocol.core.config import EngineConfig
from obiprotocol.core.errors import (
    EngineNotInitialized,
    InvalidInput,
    ValidationFailed,
    ZeroTrustViolation,
)
from obiprotocol.core.types import ExportFormat, GovernanceZone, PatternType
from obiprotocol.dfa import export
from obiprotocol.dfa.governance import CostAccumulator, classify_zone, governance_cost
from obiprotocol.dfa.matcher import ScanResult, scan
from obiprotocol.dfa.pattern_engine import PatternEngine
from obiprotocol.dfa.patterns import HEADER_MARKER
from obiprotocol.dfa.registry import PatternRegistry, State, Transition, Validator

logger = logging.getLogger(__name__)

INITIAL_STATE = 0


class ProtocolDFA:
    """Zero Trust canonicalization and pattern-recognition engine.

    Parameters
    ----------
    config:
        Optional :class:`EngineConfig`; defaults to the deployed limits.
    """

    def __init__(self, config: EngineConfig | None = None) -> None:
        self._config = config or EngineConfig()
        self._initialized = False
        self._zero_trust = False
        self._current_state = INITIAL_STATE
        self._cost = CostAccumulator()
        self._pattern_engine = PatternEngine(
            ignore_case=self._config.case_fold,
            prefer_re2=self._config.prefer_re2,
        )
        self._context = USCNContext.from_config(self._config)
        self._registry = self._new_registry()

    # -- lifecycle ----------------------------------------------------------

    def initialize(self, zero_trust_mode: bool = True) -> ProtocolDFA:
        """Reset every field and install the protocol-header start state.

        Calling it again on a live engine starts over from a clean state.
        """
        self._zero_trust = zero_trust_mode
        self._current_state = INITIAL_STATE
        self._cost.reset()
        self._context = USCNContext.from_config(self._config)
        self._registry = self._new_registry()
        self._registry.register(
            PatternType.PROTOCOL_HEADER, HEADER_MARKER, requires_zero_trust=True
        )
        self._initialized = True
        logger.info(
            "Protocol DFA initialized (zero_trust=%s, regex=%s)",
            zero_trust_mode,
            self._pattern_engine.engine_name,
        )
        return self

    def teardown(self) -> None:
        """Release registry and context; a second call has no effect."""
        if not self._initialized:
            return
        self._initialized = False
        self._zero_trust = False
        self._current_state = INITIAL_STATE
        self._cost.reset()
        self._registry = self._new_registry()
        self._context = USCNContext.from_config(self._config)
        logger.info("Protocol DFA torn down")

    def __enter__(self) -> ProtocolDFA:
        if not self._initialized:
            self.initialize()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        self.teardown()

    # -- registration -------------------------------------------------------

    def register_pattern(
        self,
        pattern_type: PatternType,
        rule: str | None,
        validator: Validator | None = None,
    ) -> int:
        """Register a semantic pattern and return its state id.

        *validator*, when given, is called with the matched canonical text
        after the rule matches; returning ``False`` rejects the match.
        """
        self._require_initialized()
        return self._registry.register(pattern_type, rule, validator).state_id

    def add_transition(
        self,
        from_state: int,
        to_state: int,
        input_symbol: str,
        cost_weight: float = 0.0,
        validator: Validator | None = None,
    ) -> Transition:
        """Declare a transition between two registered states."""
        self._require_initialized()
        return self._registry.add_transition(
            from_state, to_state, input_symbol, cost_weight, validator
        )

    # -- canonicalization ---------------------------------------------------

    def normalize(
        self, data: str | bytes, bound: int | None = None
    ) -> NormalizationResult:
        """Canonicalize *data* with the engine's context."""
        self._require_initialized()
        return self._context.normalize(data, bound)

    def equivalent(self, a: str | bytes, b: str | bytes) -> bool:
        """Return ``True`` if *a* and *b* share a canonical form."""
        self._require_initialized()
        return equivalence.equivalent(a, b, self._context)

    def require_equivalent(self, a: str | bytes, b: str | bytes) -> str:
        """Return the shared canonical form or raise :class:`ZeroTrustViolation`."""
        self._require_initialized()
        return equivalence.require_equivalent(a, b, self._context)

    # -- processing ---------------------------------------------------------

    def process(self, data: str | bytes) -> ScanResult:
        """Canonicalize *data*, scan it and return the IR and scan status.

        Unmatched characters are skipped and reported through
        :attr:`ScanResult.unmatched`; they never fail the call.

        Raises
        ------
        InvalidInput
            If *data* is ``None`` or empty.
        ZeroTrustViolation
            If the canonical input was truncated and the configuration
            rejects truncated input.
        """
        self._require_initialized()
        if not coerce_input(data):
            raise InvalidInput("Input must not be empty")

        canonical = self._context.normalize(data)
        if canonical.truncated and self._config.reject_truncated:
            raise ZeroTrustViolation(
                "Zero Trust violation: canonical input was truncated",
                details={"canonical_length": canonical.length},
            )

        result = scan(
            canonical,
            self._registry.states,
            self._pattern_engine,
            initial_state=INITIAL_STATE,
        )
        self._cost.add(result.cost)
        self._current_state = result.final_state
        logger.debug(
            "Processed %d canonical characters: %d nodes, %d unmatched, status=%s",
            canonical.length,
            len(result.nodes),
            result.unmatched,
            result.status,
        )
        return result

    def validate(self, data: str | bytes) -> ScanResult:
        """Process *data* and require that it ends in an accepting state.

        Raises
        ------
        ValidationFailed
            If no accepting state was reached.
        ZeroTrustViolation
            If Zero Trust is enforced and the canonical input was truncated.
        """
        result = self.process(data)
        if self._zero_trust and result.canonical.truncated:
            raise ZeroTrustViolation(
                "Zero Trust violation: validation on truncated canonical input",
                details={"canonical_length": result.canonical.length},
            )
        if not result.accepted:
            raise ValidationFailed(
                details={
                    "final_state": result.final_state,
                    "status": str(result.status),
                    "nodes": len(result.nodes),
                },
            )
        return result

    # -- governance ---------------------------------------------------------

    def cost(self) -> float:
        """Return the current governance cost."""
        self._require_initialized()
        return governance_cost(
            self._cost.total,
            self._registry.state_count,
            self._registry.transition_count,
            self._zero_trust,
        )

    def zone(self) -> GovernanceZone:
        """Return the governance zone for the current cost."""
        return classify_zone(
            self.cost(),
            self._config.autonomous_threshold,
            self._config.warning_threshold,
        )

    # -- export -------------------------------------------------------------

    def export_specification(self, fmt: ExportFormat | str) -> str:
        """Export the engine as ``yaml``, ``json`` or a C ``header``."""
        self._require_initialized()
        return export.export_specification(self, fmt)

    # -- introspection ------------------------------------------------------

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def zero_trust_enforced(self) -> bool:
        """Return the Zero Trust mode fixed at initialization."""
        return self._zero_trust

    @property
    def current_state(self) -> int:
        """Return the id of the last matched state (or the initial state)."""
        return self._current_state

    @property
    def accumulated_cost(self) -> float:
        """Return the match cost accumulated since initialization."""
        return self._cost.total

    @property
    def context(self) -> USCNContext:
        self._require_initialized()
        return self._context

    @property
    def registry(self) -> PatternRegistry:
        self._require_initialized()
        return self._registry

    @property
    def states(self) -> tuple[State, ...]:
        self._require_initialized()
        return self._registry.states

    # -- internal -----------------------------------------------------------

    def _new_registry(self) -> PatternRegistry:
        return PatternRegistry(
            self._pattern_engine,
            zero_trust=self._zero_trust,
            max_states=self._config.max_states,
            max_transitions=self._config.max_transitions,
            max_pattern_length=self._config.max_pattern_length,
        )

    def _require_initialized(self) -> None:
        if not self._initialized:
            raise EngineNotInitialized()


def initialize(
    zero_trust_mode: bool = True, config: EngineConfig | None = None
) -> ProtocolDFA:
    """Create and initialize a :class:`ProtocolDFA`."""
    return ProtocolDFA(config).initialize(zero_trust_mode)
