"""Left-to-right first-match pattern scanner.

At every scan position the registered states are tried in registration
order and the first state whose rule matches a non-empty prefix of the
remaining canonical text wins.  Characters no state matches are skipped
one at a time; they are counted but never abort the scan.

Every position is tested against every rule, which is quadratic in the
worst case; this is acceptable for short protocol headers.
"""
from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from obiprotocol.canonical.normalizer import NormalizationResult
from obiprotocol.core.types import ScanStatus
from obiprotocol.dfa.ir import IRList, create_ir_node
from obiprotocol.dfa.pattern_engine import PatternEngine
from obiprotocol.dfa.registry import State

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ScanResult:
    """Outcome of scanning one canonical input.

    Attributes
    ----------
    nodes:
        IR nodes in scan order; owned by the caller.
    canonical:
        The normalization the scan ran over.
    final_state:
        Id of the last matched state, or the initial state.
    unmatched:
        Number of canonical characters skipped by recovery.
    cost:
        Governance cost added by this scan.
    accepted:
        ``True`` if the final state is accepting.
    matched_states:
        Ids of the matched states, one per IR node, in scan order.
    """

    nodes: IRList
    canonical: NormalizationResult
    final_state: int
    unmatched: int = 0
    cost: float = 0.0
    accepted: bool = False
    matched_states: list[int] = field(default_factory=list)

    @property
    def status(self) -> ScanStatus:
        """Return the scan outcome; truncation takes precedence."""
        if self.canonical.truncated:
            return ScanStatus.TRUNCATED
        if not self.nodes:
            return ScanStatus.NO_MATCH
        if self.unmatched:
            return ScanStatus.PARTIAL
        return ScanStatus.COMPLETE


def _first_match(
    states: Sequence[State], engine: PatternEngine, remaining: str
) -> tuple[State, int] | None:
    for state in states:
        length = engine.match_prefix(state.rule, remaining)
        if not length:
            continue
        if state.validator is not None and not state.validator(remaining[:length]):
            continue
        return state, length
    return None


def scan(
    canonical: NormalizationResult,
    states: Sequence[State],
    engine: PatternEngine,
    *,
    initial_state: int = 0,
) -> ScanResult:
    """Scan *canonical* against *states* and emit IR nodes in match order."""
    text = canonical.text
    nodes = IRList()
    current = initial_state
    unmatched = 0
    matched_states: list[int] = []

    pos = 0
    while pos < len(text):
        found = _first_match(states, engine, text[pos:])
        if found is None:
            unmatched += 1
            pos += 1
            continue
        state, length = found
        nodes.append(
            create_ir_node(state.state_id, state.pattern_type, text[pos:pos + length])
        )
        current = state.state_id
        matched_states.append(state.state_id)
        pos += length

    final = next((s for s in states if s.state_id == current), None)
    if unmatched:
        logger.debug(
            "Scan skipped %d of %d canonical characters", unmatched, len(text)
        )

    return ScanResult(
        nodes=nodes,
        canonical=canonical,
        final_state=current,
        unmatched=unmatched,
        cost=nodes.total_cost,
        accepted=bool(matched_states) and final is not None and final.is_accepting,
        matched_states=matched_states,
    )
