"""Governance cost accounting.

The governance cost is a scalar combining match activity with the
structural complexity of an engine.  External policy reads it to place a
topology node into a governance zone:

* **autonomous** -- cost <= 0.5
* **warning**    -- 0.5 < cost <= 0.6
* **governance** -- cost > 0.6
"""
from __future__ import annotations

import math

from obiprotocol.core.errors import InvalidInput
from obiprotocol.core.types import GovernanceZone

STATE_COST = 0.01
"""Complexity penalty per registered state."""

TRANSITION_COST = 0.005
"""Complexity penalty per declared transition."""

ZERO_TRUST_OVERHEAD = 0.05
"""Fixed overhead charged when Zero Trust enforcement is on."""

AUTONOMOUS_THRESHOLD = 0.5
WARNING_THRESHOLD = 0.6


class CostAccumulator:
    """Running, monotonically non-decreasing match cost."""

    __slots__ = ("_total",)

    def __init__(self) -> None:
        self._total = 0.0

    def add(self, amount: float) -> float:
        """Add *amount* and return the new total.

        Raises
        ------
        InvalidInput
            If *amount* is negative or not finite.
        """
        if amount < 0 or not math.isfinite(amount):
            raise InvalidInput(
                "Governance cost increments must be finite and non-negative",
                details={"amount": amount},
            )
        self._total += amount
        return self._total

    def reset(self) -> None:
        self._total = 0.0

    @property
    def total(self) -> float:
        return self._total


def governance_cost(
    accumulated: float,
    state_count: int,
    transition_count: int,
    zero_trust_enforced: bool,
) -> float:
    """Combine accumulated match cost with structural complexity penalties."""
    cost = accumulated
    cost += STATE_COST * state_count
    cost += TRANSITION_COST * transition_count
    if zero_trust_enforced:
        cost += ZERO_TRUST_OVERHEAD
    return cost


def classify_zone(
    cost: float,
    autonomous_threshold: float = AUTONOMOUS_THRESHOLD,
    warning_threshold: float = WARNING_THRESHOLD,
) -> GovernanceZone:
    """Map a governance cost to its :class:`GovernanceZone`."""
    if cost <= autonomous_threshold:
        return GovernanceZone.AUTONOMOUS
    if cost <= warning_threshold:
        return GovernanceZone.WARNING
    return GovernanceZone.GOVERNANCE
