"""Pattern registry -- ordered States and declared Transitions.

Registration order is match priority: the scanner tries states in the
order they were registered and commits to the first match, so
integrators should register more specific patterns first.

Transitions are declared and counted (they contribute to the governance
cost and appear in specification exports) but the scanner does not
consult them.
"""
from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass

from obiprotocol.core.errors import (
    InvalidInput,
    MissingPatternRule,
    PatternCompileError,
    TableFull,
    TransitionTableFull,
)
from obiprotocol.core.types import PatternType
from obiprotocol.dfa.pattern_engine import PatternEngine

logger = logging.getLogger(__name__)

Validator = Callable[[str], bool]
"""Custom check invoked with the matched canonical text after a rule matches."""

# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class State:
    """A registered pattern state.

    Attributes
    ----------
    state_id:
        Unique identifier, assigned in registration order from 0.
    pattern_type:
        Semantic pattern type; decides the IR node type.
    rule:
        Regular-expression match rule.
    is_accepting:
        ``True`` iff *pattern_type* is a payload or audit-marker type.
    requires_zero_trust:
        Engine Zero Trust mode at registration time.
    transition_count:
        Number of declared outgoing transitions.
    validator:
        Optional custom check run after a structural match.
    """

    state_id: int
    pattern_type: PatternType
    rule: str
    is_accepting: bool
    requires_zero_trust: bool
    transition_count: int = 0
    validator: Validator | None = dataclasses.field(default=None, compare=False)


@dataclass(frozen=True, slots=True)
class Transition:
    """A declared state transition."""

    from_state: int
    to_state: int
    input_symbol: str
    cost_weight: float = 0.0
    validator: Validator | None = dataclasses.field(default=None, compare=False)


# ---------------------------------------------------------------------------
# PatternRegistry
# ---------------------------------------------------------------------------


class PatternRegistry:
    """Bounded, ordered collection of pattern states and transitions.

    Parameters
    ----------
    pattern_engine:
        Engine used to validate that rules compile at registration time.
    zero_trust:
        Engine-wide Zero Trust mode stamped onto each new state.
    max_states:
        Capacity of the state table.
    max_transitions:
        Capacity of the transition table.
    max_pattern_length:
        Longest accepted match rule.
    """

    def __init__(
        self,
        pattern_engine: PatternEngine,
        *,
        zero_trust: bool = True,
        max_states: int = 256,
        max_transitions: int = 1024,
        max_pattern_length: int = 512,
    ) -> None:
        self._engine = pattern_engine
        self._zero_trust = zero_trust
        self._max_states = max_states
        self._max_transitions = max_transitions
        self._max_pattern_length = max_pattern_length
        self._states: list[State] = []
        self._transitions: list[Transition] = []

    # -- registration -------------------------------------------------------

    def register(
        self,
        pattern_type: PatternType,
        rule: str | None,
        validator: Validator | None = None,
        *,
        requires_zero_trust: bool | None = None,
    ) -> State:
        """Append a new state for *rule* and return it.

        Raises
        ------
        MissingPatternRule
            If *rule* is ``None`` or empty.
        PatternCompileError
            If *rule* is too long or does not compile.
        TableFull
            If the state table is at capacity.
        InvalidInput
            If *pattern_type* is not a known pattern type.
        """
        if not rule:
            raise MissingPatternRule(details={"pattern_type": str(pattern_type)})
        if len(self._states) >= self._max_states:
            raise TableFull(details={"max_states": self._max_states})
        if len(rule) > self._max_pattern_length:
            raise PatternCompileError(
                f"Match rule exceeds {self._max_pattern_length} characters",
                details={"rule_length": len(rule)},
            )
        try:
            pattern_type = PatternType(pattern_type)
        except ValueError as exc:
            raise InvalidInput(
                f"Unknown pattern type: {pattern_type!r}",
                details={"pattern_type": str(pattern_type)},
            ) from exc

        # Validate the rule compiles before anything is added
        self._engine.compile(rule)

        state = State(
            state_id=len(self._states),
            pattern_type=pattern_type,
            rule=rule,
            is_accepting=pattern_type.is_accepting,
            requires_zero_trust=(
                self._zero_trust if requires_zero_trust is None else requires_zero_trust
            ),
            validator=validator,
        )
        self._states.append(state)
        logger.debug(
            "Registered state %d (%s) rule=%r", state.state_id, pattern_type, rule
        )
        return state

    def add_transition(
        self,
        from_state: int,
        to_state: int,
        input_symbol: str,
        cost_weight: float = 0.0,
        validator: Validator | None = None,
    ) -> Transition:
        """Declare a transition and bump the source state's transition count.

        Raises
        ------
        InvalidInput
            If either state is unknown, *input_symbol* is not a single
            character or *cost_weight* is negative.
        TransitionTableFull
            If the transition table is at capacity.
        """
        for state_id in (from_state, to_state):
            if not 0 <= state_id < len(self._states):
                raise InvalidInput(
                    f"Unknown state id: {state_id}", details={"state_id": state_id}
                )
        if not isinstance(input_symbol, str) or len(input_symbol) != 1:
            raise InvalidInput(
                "Transition input symbol must be a single character",
                details={"input_symbol": input_symbol},
            )
        if cost_weight < 0:
            raise InvalidInput(
                "Transition cost weight must not be negative",
                details={"cost_weight": cost_weight},
            )
        if len(self._transitions) >= self._max_transitions:
            raise TransitionTableFull(details={"max_transitions": self._max_transitions})

        transition = Transition(
            from_state=from_state,
            to_state=to_state,
            input_symbol=input_symbol,
            cost_weight=cost_weight,
            validator=validator,
        )
        self._transitions.append(transition)
        source = self._states[from_state]
        self._states[from_state] = dataclasses.replace(
            source, transition_count=source.transition_count + 1
        )
        return transition

    # -- introspection ------------------------------------------------------

    def get(self, state_id: int) -> State:
        """Return the state with *state_id*.

        Raises
        ------
        InvalidInput
            If no such state is registered.
        """
        if not 0 <= state_id < len(self._states):
            raise InvalidInput(
                f"Unknown state id: {state_id}", details={"state_id": state_id}
            )
        return self._states[state_id]

    def transitions_from(self, state_id: int) -> list[Transition]:
        """Return the transitions declared out of *state_id*."""
        return [t for t in self._transitions if t.from_state == state_id]

    @property
    def states(self) -> tuple[State, ...]:
        """Return the states in registration (priority) order."""
        return tuple(self._states)

    @property
    def transitions(self) -> tuple[Transition, ...]:
        """Return the declared transitions in declaration order."""
        return tuple(self._transitions)

    @property
    def state_count(self) -> int:
        return len(self._states)

    @property
    def transition_count(self) -> int:
        return len(self._transitions)

    @property
    def max_states(self) -> int:
        return self._max_states

    @property
    def max_transitions(self) -> int:
        return self._max_transitions

    def __len__(self) -> int:
        return len(self._states)

    def __iter__(self) -> Iterator[State]:
        return iter(tuple(self._states))
