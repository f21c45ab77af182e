"""Intermediate representation emitted by the pattern scanner.

Each successful match becomes an :class:`IRNode`.  Nodes are linked in
scan order into an :class:`IRList`; that order is the contract that
downstream consumers (audit reports, topology gates) rely on.  Once
returned, the list is owned by the caller and the engine keeps no
reference to it.
"""
from __future__ import annotations

import hashlib
from collections.abc import Iterator
from dataclasses import dataclass

from obiprotocol.core.types import IRNodeType, PatternType

MATCH_COST_PER_CHAR = 0.1
"""Governance cost charged per matched canonical character."""

_IR_NODE_TYPES: dict[PatternType, IRNodeType] = {
    PatternType.PROTOCOL_HEADER: IRNodeType.PROTOCOL_MESSAGE,
    PatternType.SECURITY_TOKEN: IRNodeType.SECURITY_CONTEXT,
    PatternType.DATA_PAYLOAD: IRNodeType.PAYLOAD_BLOCK,
    PatternType.SCHEMA_REFERENCE: IRNodeType.SCHEMA_VALIDATION,
    PatternType.AUDIT_MARKER: IRNodeType.AUDIT_RECORD,
}


def ir_node_type_for(pattern_type: PatternType) -> IRNodeType:
    """Map a pattern type to its IR node type.

    The mapping is total: any pattern type without a dedicated node type
    maps to :attr:`IRNodeType.ERROR_CONDITION`.
    """
    return _IR_NODE_TYPES.get(pattern_type, IRNodeType.ERROR_CONDITION)


@dataclass(slots=True)
class IRNode:
    """A single IR record produced by a pattern match."""

    node_type: IRNodeType
    content: str
    length: int
    source_state: int
    governance_cost: float
    next: IRNode | None = None

    @property
    def content_hash(self) -> str:
        """Return ``"sha256:<hex>"`` of the canonical content."""
        digest = hashlib.sha256(self.content.encode("utf-8")).hexdigest()
        return f"sha256:{digest}"


def create_ir_node(source_state: int, pattern_type: PatternType, content: str) -> IRNode:
    """Build an IR node for a match of *content* by *source_state*."""
    # str slices are already independent copies of the scanned buffer
    return IRNode(
        node_type=ir_node_type_for(pattern_type),
        content=content,
        length=len(content),
        source_state=source_state,
        governance_cost=MATCH_COST_PER_CHAR * len(content),
    )


class IRList:
    """Singly linked, insertion-ordered list of :class:`IRNode`."""

    __slots__ = ("_head", "_tail", "_size")

    def __init__(self) -> None:
        self._head: IRNode | None = None
        self._tail: IRNode | None = None
        self._size = 0

    def append(self, node: IRNode) -> IRNode:
        """Link *node* at the tail and return it."""
        node.next = None
        if self._tail is None:
            self._head = node
        else:
            self._tail.next = node
        self._tail = node
        self._size += 1
        return node

    def clear(self) -> None:
        """Release every node, unlinking them from one another."""
        node = self._head
        while node is not None:
            following = node.next
            node.next = None
            node = following
        self._head = None
        self._tail = None
        self._size = 0

    @property
    def head(self) -> IRNode | None:
        return self._head

    @property
    def tail(self) -> IRNode | None:
        return self._tail

    @property
    def total_cost(self) -> float:
        """Return the summed governance cost of all nodes."""
        return sum((node.governance_cost for node in self), 0.0)

    def contents(self) -> list[str]:
        """Return node contents in scan order."""
        return [node.content for node in self]

    def node_types(self) -> list[IRNodeType]:
        """Return node types in scan order."""
        return [node.node_type for node in self]

    def __iter__(self) -> Iterator[IRNode]:
        node = self._head
        while node is not None:
            yield node
            node = node.next

    def __len__(self) -> int:
        return self._size

    def __bool__(self) -> bool:
        return self._size > 0

    def __repr__(self) -> str:
        return f"IRList(size={self._size}, types={[str(t) for t in self.node_types()]})"
