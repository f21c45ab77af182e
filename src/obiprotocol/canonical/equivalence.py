"""Canonical equivalence checks.

Two inputs are equivalent when they normalize to the same canonical
string under the same context and bound.  A truncated normalization can
never establish identity, so it always compares unequal.

Both inputs are normalized independently; the context's holding area is
overwritten twice and holds the canonical form of *b* afterwards.
"""
from __future__ import annotations

from obiprotocol.canonical.normalizer import USCNContext
from obiprotocol.core.errors import ZeroTrustViolation


def equivalent(
    a: str | bytes,
    b: str | bytes,
    ctx: USCNContext,
    bound: int | None = None,
) -> bool:
    """Return ``True`` if *a* and *b* denote the same canonical value."""
    first = ctx.normalize(a, bound)
    second = ctx.normalize(b, bound)
    if first.truncated or second.truncated:
        return False
    return first.length == second.length and first.text == second.text


def require_equivalent(
    a: str | bytes,
    b: str | bytes,
    ctx: USCNContext,
    bound: int | None = None,
) -> str:
    """Return the shared canonical form or raise :class:`ZeroTrustViolation`."""
    first = ctx.normalize(a, bound)
    second = ctx.normalize(b, bound)
    if first.truncated or second.truncated:
        raise ZeroTrustViolation(
            "Zero Trust violation: canonical form was truncated",
            details={
                "first_truncated": first.truncated,
                "second_truncated": second.truncated,
            },
        )
    if first.text != second.text:
        raise ZeroTrustViolation(
            details={
                "first_length": first.length,
                "second_length": second.length,
            },
        )
    return first.text
