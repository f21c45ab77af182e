"""Rule matching primitive for the pattern scanner.

Provides anchored prefix matching with graceful fallback to the standard
library ``re`` module when ``google-re2`` is not installed.  The scanner
only ever asks one question: does this rule match a prefix of this text,
and how long is the match?

Case-insensitive matching is ASCII-only.  The canonicalizer folds only
``A-Z``, so a rule must not treat non-ASCII case variants such as ``U+017F``
(long s) or ``U+212A`` (Kelvin sign) as their ASCII letters.  RE2 folds
Unicode case under ``(?i)``, so case-insensitive rules always compile with
stdlib ``re`` and ``re.ASCII``.

Compiled rules are cached at module level.
"""
from __future__ import annotations

import re
from functools import lru_cache
from typing import Any

from obiprotocol.core.errors import PatternCompileError

# ---------------------------------------------------------------------------
# Attempt to import google-re2; fall back to ``re`` if unavailable
# ---------------------------------------------------------------------------

_RE2_AVAILABLE = False
_re2_module: Any = None

try:
    import re2 as _re2_module  # type: ignore[no-redef]

    _RE2_AVAILABLE = True
except ImportError:
    pass


# ---------------------------------------------------------------------------
# Compiled pattern cache (module-level)
# ---------------------------------------------------------------------------

@lru_cache(maxsize=512)
def _compile_pattern(pattern: str, ignore_case: bool, use_re2: bool) -> Any:
    """Compile and cache a rule.

    Parameters
    ----------
    pattern:
        The regular-expression rule.
    ignore_case:
        Whether ASCII case is ignored while matching.
    use_re2:
        Whether to use the ``google-re2`` engine.

    Returns
    -------
    A compiled pattern object (``re2`` pattern or ``re.Pattern``).
    """
    if ignore_case:
        return re.compile(pattern, re.IGNORECASE | re.ASCII)
    if use_re2 and _RE2_AVAILABLE:
        return _re2_module.compile(pattern)
    return re.compile(pattern)


# ---------------------------------------------------------------------------
# PatternEngine
# ---------------------------------------------------------------------------

class PatternEngine:
    """Prefix-matching engine over cached compiled rules.

    Parameters
    ----------
    ignore_case:
        Match rules case-insensitively.  Engines whose canonicalizer folds
        case must set this so upper-case rules still match lowered text.
        Only ASCII letters are folded.
    prefer_re2:
        If ``True`` (the default), use ``google-re2`` when available and
        *ignore_case* is off.
    """

    def __init__(self, *, ignore_case: bool = False, prefer_re2: bool = True) -> None:
        self._ignore_case = ignore_case
        self._use_re2 = prefer_re2 and _RE2_AVAILABLE and not ignore_case

    # -- public properties --------------------------------------------------

    @property
    def engine_name(self) -> str:
        """Return the name of the active regex engine."""
        return "google-re2" if self._use_re2 else "re (stdlib)"

    @property
    def ignore_case(self) -> bool:
        """Return ``True`` if rules are matched case-insensitively."""
        return self._ignore_case

    # -- compilation --------------------------------------------------------

    def compile(self, pattern: str) -> Any:
        """Compile *pattern* with the active engine.

        Raises
        ------
        PatternCompileError
            If the rule is syntactically invalid.
        """
        try:
            return _compile_pattern(pattern, self._ignore_case, self._use_re2)
        except Exception as exc:
            raise PatternCompileError(
                f"Invalid match rule {pattern!r}: {exc}",
                details={"rule": pattern},
            ) from exc

    # -- matching -----------------------------------------------------------

    def match_prefix(self, pattern: str, text: str) -> int | None:
        """Return the length of the match of *pattern* at the start of *text*.

        Returns ``None`` when the rule does not match there.  The rule is
        applied to *text* as a whole string, so a leading ``^`` anchors to
        the start of *text*.
        """
        found = self.compile(pattern).match(text)
        if found is None:
            return None
        return found.end() - found.start()

    def matches_at(self, pattern: str, text: str, pos: int) -> int | None:
        """Return the match length of *pattern* anchored at *pos* in *text*."""
        return self.match_prefix(pattern, text[pos:])

    # -- cache management ---------------------------------------------------

    @staticmethod
    def clear_cache() -> None:
        """Clear the compiled pattern cache."""
        _compile_pattern.cache_clear()

    @staticmethod
    def cache_info() -> Any:
        """Return cache statistics."""
        return _compile_pattern.cache_info()
