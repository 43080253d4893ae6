"""Glob-style id pattern matching.

Subscription patterns use `*` as the only wildcard: it matches any run
of characters (dots included). Every other character matches literally.
A pattern without `*` matches exactly one id.

Examples:
    >>> compile_pattern("zone.*").matches("zone.3.switch")
    True
    >>> compile_pattern("*.switch").matches("zone.3.switch")
    True
    >>> compile_pattern("zone.3").matches("zone.3.switch")
    False
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, ClassVar

from graph_bridge.core.interfaces.gateway import PatternError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IdPattern:
    """A compiled id pattern.

    Attributes:
        pattern: Source pattern ("" for the never-matching pattern)
        regex: Compiled expression, None for exact or never-matching patterns
    """

    pattern: str
    regex: re.Pattern[str] | None = None
    never: bool = False

    NEVER: ClassVar[IdPattern]

    @property
    def has_wildcard(self) -> bool:
        """Check if the pattern contains a wildcard."""
        return self.regex is not None

    def matches(self, value: str) -> bool:
        """Check if `value` is matched by this pattern."""
        if self.never or value is None:
            return False
        if self.regex is None:
            return value == self.pattern
        return self.regex.search(value) is not None

    __call__ = matches


IdPattern.NEVER = IdPattern(pattern="", never=True)


def compile_pattern(pattern: Any) -> IdPattern:
    """Compile a glob-style pattern.

    The expression is anchored at the start unless the pattern starts
    with `*`, and at the end unless it ends with `*`.

    Args:
        pattern: Pattern string

    Returns:
        Compiled IdPattern

    Raises:
        PatternError: If the pattern is not a non-empty string
    """
    if not isinstance(pattern, str):
        raise PatternError(pattern, "pattern must be a string")
    if not pattern:
        raise PatternError(pattern, "pattern is empty")
    if "*" not in pattern:
        return IdPattern(pattern=pattern)

    body = re.escape(pattern).replace(r"\*", ".*")
    if not pattern.startswith("*"):
        body = "^" + body
    if not pattern.endswith("*"):
        body = body + "$"
    try:
        regex = re.compile(body)
    except re.error as e:
        raise PatternError(pattern, str(e)) from e
    return IdPattern(pattern=pattern, regex=regex)


def compile_or_never(pattern: Any, owner: str = "") -> IdPattern:
    """Compile a pattern, degrading to the never-matching pattern.

    Args:
        pattern: Pattern string
        owner: Listener id, used in the warning

    Returns:
        Compiled IdPattern, or IdPattern.NEVER if compilation failed
    """
    try:
        return compile_pattern(pattern)
    except PatternError as e:
        logger.warning(f"Listener {owner or '?'} will never match: {e}")
        return IdPattern.NEVER
