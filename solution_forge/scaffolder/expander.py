"""Placeholder expansion for template bodies and destination paths.

Tokens look like ``{{NAME}}``.  Expansion is a single regex pass: bound names
are replaced by their value, unbound names are left exactly as written so a
partially-bound template survives a first pass intact, and replacement values
are never scanned again.
"""

from __future__ import annotations

import re
from typing import Any, Mapping

PLACEHOLDER_PATTERN = re.compile(r"\{\{([A-Za-z_][A-Za-z0-9_]*)\}\}")


def expand(text: str, bindings: Mapping[str, Any]) -> str:
    """Replace every bound ``{{NAME}}`` token in *text*.

    Args:
        text: Template text.  Anything that is not a well-formed token is
            copied through untouched.
        bindings: Placeholder name -> replacement.  Keys are case-sensitive;
            values are converted with ``str()``.

    Returns:
        The expanded text.
    """

    def _substitute(match: re.Match[str]) -> str:
        name = match.group(1)
        if name in bindings:
            return str(bindings[name])
        return match.group(0)

    return PLACEHOLDER_PATTERN.sub(_substitute, text)


def find_placeholders(text: str) -> list[str]:
    """Return the distinct placeholder names in *text*, in order of first use."""
    seen: dict[str, None] = {}
    for match in PLACEHOLDER_PATTERN.finditer(text):
        seen.setdefault(match.group(1), None)
    return list(seen)


def make_token(name: str) -> str:
    """Return the literal token for *name*, e.g. ``{{SOLUTION_NAME}}``."""
    return "{{" + name + "}}"
