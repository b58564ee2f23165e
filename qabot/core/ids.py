"""Event identifier validation.

RULES:
- Lowercase ASCII letters, digits and single interior dashes
- Must start with a letter; must not end with a dash
- Never raises; non-string input is simply invalid
"""

from __future__ import annotations

import re
from typing import Any

_EVENT_ID_RE = re.compile(r"[a-z][a-z0-9]*(?:-[a-z0-9]+)*")


def is_valid_id(candidate: Any) -> bool:
    """Return True if *candidate* is a well-formed event identifier.

    >>> is_valid_id("townhall-q1")
    True
    >>> is_valid_id("Townhall")
    False
    """
    if not isinstance(candidate, str):
        return False
    return _EVENT_ID_RE.fullmatch(candidate) is not None
