"""Text repair and matching keys for Spanish report exports."""

from __future__ import annotations

import re
import unicodedata
from typing import Any

from .rules import BOM, MOJIBAKE

_NON_KEY_RE = re.compile(r"[^a-z0-9]")


def repair_text(value: Any) -> str:
    """
    Fix mis-decoded accents and strip export artifacts.

    Order: mojibake table, leading BOM, one stray quote at each end,
    surrounding whitespace. Never raises.
    """
    if value is None:
        return ""
    s = value if isinstance(value, str) else str(value)
    if not s:
        return ""

    for broken, fixed in MOJIBAKE:
        if broken in s:
            s = s.replace(broken, fixed)

    if s.startswith(BOM):
        s = s[1:]
    if s.startswith('"'):
        s = s[1:]
    if s.endswith('"'):
        s = s[:-1]

    return s.strip()


def normalize_key(value: Any) -> str:
    """Lower-case, accent-free, alphanumeric-only form used for matching."""
    if value is None:
        return ""
    s = unicodedata.normalize("NFD", str(value).lower())
    s = "".join(ch for ch in s if not unicodedata.combining(ch))
    return _NON_KEY_RE.sub("", s)
