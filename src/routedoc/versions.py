"""API version string comparison.

Versions such as ``1.0``, ``1.2.3`` or ``2.0-beta1`` are split into numeric
and alphabetic parts. Pre-release markers sort before releases
(``1.0-alpha < 1.0-beta < 1.0-rc1 < 1.0``), and a trailing numeric part
makes a version newer (``1.0 < 1.0.0 < 1.0.1``).
"""

from __future__ import annotations

import re
from itertools import zip_longest
from typing import Optional

_PART_RE = re.compile(r"\d+|[A-Za-z]+|#")

_SPECIAL_RANKS = {
    "dev": 0,
    "alpha": 1,
    "a": 1,
    "beta": 2,
    "b": 2,
    "rc": 3,
    "#": 4,
    "pl": 5,
    "p": 5,
}


def _parts(version: str) -> list[tuple[int, int]]:
    parts = []
    for token in _PART_RE.findall(version):
        if token.isdigit():
            parts.append((2, int(token)))
        else:
            parts.append((0, _SPECIAL_RANKS.get(token.lower(), -1)))
    return parts


def compare_versions(left: Optional[str], right: Optional[str]) -> int:
    """Return ``-1``, ``0`` or ``1`` as *left* is older, equal to or newer than *right*."""
    # A missing part ranks like "#": above pre-release markers, below "pl" and numbers.
    missing = (0, _SPECIAL_RANKS["#"])
    for a, b in zip_longest(_parts(left or ""), _parts(right or ""), fillvalue=missing):
        if a != b:
            return -1 if a < b else 1
    return 0


def in_version_range(version: str, since: Optional[str] = None, until: Optional[str] = None) -> bool:
    """Whether *version* lies within ``[since, until]``; open bounds always match."""
    if not since and not until:
        return True
    if since and compare_versions(since, version) > 0:
        return False
    if until and compare_versions(until, version) < 0:
        return False
    return True
