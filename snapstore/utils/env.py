from __future__ import annotations

import os
from typing import Iterable, List, Sequence, Tuple, Union

# ------------------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------------------


def get_str_chain(names: Iterable[str], default: str = "") -> str:
    """Return the first non-empty value from a list of env vars."""
    for name in names:
        raw = os.getenv(name)
        if raw is None:
            continue
        candidate = str(raw).strip()
        if candidate:
            return candidate
    return default


def split_csv(raw: Union[str, Sequence[str], None]) -> List[str]:
    """Split a comma-delimited string (or a sequence) into trimmed, non-empty tokens."""
    if raw is None:
        return []
    parts = raw.split(",") if isinstance(raw, str) else [str(p) for p in raw]
    return [part.strip() for part in parts if part and part.strip()]


def split_pairs(raw: str | None) -> Tuple[Tuple[str, str], ...]:
    """Parse 'k1=v1,k2=v2' into ordered pairs, skipping malformed entries."""
    raw = (raw or "").strip()
    if not raw:
        return tuple()
    pairs: List[Tuple[str, str]] = []
    for part in raw.split(","):
        key, _, value = part.partition("=")
        key = key.strip()
        value = value.strip()
        if key and value:
            pairs.append((key, value))
    return tuple(pairs)


__all__ = [
    "get_str_chain",
    "split_csv",
    "split_pairs",
]
