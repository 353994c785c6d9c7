from __future__ import annotations
import math
import time
from datetime import datetime, timezone
from typing import Any, Optional

MS_PER_DAY = 24 * 60 * 60 * 1000


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def ms_to_iso(ms: int) -> str:
    """Epoch ms -> ISO-8601 UTC string (e.g. '2024-01-15T10:00:00.000+00:00')."""
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc).isoformat(timespec="milliseconds")


def parse_timestamp(raw: Any) -> Optional[int]:
    """
    Convert a record date to epoch ms. Accepts:
      * numbers (already epoch ms)
      * numeric strings
      * ISO-8601 strings, with or without time / trailing 'Z' (naive means UTC)
    Returns None for anything else.
    """
    if isinstance(raw, bool) or raw is None:
        return None
    if isinstance(raw, (int, float)):
        return int(raw) if math.isfinite(raw) else None
    if not isinstance(raw, str):
        return None
    s = raw.strip()
    if not s:
        return None
    try:
        n = float(s)
    except ValueError:
        n = None
    if n is not None:
        return int(n) if math.isfinite(n) else None
    if s.endswith(("Z", "z")):
        s = s[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(s)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp() * 1000)
