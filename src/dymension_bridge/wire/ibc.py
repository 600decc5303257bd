"""IBC timeout helpers."""
from __future__ import annotations

import time
from typing import Optional

NANOS_PER_SECOND = 1_000_000_000
DEFAULT_IBC_TIMEOUT_HOURS = 1


def ibc_timeout_timestamp(
    hours: int = DEFAULT_IBC_TIMEOUT_HOURS,
    now: Optional[float] = None,
) -> int:
    """Timeout ``hours`` from now, in nanoseconds since the epoch."""
    seconds = int(time.time() if now is None else now)
    return (seconds + hours * 3600) * NANOS_PER_SECOND


__all__ = ["NANOS_PER_SECOND", "DEFAULT_IBC_TIMEOUT_HOURS", "ibc_timeout_timestamp"]
