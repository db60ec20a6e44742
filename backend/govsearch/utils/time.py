"""Time helpers."""

from __future__ import annotations

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Timezone-aware UTC now, used for record and index timestamps."""
    return datetime.now(tz=timezone.utc)
