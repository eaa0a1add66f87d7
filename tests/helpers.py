"""Constants and builders shared by the test modules."""

from __future__ import annotations

from datetime import datetime, timezone

from helpdesk.config import StoreConfig

# A Monday at 09:00 UTC.
NOW = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)
PASSWORD = "secret123"


def store_config(tmp_path) -> StoreConfig:
    return StoreConfig(
        url=f"sqlite+aiosqlite:///{tmp_path / 'helpdesk.db'}",
        busy_timeout_seconds=5,
        retry_backoff_seconds=0,
    )
