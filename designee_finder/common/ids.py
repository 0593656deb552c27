"""Run and record identifier helpers."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone


def generate_run_id() -> str:
    now = datetime.now(tz=timezone.utc)
    return now.strftime("run-%Y%m%dT%H%M%S%fZ")


def generate_record_key() -> str:
    # Fresh per ingestion; not derived from record content.
    return str(uuid.uuid4())
