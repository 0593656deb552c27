"""Local snapshot persistence for registry responses."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from designee_finder.common.constants import SNAPSHOT_FILENAME_TEMPLATE
from designee_finder.common.errors import StorageError
from designee_finder.common.fs import atomic_write_json, read_json
from designee_finder.common.logging import log_event

logger = logging.getLogger(__name__)


class SnapshotStore:
    """One JSON file per category under ``cache_dir``.

    Files hold the validated registry response as it came off the wire, so a
    snapshot is ingested exactly like a fresh fetch.
    """

    def __init__(self, cache_dir: Path, filename_template: str = SNAPSHOT_FILENAME_TEMPLATE) -> None:
        self.cache_dir = Path(cache_dir)
        self.filename_template = filename_template

    def path_for(self, category_id: int) -> Path:
        return self.cache_dir / self.filename_template.format(category_id=category_id)

    def load(self, category_id: int) -> Any | None:
        path = self.path_for(category_id)
        log_event(
            logger,
            f"loading snapshot from {path}",
            category_id=category_id,
            source="snapshot",
            event="SNAPSHOT_LOAD",
        )
        try:
            return read_json(path)
        except FileNotFoundError:
            log_event(
                logger,
                f"no snapshot at {path}",
                category_id=category_id,
                source="snapshot",
                event="SNAPSHOT_MISSING",
                status="miss",
            )
            return None
        except json.JSONDecodeError as exc:
            raise StorageError(f"Snapshot {path} is not valid JSON: {exc}") from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageError(f"Unable to read snapshot {path}: {exc}") from exc

    def save(self, category_id: int, payload: Any) -> Path:
        path = self.path_for(category_id)
        try:
            atomic_write_json(path, payload)
        except OSError as exc:
            raise StorageError(f"Unable to write snapshot {path}: {exc}") from exc
        log_event(
            logger,
            f"saved snapshot to {path}",
            category_id=category_id,
            source="snapshot",
            event="SNAPSHOT_SAVE",
            status="ok",
        )
        return path
