"""Fetch/cache/load reconciliation for the designee registry."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Iterator, Mapping

from designee_finder.common.constants import ACCEPTED_RESPONSE_STATUSES
from designee_finder.common.errors import ValidationError
from designee_finder.common.ids import generate_record_key
from designee_finder.common.logging import log_event
from designee_finder.common.models import Designee, SearchResponse
from designee_finder.registry.client import RegistrySource
from designee_finder.registry.snapshot import SnapshotStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecordSet:
    """Read-only ``key -> Designee`` mapping, in registry response order."""

    records: Mapping[str, Designee]
    source: str
    total: int = 0

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[str]:
        return iter(self.records)

    def __getitem__(self, key: str) -> Designee:
        return self.records[key]

    def items(self):
        return self.records.items()


def ingest_search_response(payload: Any, *, source: str) -> RecordSet:
    response = SearchResponse.from_payload(payload)
    if response.status not in ACCEPTED_RESPONSE_STATUSES or response.title:
        raise ValidationError(
            f"search response error. Status: {response.status}, Title: {response.title}"
        )
    if not response.data:
        raise ValidationError("search response has empty data")
    if len(response.data) != response.total:
        raise ValidationError(
            f"unexpected number of items in search response {response.total} != {len(response.data)}"
        )

    records = {generate_record_key(): designee for designee in response.data}
    return RecordSet(records=MappingProxyType(records), source=source, total=response.total)


class RegistryCache:
    """Produces a RecordSet from the remote registry or the local snapshot.

    The remote registry is the source of truth. The snapshot is only a
    fallback and is replaced after every successful fetch.
    """

    def __init__(self, source: RegistrySource, store: SnapshotStore) -> None:
        self.source = source
        self.store = store

    def obtain(self, category_id: int, force_refresh: bool = False) -> RecordSet:
        if force_refresh:
            return self._fetch_remote(category_id)

        record_set = self._load_local(category_id)
        if record_set is None:
            record_set = self._fetch_remote(category_id)
        return record_set

    def _fetch_remote(self, category_id: int) -> RecordSet:
        payload = self.source.fetch(category_id)
        record_set = ingest_search_response(payload, source="remote")
        self.store.save(category_id, payload)
        self._log_ingest(category_id, record_set)
        return record_set

    def _load_local(self, category_id: int) -> RecordSet | None:
        payload = self.store.load(category_id)
        if payload is None:
            return None
        record_set = ingest_search_response(payload, source="snapshot")
        self._log_ingest(category_id, record_set)
        return record_set

    def _log_ingest(self, category_id: int, record_set: RecordSet) -> None:
        log_event(
            logger,
            f"ingested {len(record_set)} designees from {record_set.source}",
            category_id=category_id,
            source=record_set.source,
            event="INGEST_OK",
            status="ok",
            rows_out=len(record_set),
        )
