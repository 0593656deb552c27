"""Record -> coordinate index built from postal codes."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from designee_finder.common.logging import log_event
from designee_finder.common.models import Coordinate
from designee_finder.common.postcode import lookup_postcode
from designee_finder.registry.cache import RecordSet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeoIndex:
    entries: Mapping[str, Coordinate]
    resolved: int = 0
    unresolved: int = 0

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def __contains__(self, record_key: object) -> bool:
        return record_key in self.entries

    def items(self):
        return self.entries.items()


def build_geo_index(record_set: RecordSet, table: Mapping[str, Coordinate]) -> GeoIndex:
    """Resolve every record's ZIP code against ``table``.

    Records whose code is not in the table are left out of the index with a
    diagnostic event. This never raises; an empty index is a valid result.
    """
    entries: dict[str, Coordinate] = {}
    missing = 0
    for record_key, designee in record_set.items():
        zip_code = designee.address.zip_code
        short_zip = lookup_postcode(zip_code)
        coordinate = table.get(short_zip)
        if coordinate is None:
            missing += 1
            log_event(
                logger,
                f"no location found for designee {record_key}, zip code {zip_code!r} ({short_zip!r})",
                level=logging.WARNING,
                stage="index",
                event="GEOCODE_MISS",
                status="miss",
            )
            continue
        entries[record_key] = coordinate

    log_event(
        logger,
        f"finished zip code lookup. found {len(entries)}; missing {missing}; for total {len(record_set)} designees",
        stage="index",
        event="GEOCODE_SUMMARY",
        status="ok",
        rows_in=len(record_set),
        rows_out=len(entries),
    )
    return GeoIndex(entries=MappingProxyType(entries), resolved=len(entries), unresolved=missing)
