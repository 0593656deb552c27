"""Rank indexed designees by distance from an origin postal code."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from designee_finder.common.deterministic import stable_sorted
from designee_finder.common.errors import OriginNotFoundError
from designee_finder.common.logging import log_event
from designee_finder.common.models import Coordinate
from designee_finder.common.postcode import normalise_origin
from designee_finder.geo.distance import vincenty_miles
from designee_finder.geo.index import GeoIndex

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RankedEntry:
    record_key: str
    miles: float


def rank_by_distance(
    geo_index: GeoIndex,
    origin_postal_code: str,
    table: Mapping[str, Coordinate],
) -> list[RankedEntry]:
    origin = table.get(normalise_origin(origin_postal_code))
    if origin is None:
        raise OriginNotFoundError(f"origin zip code {origin_postal_code} not found")

    # Any ConvergenceError aborts the whole ranking.
    entries = [
        RankedEntry(record_key=record_key, miles=vincenty_miles(origin, coordinate))
        for record_key, coordinate in geo_index.items()
    ]
    # Equal distances keep index order, which follows the registry response.
    ranked = stable_sorted(entries, key=lambda entry: entry.miles)

    log_event(
        logger,
        f"ranked {len(ranked)} designees by distance to {origin_postal_code}",
        stage="rank",
        event="RANK_DONE",
        status="ok",
        rows_in=len(geo_index),
        rows_out=len(ranked),
    )
    return ranked
