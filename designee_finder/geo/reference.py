"""Postal code to coordinate reference table."""

from __future__ import annotations

import io
import logging
import time
import zipfile
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from types import MappingProxyType

from designee_finder.common.errors import ConfigError, StorageError, TransportError
from designee_finder.common.fs import atomic_write_bytes, iter_csv_rows, iter_tsv_rows
from designee_finder.common.http import HttpClient
from designee_finder.common.logging import log_event
from designee_finder.common.models import Coordinate
from designee_finder.common.time_utils import elapsed_ms

logger = logging.getLogger(__name__)

# Column positions in the GeoNames postal code dump.
GEONAMES_POSTAL_CODE = 1
GEONAMES_LATITUDE = 9
GEONAMES_LONGITUDE = 10


class CoordinateTable(Mapping[str, Coordinate]):
    """Immutable postal code -> Coordinate lookup."""

    def __init__(self, entries: Mapping[str, Coordinate] | Iterable[tuple[str, Coordinate]]) -> None:
        self._entries = MappingProxyType(dict(entries))

    def __getitem__(self, postal_code: str) -> Coordinate:
        return self._entries[postal_code]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


def _lookup_first(row: dict, candidates: list[str]) -> str | None:
    for key in candidates:
        value = (row.get(key) or "").strip()
        if value:
            return value
    return None


def _safe_float(value: str | None) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _valid_lat_lon(lat: float, lon: float) -> bool:
    return -90 <= lat <= 90 and -180 <= lon <= 180


def _build_table(path: Path, rows: Iterable[tuple[str | None, str | None, str | None]]) -> CoordinateTable:
    entries: dict[str, Coordinate] = {}
    rows_in = 0
    skipped = 0
    for code, raw_lat, raw_lon in rows:
        rows_in += 1
        lat = _safe_float(raw_lat)
        lon = _safe_float(raw_lon)
        if not code or lat is None or lon is None or not _valid_lat_lon(lat, lon):
            skipped += 1
            continue
        entries.setdefault(code, Coordinate(latitude=lat, longitude=lon))

    log_event(
        logger,
        f"loaded {len(entries)} postal codes from {path} (skipped {skipped} rows)",
        source="coordinates",
        event="COORDINATES_LOAD",
        status="ok",
        rows_in=rows_in,
        rows_out=len(entries),
    )
    return CoordinateTable(entries)


def load_coordinate_table(path: Path, coordinates_cfg: dict) -> CoordinateTable:
    if not path.exists():
        raise ConfigError(f"Missing coordinate reference table: {path}")

    postal_code_candidates = coordinates_cfg["postal_code_candidates"]
    lat_candidates = coordinates_cfg["lat_candidates"]
    lon_candidates = coordinates_cfg["lon_candidates"]
    rows = (
        (
            _lookup_first(row, postal_code_candidates),
            _lookup_first(row, lat_candidates),
            _lookup_first(row, lon_candidates),
        )
        for row in iter_csv_rows(path)
    )
    return _build_table(path, rows)


def load_geonames_table(path: Path) -> CoordinateTable:
    """Load a GeoNames postal dump (tab separated, no header)."""
    rows = (
        (
            row[GEONAMES_POSTAL_CODE].strip(),
            row[GEONAMES_LATITUDE].strip(),
            row[GEONAMES_LONGITUDE].strip(),
        )
        if len(row) > GEONAMES_LONGITUDE
        else (None, None, None)
        for row in iter_tsv_rows(path)
    )
    return _build_table(path, rows)


def geonames_cache_path(cache_dir: Path, coordinates_cfg: dict) -> Path:
    return Path(cache_dir) / f"geonames-{coordinates_cfg['geonames_member']}"


def ensure_geonames_table(cache_dir: Path, coordinates_cfg: dict, http_client: HttpClient) -> Path:
    """Return the cached GeoNames dump, downloading it on first use."""
    path = geonames_cache_path(cache_dir, coordinates_cfg)
    if path.exists():
        return path

    url = coordinates_cfg["geonames_url"]
    member = coordinates_cfg["geonames_member"]
    started_at = time.monotonic()
    archive = http_client.get_bytes(url)
    try:
        with zipfile.ZipFile(io.BytesIO(archive)) as zf:
            data = zf.read(member)
    except zipfile.BadZipFile as exc:
        raise TransportError(f"{url} did not return a zip archive") from exc
    except KeyError as exc:
        raise TransportError(f"{url} has no member {member}") from exc

    try:
        atomic_write_bytes(path, data)
    except OSError as exc:
        raise StorageError(f"Unable to write coordinate table {path}: {exc}") from exc

    log_event(
        logger,
        f"downloaded {url} into {path}",
        source="coordinates",
        event="COORDINATES_DOWNLOAD",
        status="ok",
        duration_ms=elapsed_ms(started_at),
    )
    return path


def load_reference_table(
    coordinates_cfg: dict,
    cache_dir: Path,
    *,
    path: Path | None = None,
    http_client: HttpClient | None = None,
) -> CoordinateTable:
    """Load the configured CSV, or the GeoNames dump cached under ``cache_dir``."""
    if path is not None:
        return load_coordinate_table(path, coordinates_cfg)

    table_path = geonames_cache_path(cache_dir, coordinates_cfg)
    if not table_path.exists():
        owns_client = http_client is None
        client = http_client or HttpClient()
        try:
            table_path = ensure_geonames_table(cache_dir, coordinates_cfg, client)
        finally:
            if owns_client:
                client.close()
    return load_geonames_table(table_path)
