from pathlib import Path

import pytest

from conftest import FakeDownloadClient, make_geonames_zip

from designee_finder.common.errors import ConfigError, StorageError, TransportError
from designee_finder.common.models import Coordinate
from designee_finder.geo.reference import (
    CoordinateTable,
    ensure_geonames_table,
    load_coordinate_table,
    load_geonames_table,
    load_reference_table,
)

COORDINATES_CFG = {
    "postal_code_candidates": ["zip", "postal_code"],
    "lat_candidates": ["lat", "latitude"],
    "lon_candidates": ["lon", "longitude"],
}


class ForbiddenDownloadClient:
    def get_bytes(self, url: str, **_kwargs) -> bytes:
        raise AssertionError(f"download must not run for {url}")


def test_load_coordinate_table_reads_candidate_columns(tmp_path: Path):
    path = tmp_path / "zips.csv"
    path.write_text(
        "postal_code,latitude,longitude\n"
        "94105,37.7898,-122.3942\n"
        "10001,40.7506,-73.9972\n",
        encoding="utf-8",
    )

    table = load_coordinate_table(path, COORDINATES_CFG)

    assert len(table) == 2
    assert table["94105"] == Coordinate(latitude=37.7898, longitude=-122.3942)


def test_load_coordinate_table_skips_bad_rows_and_keeps_first_duplicate(tmp_path: Path):
    path = tmp_path / "zips.csv"
    path.write_text(
        "zip,lat,lon\n"
        "94105,37.7898,-122.3942\n"
        "94105,0,0\n"
        ",1,1\n"
        "10001,north,-73.9\n"
        "60601,91,0\n",
        encoding="utf-8",
    )

    table = load_coordinate_table(path, COORDINATES_CFG)

    assert list(table) == ["94105"]
    assert table["94105"].latitude == 37.7898


def test_load_coordinate_table_missing_file_raises(tmp_path: Path):
    with pytest.raises(ConfigError):
        load_coordinate_table(tmp_path / "absent.csv", COORDINATES_CFG)


def test_coordinate_table_is_immutable_copy():
    source = {"94105": Coordinate(37.7898, -122.3942)}
    table = CoordinateTable(source)
    source["10001"] = Coordinate(40.75, -73.99)

    assert "10001" not in table
    assert table.get("10001") is None
    with pytest.raises(TypeError):
        table["10001"] = Coordinate(40.75, -73.99)


GEONAMES_CFG = {
    **COORDINATES_CFG,
    "path": None,
    "geonames_url": "https://geonames.example/export/zip/US.zip",
    "geonames_member": "US.txt",
}


def test_load_geonames_table_reads_fixed_columns(tmp_path: Path):
    path = tmp_path / "US.txt"
    path.write_text(
        "US\t94105\tSan Francisco\tCalifornia\tCA\tSan Francisco\t075\t\t\t37.7898\t-122.3942\t4\n"
        "US\t94105\tDuplicate\tCalifornia\tCA\tSan Francisco\t075\t\t\t0\t0\t4\n"
        'US\t10001\tNew "York"\tNew York\tNY\tNew York\t061\t\t\t40.7506\t-73.9972\t4\n'
        "US\t99999\tShort row\n"
        "US\t60601\tChicago\tIllinois\tIL\tCook\t031\t\t\t\t-87.6\t4\n",
        encoding="utf-8",
    )

    table = load_geonames_table(path)

    assert list(table) == ["94105", "10001"]
    assert table["94105"] == Coordinate(latitude=37.7898, longitude=-122.3942)


def test_load_reference_table_downloads_geonames_once(tmp_path: Path):
    client = FakeDownloadClient(make_geonames_zip())

    first = load_reference_table(GEONAMES_CFG, tmp_path, http_client=client)
    second = load_reference_table(GEONAMES_CFG, tmp_path, http_client=client)

    assert client.urls == ["https://geonames.example/export/zip/US.zip"]
    assert client.closed is False
    assert (tmp_path / "geonames-US.txt").exists()
    assert first["95814"] == Coordinate(latitude=38.5804, longitude=-121.4922)
    assert dict(second) == dict(first)


def test_load_reference_table_closes_client_it_creates(tmp_path: Path, monkeypatch):
    created = []

    def factory():
        client = FakeDownloadClient(make_geonames_zip())
        created.append(client)
        return client

    monkeypatch.setattr("designee_finder.geo.reference.HttpClient", factory)

    table = load_reference_table(GEONAMES_CFG, tmp_path)

    assert "94105" in table
    assert len(created) == 1
    assert created[0].closed is True


def test_load_reference_table_prefers_explicit_csv(tmp_path: Path):
    path = tmp_path / "zips.csv"
    path.write_text("zip,lat,lon\n94105,37.7898,-122.3942\n", encoding="utf-8")

    table = load_reference_table(GEONAMES_CFG, tmp_path, path=path, http_client=ForbiddenDownloadClient())

    assert list(table) == ["94105"]


def test_ensure_geonames_table_rejects_non_zip_body(tmp_path: Path):
    client = FakeDownloadClient(b"<html>maintenance</html>")

    with pytest.raises(TransportError, match="zip archive"):
        ensure_geonames_table(tmp_path, GEONAMES_CFG, client)
    assert not (tmp_path / "geonames-US.txt").exists()


def test_ensure_geonames_table_rejects_archive_without_member(tmp_path: Path):
    client = FakeDownloadClient(make_geonames_zip(member="CA.txt"))

    with pytest.raises(TransportError, match="US.txt"):
        ensure_geonames_table(tmp_path, GEONAMES_CFG, client)


def test_ensure_geonames_table_write_failure_raises_storage_error(tmp_path: Path, monkeypatch):
    def refuse(path, data):
        raise OSError("disk full")

    monkeypatch.setattr("designee_finder.geo.reference.atomic_write_bytes", refuse)

    with pytest.raises(StorageError):
        ensure_geonames_table(tmp_path, GEONAMES_CFG, FakeDownloadClient(make_geonames_zip()))
