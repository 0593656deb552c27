from __future__ import annotations

import io
import zipfile

import pytest

from designee_finder.common.models import Coordinate
from designee_finder.geo.reference import CoordinateTable


def make_designee(
    number: str,
    zip_code: str,
    *,
    name: str | None = None,
    phone: str = "555-0100",
    address_phone: str = "",
    city: str = "San Francisco",
    state: str = "California",
) -> dict:
    return {
        "designeeNumber": number,
        "fullName": name or f"Examiner {number}",
        "phoneNumber": phone,
        "email": f"{number.lower()}@example.com",
        "functionCodes": "PE,CFII",
        "completeAddress": f"1 Main St, {city}",
        "address": {
            "address1": "1 Main St",
            "address2": "",
            "city": city,
            "state": {"name": state},
            "country": {"name": "United States"},
            "zipCode": zip_code,
            "phoneNumber": address_phone,
            "addressFullName": f"Examiner {number}, 1 Main St",
        },
    }


def make_search_payload(designees: list[dict], total: int | None = None, **envelope) -> dict:
    payload = {"total": len(designees) if total is None else total, "data": designees}
    payload.update(envelope)
    return payload


class FakeSource:
    def __init__(self, payload):
        self.payload = payload
        self.calls: list[int] = []

    def fetch(self, category_id: int):
        self.calls.append(category_id)
        return self.payload


GEONAMES_ROWS = [
    ("94105", "San Francisco", "37.7898", "-122.3942"),
    ("94103", "San Francisco", "37.7725", "-122.4091"),
    ("95814", "Sacramento", "38.5804", "-121.4922"),
    ("10001", "New York", "40.7506", "-73.9972"),
]


def make_geonames_zip(rows=GEONAMES_ROWS, member: str = "US.txt") -> bytes:
    lines = [
        f"US\t{code}\t{place}\tState\tST\tCounty\t000\t\t\t{lat}\t{lon}\t4"
        for code, place, lat, lon in rows
    ]
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        zf.writestr(member, "\n".join(lines) + "\n")
    return buffer.getvalue()


class FakeDownloadClient:
    def __init__(self, content: bytes):
        self.content = content
        self.urls: list[str] = []
        self.closed = False

    def get_bytes(self, url: str, **_kwargs) -> bytes:
        self.urls.append(url)
        return self.content

    def close(self) -> None:
        self.closed = True


class ForbiddenSource:
    def fetch(self, category_id: int):
        raise AssertionError(f"remote fetch must not run for category {category_id}")


@pytest.fixture
def coordinate_table() -> CoordinateTable:
    return CoordinateTable(
        {
            "94105": Coordinate(latitude=37.7898, longitude=-122.3942),
            "94103": Coordinate(latitude=37.7725, longitude=-122.4091),
            "95814": Coordinate(latitude=38.5804, longitude=-121.4922),
            "10001": Coordinate(latitude=40.7506, longitude=-73.9972),
            "940": Coordinate(latitude=37.6, longitude=-122.4),
        }
    )
