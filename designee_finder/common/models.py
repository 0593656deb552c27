"""Data models used across the pipeline."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Mapping

from designee_finder.common.errors import ValidationError


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _nested_name(value: Any) -> str:
    if isinstance(value, dict):
        return _text(value.get("name"))
    return ""


def _field(payload: dict, name: str, default: Any = None) -> Any:
    # Registry envelopes are inconsistent about key case ("Status" vs "status").
    lowered = name.lower()
    matches = [key for key in payload if isinstance(key, str) and key.lower() == lowered]
    if not matches:
        return default
    if len(matches) > 1:
        raise ValidationError(f"Ambiguous response field {name!r}: {sorted(matches)}")
    return payload[matches[0]]


def _as_int(value: Any, ctx: str) -> int:
    if value is None:
        return 0
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise ValidationError(f"{ctx} must be an integer, got {value!r}")


@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class Address:
    address1: str
    address2: str
    city: str
    state_name: str
    country_name: str
    zip_code: str
    phone_number: str
    address_full_name: str

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any] | None) -> "Address":
        raw = raw or {}
        return cls(
            address1=_text(raw.get("address1")),
            address2=_text(raw.get("address2")),
            city=_text(raw.get("city")),
            state_name=_nested_name(raw.get("state")),
            country_name=_nested_name(raw.get("country")),
            zip_code=_text(raw.get("zipCode")),
            phone_number=_text(raw.get("phoneNumber")),
            address_full_name=_text(raw.get("addressFullName")),
        )


@dataclass(frozen=True)
class Designee:
    designee_number: str
    full_name: str
    phone_number: str
    address: Address
    email: str
    function_codes: str
    complete_address: str

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Designee":
        address = raw.get("address")
        if address is not None and not isinstance(address, dict):
            raise ValidationError(f"designee address must be an object, got {type(address).__name__}")
        return cls(
            designee_number=_text(raw.get("designeeNumber")),
            full_name=_text(raw.get("fullName")),
            phone_number=_text(raw.get("phoneNumber")),
            address=Address.from_dict(address),
            email=_text(raw.get("email")),
            function_codes=_text(raw.get("functionCodes")),
            complete_address=_text(raw.get("completeAddress")),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SearchResponse:
    total: int
    status: int
    title: str
    data: tuple[Designee, ...]

    @classmethod
    def from_payload(cls, payload: Any) -> "SearchResponse":
        if not isinstance(payload, dict):
            raise ValidationError(f"search response must be a JSON object, got {type(payload).__name__}")
        raw_data = _field(payload, "data")
        if raw_data is None:
            raw_data = []
        if not isinstance(raw_data, list):
            raise ValidationError("search response data must be a list")
        designees = []
        for idx, item in enumerate(raw_data):
            if not isinstance(item, dict):
                raise ValidationError(f"search response data[{idx}] must be an object")
            designees.append(Designee.from_dict(item))
        return cls(
            total=_as_int(_field(payload, "total"), "total"),
            status=_as_int(_field(payload, "status"), "Status"),
            title=_text(_field(payload, "title")),
            data=tuple(designees),
        )
