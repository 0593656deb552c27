"""Plain-text ranked designee report."""

from __future__ import annotations

from typing import Iterable, TextIO

from designee_finder.common.models import Designee
from designee_finder.geo.ranker import RankedEntry
from designee_finder.registry.cache import RecordSet


def _format_designee(entry: RankedEntry, designee: Designee) -> list[str]:
    address = designee.address
    lines = [
        f"{entry.miles:.1f} sm",
        f"Designee Name: {designee.full_name}",
        f"Designee City: {address.city}, {address.state_name}",
        f"Designee Phone Number: {designee.phone_number}",
    ]
    if address.phone_number and address.phone_number != designee.phone_number:
        lines.append(f"Designee Address Phone Number: {address.phone_number}")
    lines.append(f"Designee Email: {designee.email}")
    lines.append(f"Designee Function Codes: {designee.function_codes}")
    return lines


def format_ranked_report(origin_postal_code: str, ranked: Iterable[RankedEntry], record_set: RecordSet) -> str:
    lines = [f"=== DPEs ranked by distance to {origin_postal_code} ===", ""]
    for entry in ranked:
        lines.extend(_format_designee(entry, record_set[entry.record_key]))
        lines.append("")
    return "\n".join(lines) + "\n"


def write_ranked_report(
    stream: TextIO,
    origin_postal_code: str,
    ranked: Iterable[RankedEntry],
    record_set: RecordSet,
) -> None:
    stream.write(format_ranked_report(origin_postal_code, ranked, record_set))
    stream.flush()
