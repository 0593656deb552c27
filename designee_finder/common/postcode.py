"""US ZIP code handling for coordinate lookups."""

from __future__ import annotations

ZIP5_LENGTH = 5


def lookup_postcode(raw: str | None) -> str:
    """Return the key used against the coordinate table.

    ZIP+4 values such as ``94105-1234`` collapse to their five digit prefix.
    Anything shorter than five characters is used as given.
    """
    if raw is None:
        return ""
    if len(raw) >= ZIP5_LENGTH:
        return raw[:ZIP5_LENGTH]
    return raw


def normalise_origin(raw: str | None) -> str:
    if raw is None:
        return ""
    return lookup_postcode(raw.strip())
