import logging

from conftest import make_designee, make_search_payload
from designee_finder.geo.index import build_geo_index
from designee_finder.registry.cache import ingest_search_response


def _record_set(*zip_codes: str):
    designees = [make_designee(f"D{idx}", zip_code) for idx, zip_code in enumerate(zip_codes)]
    return ingest_search_response(make_search_payload(designees), source="snapshot")


def _key_for(record_set, number: str) -> str:
    return next(key for key, designee in record_set.items() if designee.designee_number == number)


def test_zip_plus_four_resolves_by_five_digit_prefix(coordinate_table):
    record_set = _record_set("94105-1234")

    index = build_geo_index(record_set, coordinate_table)

    assert index.entries[_key_for(record_set, "D0")] == coordinate_table["94105"]


def test_short_zip_resolves_as_is(coordinate_table):
    record_set = _record_set("940")

    index = build_geo_index(record_set, coordinate_table)

    assert index.entries[_key_for(record_set, "D0")] == coordinate_table["940"]


def test_unresolvable_zip_is_skipped_not_fatal(coordinate_table):
    record_set = _record_set("94105", "99999")

    index = build_geo_index(record_set, coordinate_table)

    assert len(index) == 1
    assert index.resolved == 1
    assert index.unresolved == 1
    assert _key_for(record_set, "D0") in index
    assert _key_for(record_set, "D1") not in index
    assert len(record_set) == 2


def test_index_with_no_hits_is_empty(coordinate_table):
    index = build_geo_index(_record_set("00000", ""), coordinate_table)

    assert len(index) == 0
    assert index.unresolved == 2


def test_index_reports_counts_in_log(coordinate_table, caplog):
    caplog.set_level(logging.DEBUG, logger="designee_finder")

    build_geo_index(_record_set("94105", "99999"), coordinate_table)

    events = {record.event: record for record in caplog.records if hasattr(record, "event")}
    assert "GEOCODE_MISS" in events
    assert "'99999'" in events["GEOCODE_MISS"].getMessage()
    assert events["GEOCODE_SUMMARY"].rows_in == 2
    assert events["GEOCODE_SUMMARY"].rows_out == 1


def test_index_miss_is_visible_at_default_log_level(coordinate_table, caplog):
    caplog.set_level(logging.INFO, logger="designee_finder")

    build_geo_index(_record_set("94105", "99999"), coordinate_table)

    misses = [record for record in caplog.records if getattr(record, "event", None) == "GEOCODE_MISS"]
    assert len(misses) == 1
    assert misses[0].levelno == logging.WARNING
