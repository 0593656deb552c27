"""Rank certified designees by distance from an origin ZIP code."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

from designee_finder.common.config_loader import DEFAULT_CONFIG_PATH, load_settings
from designee_finder.common.constants import EXIT_HARD_FAIL, EXIT_SUCCESS
from designee_finder.common.errors import DesigneeFinderError
from designee_finder.common.ids import generate_run_id
from designee_finder.common.logging import build_logger, log_event
from designee_finder.common.time_utils import elapsed_ms
from designee_finder.geo.index import build_geo_index
from designee_finder.geo.ranker import rank_by_distance
from designee_finder.geo.reference import load_reference_table
from designee_finder.pipeline.report import write_ranked_report
from designee_finder.registry.cache import RegistryCache
from designee_finder.registry.client import RegistryClient
from designee_finder.registry.snapshot import SnapshotStore


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("origin_zip", help="origin ZIP code, e.g. 94105")
    parser.add_argument("--category-id", type=int, default=None)
    parser.add_argument("--refresh", action="store_true", help="fetch from the registry even if a snapshot exists")
    parser.add_argument("--config", default=str(DEFAULT_CONFIG_PATH))
    parser.add_argument("--overlay-config", default=None)
    parser.add_argument("--coordinates", default=None, help="postal code coordinate CSV")
    parser.add_argument("--cache-dir", default=None)
    parser.add_argument("--log-file", default=None)
    parser.add_argument("--run-id", default=None)
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARN", "ERROR"])
    return parser.parse_args(argv)


def run_command(args: argparse.Namespace, stdout=None) -> int:
    if stdout is None:
        stdout = sys.stdout
    run_id = args.run_id or generate_run_id()
    logger = build_logger(
        run_id,
        level=args.log_level,
        log_path=Path(args.log_file) if args.log_file else None,
    )

    try:
        settings = load_settings(
            Path(args.config),
            overlay_path=Path(args.overlay_config) if args.overlay_config else None,
        )
        category_id = args.category_id if args.category_id is not None else int(settings.registry["category_id"])
        cache_dir = Path(args.cache_dir) if args.cache_dir else settings.cache_dir()
        coordinates_path = Path(args.coordinates) if args.coordinates else settings.coordinates_path()

        table = load_reference_table(settings.coordinates, cache_dir, path=coordinates_path)
        store = SnapshotStore(cache_dir, settings.cache["filename_template"])

        started_at = time.monotonic()
        log_event(logger, "stage start", stage="obtain", category_id=category_id, event="STAGE_START", status="ok")
        client = RegistryClient.from_settings(settings.registry)
        try:
            record_set = RegistryCache(client, store).obtain(category_id, force_refresh=args.refresh)
        finally:
            client.close()
        log_event(
            logger,
            "stage end",
            stage="obtain",
            category_id=category_id,
            source=record_set.source,
            event="STAGE_END",
            status="ok",
            duration_ms=elapsed_ms(started_at),
            rows_out=len(record_set),
        )

        geo_index = build_geo_index(record_set, table)
        ranked = rank_by_distance(geo_index, args.origin_zip, table)
        write_ranked_report(stdout, args.origin_zip, ranked, record_set)
    except DesigneeFinderError as exc:
        log_event(
            logger,
            f"run failed: {exc}",
            level=logging.ERROR,
            event="RUN_FAIL",
            status="error",
            error_code=exc.error_code,
        )
        return EXIT_HARD_FAIL
    except Exception as exc:
        logger.exception(
            f"unexpected failure: {exc}",
            extra={"event": "RUN_FAIL", "status": "error", "error_code": "UNEXPECTED_ERROR"},
        )
        return EXIT_HARD_FAIL

    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    return run_command(args)


if __name__ == "__main__":
    raise SystemExit(main())
