"""Remote registry search client."""

from __future__ import annotations

import logging
import time
from typing import Any, Protocol

from designee_finder.common.constants import (
    DEFAULT_COUNTRY_ID,
    DEFAULT_PAGE_ROWS,
    DEFAULT_SEARCH_URL,
)
from designee_finder.common.http import HttpClient, TimeoutConfig
from designee_finder.common.logging import log_event
from designee_finder.common.time_utils import elapsed_ms

logger = logging.getLogger(__name__)


class RegistrySource(Protocol):
    def fetch(self, category_id: int) -> Any: ...


def build_search_query(
    category_id: int,
    *,
    country_id: int = DEFAULT_COUNTRY_ID,
    is_location_search: bool = True,
    page_rows: int = DEFAULT_PAGE_ROWS,
) -> dict:
    return {
        "pageModel": {"first": 0, "rows": page_rows},
        "countryId": country_id,
        "designeeTypeId": category_id,
        "isLocationSearch": is_location_search,
    }


class RegistryClient:
    """Runs the single bulk search against the designee registry."""

    def __init__(
        self,
        http_client: HttpClient,
        *,
        search_url: str = DEFAULT_SEARCH_URL,
        country_id: int = DEFAULT_COUNTRY_ID,
        is_location_search: bool = True,
        page_rows: int = DEFAULT_PAGE_ROWS,
    ) -> None:
        self.http_client = http_client
        self.search_url = search_url
        self.country_id = country_id
        self.is_location_search = is_location_search
        self.page_rows = page_rows

    @classmethod
    def from_settings(cls, registry_cfg: dict, http_client: HttpClient | None = None) -> "RegistryClient":
        timeout = TimeoutConfig(
            connect=float(registry_cfg["timeout"]["connect"]),
            read=float(registry_cfg["timeout"]["read"]),
        )
        return cls(
            http_client or HttpClient(timeout=timeout),
            search_url=registry_cfg["search_url"],
            country_id=int(registry_cfg["country_id"]),
            is_location_search=bool(registry_cfg["is_location_search"]),
            page_rows=int(registry_cfg["page_rows"]),
        )

    def fetch(self, category_id: int) -> Any:
        query = build_search_query(
            category_id,
            country_id=self.country_id,
            is_location_search=self.is_location_search,
            page_rows=self.page_rows,
        )
        started_at = time.monotonic()
        payload = self.http_client.post_json(self.search_url, body=query)
        log_event(
            logger,
            f"fetched registry search for category {category_id}",
            category_id=category_id,
            source="remote",
            event="REMOTE_FETCH",
            status="ok",
            duration_ms=elapsed_ms(started_at),
        )
        return payload

    def close(self) -> None:
        self.http_client.close()
