"""HTTP client with timeouts and typed transport failures."""

from __future__ import annotations

from dataclasses import dataclass
from types import TracebackType
from typing import Any

import requests

from designee_finder.common.constants import USER_AGENT
from designee_finder.common.errors import TransportError


@dataclass(frozen=True)
class TimeoutConfig:
    connect: float = 20.0
    read: float = 120.0


class HttpRequestError(TransportError):
    error_code = "HTTP_ERROR"


class HttpClient:
    def __init__(self, *, timeout: TimeoutConfig | None = None) -> None:
        self.timeout = timeout or TimeoutConfig()
        self.session = requests.Session()

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "HttpClient":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _headers(self, headers: dict[str, str] | None) -> dict[str, str]:
        out = {"User-Agent": USER_AGENT, "Accept": "application/json"}
        if headers:
            out.update(headers)
        return out

    def _raise_for_status(self, response: requests.Response, url: str) -> None:
        status = response.status_code
        if status >= 400:
            raise HttpRequestError(f"HTTP status {status} from {url}")

    def _send(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: Any = None,
        headers: dict[str, str] | None = None,
        timeout: TimeoutConfig | None = None,
    ) -> requests.Response:
        req_timeout = timeout or self.timeout
        try:
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=json_body,
                headers=self._headers(headers),
                timeout=(req_timeout.connect, req_timeout.read),
            )
        except requests.Timeout as exc:
            raise TransportError(f"Timed out requesting {url}: {exc}") from exc
        except requests.RequestException as exc:
            raise TransportError(f"Request to {url} failed: {exc}") from exc

        self._raise_for_status(response, url)
        return response

    def request_json(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: Any = None,
        headers: dict[str, str] | None = None,
        timeout: TimeoutConfig | None = None,
    ) -> Any:
        response = self._send(
            method,
            url,
            params=params,
            json_body=json_body,
            headers=headers,
            timeout=timeout,
        )
        try:
            return response.json()
        except ValueError as exc:
            raise HttpRequestError(f"Invalid JSON payload from {url}") from exc

    def get_bytes(
        self,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        timeout: TimeoutConfig | None = None,
    ) -> bytes:
        merged = {"Accept": "*/*"}
        if headers:
            merged.update(headers)
        return self._send("GET", url, headers=merged, timeout=timeout).content

    def post_json(
        self,
        url: str,
        *,
        body: Any,
        headers: dict[str, str] | None = None,
        timeout: TimeoutConfig | None = None,
    ) -> Any:
        merged = {"Content-Type": "application/json"}
        if headers:
            merged.update(headers)
        return self.request_json("POST", url, json_body=body, headers=merged, timeout=timeout)
