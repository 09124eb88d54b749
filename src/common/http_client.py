"""HTTP client for the Google REST endpoints, with retry and error mapping."""

from __future__ import annotations

import logging
import time
from typing import Any

import requests

from .config import GoogleSettings
from .errors import TransportError, UpstreamError

logger = logging.getLogger(__name__)


class GoogleHTTPClient:
    """HTTP client wrapping requests for Google's OAuth and Analytics APIs.

    Features:
    - Bearer authorization
    - Automatic retries with exponential backoff (network errors, 429, 5xx)
    - Uniform JSON decoding; failures surface as TransportError / UpstreamError
    """

    RETRY_STATUSES = frozenset({429, 500, 502, 503, 504})

    def __init__(
        self,
        config: GoogleSettings | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.config = config or GoogleSettings()
        self._session = session or requests.Session()

    def get_json(
        self,
        url: str,
        access_token: str | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Send a GET request and return the decoded JSON body."""
        return self._request("GET", url, access_token=access_token, params=params)

    def post_json(
        self,
        url: str,
        body: dict[str, Any],
        access_token: str | None = None,
    ) -> dict[str, Any]:
        """Send a POST request with a JSON body."""
        return self._request("POST", url, access_token=access_token, json=body)

    def post_form(self, url: str, data: dict[str, Any], retry: bool = True) -> dict[str, Any]:
        """Send a form-encoded POST (token endpoint grants).

        Pass `retry=False` for single-use grants such as authorization codes.
        """
        return self._request("POST", url, data=data, retry=retry)

    def _request(
        self,
        method: str,
        url: str,
        access_token: str | None = None,
        retry: bool = True,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """Send a request with retries and map the outcome.

        Raises:
            TransportError: After all retries exhausted, or on an undecodable body.
            UpstreamError: On a non-200 status or an `error` field in the body.
        """
        headers = {"Accept": "application/json"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"

        attempts = max(self.config.max_retries, 1) if retry else 1
        for attempt in range(attempts):
            try:
                resp = self._session.request(
                    method,
                    url,
                    headers=headers,
                    timeout=self.config.request_timeout,
                    **kwargs,
                )
            except requests.RequestException as exc:
                if attempt + 1 >= attempts:
                    logger.error("%s %s failed: %s", method, url, exc)
                    raise TransportError(f"{method} {url} failed: {exc}") from exc
                self._backoff(attempt, attempts, exc)
                continue

            if resp.status_code in self.RETRY_STATUSES and attempt + 1 < attempts:
                self._backoff(attempt, attempts, f"HTTP {resp.status_code}")
                continue
            return self._decode(method, url, resp)

        raise TransportError(f"{method} {url} failed after {attempts} attempts")

    def _backoff(self, attempt: int, attempts: int, reason: object) -> None:
        wait_time = self.config.backoff_base ** attempt
        logger.warning(
            "Request failed (attempt %d/%d): %s — retrying in %.1fs",
            attempt + 1,
            attempts,
            reason,
            wait_time,
        )
        time.sleep(wait_time)

    @staticmethod
    def _decode(method: str, url: str, resp: requests.Response) -> dict[str, Any]:
        try:
            body = resp.json()
        except ValueError as exc:
            if resp.status_code != 200:
                raise UpstreamError(
                    f"{method} {url} returned HTTP {resp.status_code}",
                    status_code=resp.status_code,
                ) from exc
            raise TransportError(f"{method} {url} returned a non-JSON body") from exc

        if not isinstance(body, dict):
            body = {}

        error = body.get("error")
        if resp.status_code != 200 or error:
            # Token endpoint: {"error": "invalid_grant", "error_description": "..."}
            # Data/Admin APIs: {"error": {"code": 403, "message": "...", "status": "..."}}
            if isinstance(error, dict):
                error_code = str(error.get("status") or error.get("code") or "")
                description = str(error.get("message") or "")
            else:
                error_code = str(error or "")
                description = str(body.get("error_description") or "")
            raise UpstreamError(
                f"{method} {url} returned HTTP {resp.status_code}",
                status_code=resp.status_code,
                error_code=error_code,
                description=description,
            )
        return body

    def close(self) -> None:
        """Close the underlying session."""
        self._session.close()

    def __enter__(self) -> GoogleHTTPClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
