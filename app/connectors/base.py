"""
app/connectors/base.py

Shared HTTP mechanics for sheet connectors.

Retry policy
------------
Timeouts, connection errors and status codes in RETRYABLE_STATUS_CODES are
retried up to ``max_retries`` times, sleeping
``backoff_initial_seconds * backoff_multiplier ** attempt`` between tries.
Any other HTTP error or request failure (redirect loops, broken
chunked bodies, invalid URLs) fails immediately. Both outcomes surface as
ConnectorRequestError; callers decide whether that is fatal.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any

import requests

from app.config import ExternalHTTPSettings

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


class ConnectorRequestError(RuntimeError):
    """
    Raised when a sheet cannot be fetched.
    """


class RequestThrottle:
    """
    Minimum interval between outbound requests, shared across threads.
    """

    def __init__(self, *, rate_limit_per_second: float) -> None:
        self._min_interval = 1.0 / rate_limit_per_second if rate_limit_per_second > 0 else 0.0
        self._last_request = 0.0
        self._lock = threading.Lock()

    def wait(self) -> None:
        if self._min_interval <= 0:
            return
        with self._lock:
            wait_seconds = self._min_interval - (time.monotonic() - self._last_request)
            if wait_seconds > 0:
                time.sleep(wait_seconds)
            self._last_request = time.monotonic()


class BaseConnector:
    """
    Holds the session, throttle and retry policy for one upstream source.
    """

    source: str

    def __init__(
        self,
        *,
        source: str,
        http_settings: ExternalHTTPSettings,
        session: requests.Session | None = None,
    ) -> None:
        self.source = source
        self._http = http_settings
        self._session = session or requests.Session()
        self._throttle = RequestThrottle(rate_limit_per_second=http_settings.rate_limit_per_second)

    def _get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        """
        GET *url* and return the decoded JSON body.
        """

        response = self._get(url, params)
        try:
            return response.json()
        except ValueError as exc:
            raise ConnectorRequestError(f"{self.source}: response was not valid JSON.") from exc

    def _get(self, url: str, params: dict[str, Any] | None = None) -> requests.Response:
        attempts = self._http.max_retries + 1
        last_error: Exception | None = None

        for attempt in range(attempts):
            try:
                return self._send(url, params)
            except requests.HTTPError as exc:
                status_code = exc.response.status_code if exc.response is not None else None
                if status_code not in RETRYABLE_STATUS_CODES:
                    logger.error(
                        "Sheet request rejected source=%s status=%s params=%s error=%s",
                        self.source,
                        status_code,
                        params,
                        exc,
                    )
                    raise ConnectorRequestError(f"{self.source}: non-retryable request failure.") from exc
                last_error = exc
            except (requests.Timeout, requests.ConnectionError) as exc:
                last_error = exc
            except requests.RequestException as exc:
                logger.error(
                    "Sheet request failed source=%s params=%s error_type=%s error=%s",
                    self.source,
                    params,
                    type(exc).__name__,
                    exc,
                )
                raise ConnectorRequestError(f"{self.source}: non-retryable request failure.") from exc

            if attempt + 1 < attempts:
                delay = self._backoff_seconds(attempt)
                logger.warning(
                    "Sheet request retry source=%s attempt=%d/%d wait_seconds=%.2f params=%s error=%s",
                    self.source,
                    attempt + 1,
                    self._http.max_retries,
                    delay,
                    params,
                    last_error,
                )
                time.sleep(delay)

        logger.error(
            "Sheet request gave up source=%s attempts=%d params=%s error=%s",
            self.source,
            attempts,
            params,
            last_error,
        )
        raise ConnectorRequestError(f"{self.source}: request failed after retries.") from last_error

    def _send(self, url: str, params: dict[str, Any] | None) -> requests.Response:
        self._throttle.wait()
        response = self._session.request(
            method="GET",
            url=url,
            params=params,
            timeout=self._http.timeout_seconds,
        )
        if response.status_code in RETRYABLE_STATUS_CODES:
            raise requests.HTTPError(f"Retryable HTTP status code: {response.status_code}", response=response)
        response.raise_for_status()
        return response

    def _backoff_seconds(self, attempt: int) -> float:
        return self._http.backoff_initial_seconds * (self._http.backoff_multiplier**attempt)
