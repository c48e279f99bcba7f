"""HTTP client with retry/backoff for Google Maps Platform APIs."""
from __future__ import annotations

import json
import logging
import random
import time
from typing import Any, Callable, Dict, Optional

import requests

from .errors import ProviderError

logger = logging.getLogger(__name__)

RETRYABLE_STATUSES = (429, 500, 502, 503, 504)


class HttpStatusError(ProviderError):
    """Non-OK HTTP status, with the decoded Google error body when present."""

    def __init__(self, url: str, status_code: int, payload: Optional[Dict[str, Any]] = None) -> None:
        self.url = url
        self.status_code = status_code
        self.payload = payload or {}
        super().__init__(f"HTTP {status_code} from {url}")

    @property
    def api_status(self) -> Optional[str]:
        error = self.payload.get("error")
        if isinstance(error, dict):
            return error.get("status")
        return None


class HttpClient:
    def __init__(
        self,
        api_key: str,
        timeout: int = 20,
        retry_max: int = 5,
        backoff_base: float = 0.5,
        backoff_max: float = 8.0,
    ) -> None:
        self.api_key = api_key
        self.timeout = timeout
        self.retry_max = retry_max
        self.backoff_base = backoff_base
        self.backoff_max = backoff_max
        self.session = requests.Session()

    def post_json(
        self,
        url: str,
        body: Dict[str, Any],
        field_mask: str,
        extra_headers: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        headers = {
            "X-Goog-Api-Key": self.api_key,
            "X-Goog-FieldMask": field_mask,
            "Content-Type": "application/json",
        }
        if extra_headers:
            headers.update(extra_headers)

        payload = json.dumps(body)
        return self._request(
            url,
            lambda: self.session.post(url, data=payload, headers=headers, timeout=self.timeout),
        )

    def get_json(self, url: str, params: Dict[str, Any]) -> Dict[str, Any]:
        query = dict(params)
        query["key"] = self.api_key
        return self._request(
            url,
            lambda: self.session.get(url, params=query, timeout=self.timeout),
        )

    def _request(self, url: str, send: Callable[[], requests.Response]) -> Dict[str, Any]:
        for attempt in range(1, self.retry_max + 1):
            try:
                resp = send()
            except requests.RequestException as exc:
                logger.warning("Request to %s failed: %s (attempt %s)", url, exc, attempt)
                if attempt >= self.retry_max:
                    raise ProviderError(f"Request to {url} failed: {exc}") from exc
                self._sleep_backoff(attempt)
                continue

            status = resp.status_code
            if status == 200:
                try:
                    return resp.json()
                except ValueError as exc:
                    logger.error("Non-JSON response from %s", url)
                    raise ProviderError(f"Non-JSON response from {url}") from exc

            if status in RETRYABLE_STATUSES:
                logger.warning("HTTP %s from %s (attempt %s)", status, url, attempt)
                if attempt >= self.retry_max:
                    raise HttpStatusError(url, status, _error_payload(resp))
                if not self._sleep_retry_after(resp):
                    self._sleep_backoff(attempt)
                continue

            # Non-retryable
            logger.error("HTTP %s from %s", status, url)
            raise HttpStatusError(url, status, _error_payload(resp))

        raise RuntimeError("Unexpected HTTP retry loop exit")

    def _sleep_backoff(self, attempt: int) -> None:
        base = min(self.backoff_base * (2 ** (attempt - 1)), self.backoff_max)
        jitter = random.uniform(0, self.backoff_base)
        time.sleep(base + jitter)

    def _sleep_retry_after(self, resp: requests.Response) -> bool:
        retry_after = resp.headers.get("Retry-After")
        if not retry_after:
            return False
        try:
            delay = float(retry_after)
        except ValueError:
            return False
        delay = max(0.0, min(delay, self.backoff_max))
        time.sleep(delay)
        return True


def _error_payload(resp: requests.Response) -> Dict[str, Any]:
    try:
        data = resp.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}
