# product_cache/remote/product_api.py

"""HTTP client for the paginated products endpoint."""

import json
import logging
import time
from typing import Any

from curl_cffi import requests as curl_requests

from product_cache.config.settings import Settings
from product_cache.exceptions import RemoteFetchError
from product_cache.models.product import Product
from product_cache.models.product_page import ProductPage


class RemoteProductSource:
    """Fetches product pages from the catalog API.

    Retries, adaptive backoff and the circuit breaker all live here;
    callers see either a parsed page or a :class:`RemoteFetchError`.
    """

    def __init__(self, base_url: str | None = None) -> None:
        self.logger = logging.getLogger("product_cache.remote")
        self.settings = Settings()
        self.base_url = (base_url or self.settings.API_BASE_URL).rstrip("/")
        self.session = curl_requests.Session(
            impersonate=self.settings.IMPERSONATE_BROWSER
        )
        self._current_delay: float = self.settings.REQUEST_DELAY
        self._consecutive_failures: int = 0
        self._circuit_open: bool = False
        self._circuit_opened_at: float = 0.0
        self._request_timeout: int = self.settings.REQUEST_TIMEOUT

    def close(self) -> None:
        """Release the underlying HTTP session."""
        self.session.close()

    # ── Resilience ───────────────────────────────────────

    def _check_circuit(self) -> bool:
        """Return True if the circuit breaker blocks this request.

        After CIRCUIT_BREAKER_COOLDOWN seconds the breaker enters
        a half-open state, allowing a single probe request through.
        """
        if not self._circuit_open:
            return False
        elapsed = time.time() - self._circuit_opened_at
        if elapsed >= self.settings.CIRCUIT_BREAKER_COOLDOWN:
            self.logger.info(
                "Circuit breaker half-open after %.0fs", elapsed
            )
            self._circuit_open = False
            return False
        return True

    def _record_success(self) -> None:
        """Reset failure counters after a successful fetch."""
        self._consecutive_failures = 0
        self._circuit_open = False
        self._circuit_opened_at = 0.0
        self._current_delay = self.settings.REQUEST_DELAY

    def _record_failure(self) -> None:
        """Track failure and open circuit breaker if needed."""
        self._consecutive_failures += 1
        if (
            self._consecutive_failures
            >= self.settings.CIRCUIT_BREAKER_THRESHOLD
        ):
            self._circuit_open = True
            self._circuit_opened_at = time.time()
            self.logger.error(
                "Circuit breaker opened after %d consecutive failures",
                self._consecutive_failures,
            )

    def _escalate_delay(self) -> None:
        """Double the current delay up to the configured max."""
        max_delay = (
            self.settings.REQUEST_DELAY
            * self.settings.MAX_DELAY_MULTIPLIER
        )
        self._current_delay = min(self._current_delay * 2, max_delay)
        self.logger.warning(
            "Rate-limited, delay escalated to %.1fs",
            self._current_delay,
        )

    # ── Transport ────────────────────────────────────────

    def _get_json(
        self,
        path: str,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """GET ``path`` and decode a JSON object body.

        Raises :class:`RemoteFetchError` once retries are exhausted.
        """
        if self._check_circuit():
            raise RemoteFetchError("Circuit breaker open")

        url = f"{self.base_url}{path}"
        last_error = "Request failed"
        last_status = 0
        for attempt in range(self.settings.MAX_RETRIES):
            try:
                resp = self.session.get(
                    url,
                    params=params,
                    headers=self.settings.DEFAULT_HEADERS,
                    timeout=self._request_timeout,
                )
            except Exception as exc:
                last_error = f"Request error: {exc}"
                self.logger.warning(
                    "Request error on attempt %d for %s: %s",
                    attempt + 1,
                    url,
                    exc,
                    exc_info=True,
                )
                time.sleep(self._current_delay * (attempt + 1))
                continue

            last_status = resp.status_code
            if resp.status_code == 200:
                self._record_success()
                return self._decode(resp.text, url)

            last_error = f"HTTP {resp.status_code}"
            self.logger.warning(
                "HTTP %d on attempt %d for %s",
                resp.status_code,
                attempt + 1,
                url,
            )
            if resp.status_code == 404:
                # Not transient and not a host failure
                raise RemoteFetchError(last_error, status_code=404)
            if resp.status_code in (429, 403):
                self._escalate_delay()
                time.sleep(self._current_delay)

        self._record_failure()
        raise RemoteFetchError(last_error, status_code=last_status)

    @staticmethod
    def _decode(text: str, url: str) -> dict[str, Any]:
        """Parse a JSON object body or raise RemoteFetchError."""
        try:
            data: Any = json.loads(text)
        except json.JSONDecodeError as exc:
            msg = f"Invalid JSON from {url}: {exc}"
            raise RemoteFetchError(msg, status_code=200) from exc
        if not isinstance(data, dict):
            msg = f"Unexpected JSON payload from {url}"
            raise RemoteFetchError(msg, status_code=200)
        return data

    # ── Public API ───────────────────────────────────────

    def fetch(self, skip: int, limit: int) -> ProductPage:
        """Fetch one page of the catalog."""
        data = self._get_json(
            self.settings.PRODUCTS_PATH,
            params={"skip": skip, "limit": limit},
        )
        try:
            page = ProductPage.from_dict(data)
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            msg = f"Malformed products page: {exc}"
            raise RemoteFetchError(msg, status_code=200) from exc
        self.logger.debug(
            "Fetched %d products (skip=%d, limit=%d, total=%d)",
            len(page.products),
            skip,
            limit,
            page.total,
        )
        return page

    def fetch_product(self, product_id: int) -> Product:
        """Fetch a single product by id."""
        data = self._get_json(
            f"{self.settings.PRODUCTS_PATH}/{product_id}"
        )
        try:
            return Product.from_dict(data)
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            msg = f"Malformed product {product_id}: {exc}"
            raise RemoteFetchError(msg, status_code=200) from exc
