# product_cache/services/connectivity.py

"""Network reachability probe used to pick remote vs. cached data."""

import asyncio
import logging
import time
from dataclasses import dataclass

from curl_cffi import requests as curl_requests

from product_cache.config.settings import Settings

logger = logging.getLogger("product_cache.connectivity")

_SLOW_THRESHOLD_MS = 3000.0


@dataclass
class ConnectivityResult:
    """Outcome of a single reachability probe."""

    online: bool
    status: str  # "ok", "slow", "down"
    latency_ms: float
    message: str


class ConnectivityProbe:
    """Reports whether the catalog API host is reachable."""

    def __init__(
        self,
        probe_url: str | None = None,
        timeout: int | None = None,
    ) -> None:
        self.settings = Settings()
        self.probe_url = probe_url or self.settings.PROBE_URL
        self.timeout = timeout or self.settings.PROBE_TIMEOUT
        self.session = curl_requests.Session(
            impersonate=self.settings.IMPERSONATE_BROWSER
        )

    def check(self) -> ConnectivityResult:
        """Probe the network once; never raises."""
        start = time.monotonic()
        try:
            resp = self.session.get(
                self.probe_url,
                headers=self.settings.DEFAULT_HEADERS,
                timeout=self.timeout,
            )
        except Exception as exc:
            elapsed_ms = (time.monotonic() - start) * 1000
            return ConnectivityResult(
                online=False,
                status="down",
                latency_ms=elapsed_ms,
                message=str(exc)[:80],
            )

        elapsed_ms = (time.monotonic() - start) * 1000
        if resp.status_code >= 500:
            return ConnectivityResult(
                online=False,
                status="down",
                latency_ms=elapsed_ms,
                message=f"HTTP {resp.status_code}",
            )
        if elapsed_ms > _SLOW_THRESHOLD_MS:
            return ConnectivityResult(
                online=True,
                status="slow",
                latency_ms=elapsed_ms,
                message="High latency",
            )
        return ConnectivityResult(
            online=True,
            status="ok",
            latency_ms=elapsed_ms,
            message="",
        )

    async def is_online(self) -> bool:
        """Async reachability check; unknown status counts as offline."""
        try:
            result = await asyncio.to_thread(self.check)
        except Exception:
            logger.warning(
                "Connectivity probe failed, assuming offline",
                exc_info=True,
            )
            return False
        logger.debug(
            "Connectivity %s (%.0fms) %s",
            result.status,
            result.latency_ms,
            result.message,
        )
        return result.online
