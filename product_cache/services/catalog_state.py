# product_cache/services/catalog_state.py

"""Caller-side pagination bookkeeping for a catalog browsing session."""

import logging
from dataclasses import dataclass, field
from enum import Enum

from product_cache.config.settings import Settings
from product_cache.models.product import Product
from product_cache.models.product_page import ProductPage
from product_cache.models.result import (
    CacheError,
    CacheErrorKind,
    Failure,
    Result,
)
from product_cache.services.cache_coordinator import ProductCacheCoordinator

logger = logging.getLogger("product_cache.state")


class LoadStatus(Enum):
    """Where the browsing session currently is."""

    EMPTY = "empty"
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"


@dataclass
class CacheState:
    """Accumulates pages fetched through a coordinator.

    ``has_more`` is derived from ``loaded_products`` and ``total`` on
    every access.  One caller drives an instance at a time; the state is
    discarded when the browsing session ends.
    """

    coordinator: ProductCacheCoordinator
    limit: int = Settings.PAGE_SIZE
    loaded_products: list[Product] = field(
        default_factory=lambda: list[Product]()
    )
    next_skip: int = 0
    total: int | None = None
    status: LoadStatus = LoadStatus.EMPTY
    error: CacheError | None = None
    _last_request: tuple[int, bool] | None = field(
        default=None, init=False, repr=False
    )

    @property
    def has_more(self) -> bool:
        """True until the loaded products cover the known total."""
        if self.total is None:
            return True
        return len(self.loaded_products) < self.total

    async def load_next(self) -> Result[ProductPage] | None:
        """Fetch the next page and append it.

        Returns ``None`` without issuing a request when there is
        nothing more to load or a load is already in progress.
        """
        if self.status is LoadStatus.LOADING or not self.has_more:
            return None
        return await self._load(self.next_skip, replace=False)

    async def refresh(self) -> Result[ProductPage] | None:
        """Restart from the first page, replacing loaded products."""
        if self.status is LoadStatus.LOADING:
            return None
        return await self._load(0, replace=True)

    async def retry(self) -> Result[ProductPage] | None:
        """Re-issue the last failed request with the same arguments."""
        if self.status is not LoadStatus.ERROR or self._last_request is None:
            return None
        skip, replace = self._last_request
        return await self._load(skip, replace=replace)

    async def _load(
        self, skip: int, replace: bool,
    ) -> Result[ProductPage]:
        self.status = LoadStatus.LOADING
        self.error = None
        self._last_request = (skip, replace)

        try:
            result = await self.coordinator.fetch_page(skip, self.limit)
        except Exception as exc:
            logger.error(
                "Page load raised (skip=%d): %s",
                skip,
                exc,
                exc_info=True,
            )
            result = Failure(CacheError(
                CacheErrorKind.NETWORK_ERROR, str(exc)
            ))
        if isinstance(result, Failure):
            self.status = LoadStatus.ERROR
            self.error = result.error
            logger.info(
                "Page load failed (skip=%d): %s",
                skip,
                result.error.kind.value,
            )
            return result

        page = result.value
        if replace:
            self.loaded_products = list(page.products)
            self.next_skip = len(page.products)
        else:
            self.loaded_products.extend(page.products)
            self.next_skip += len(page.products)
        self.total = page.total
        # An empty page means the source is exhausted
        if page.is_empty:
            self.total = len(self.loaded_products)
        self.status = LoadStatus.LOADED
        return result
