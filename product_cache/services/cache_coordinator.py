# product_cache/services/cache_coordinator.py

"""Offline-first coordination between the catalog API and the local cache."""

import asyncio
import logging

from product_cache.exceptions import RemoteFetchError, StorageError
from product_cache.models.product import Product
from product_cache.models.product_page import ProductPage
from product_cache.models.result import (
    CacheError,
    CacheErrorKind,
    Failure,
    Result,
    Success,
)
from product_cache.remote.product_api import RemoteProductSource
from product_cache.services.connectivity import ConnectivityProbe
from product_cache.storage.product_store import LocalProductStore

logger = logging.getLogger("product_cache.coordinator")


class ProductCacheCoordinator:
    """Decides per request whether to serve remote or cached products.

    Online requests go to the API and are written through to the local
    store before returning.  Offline requests, and online requests whose
    remote call fails, are served from the store.  Every call resolves
    to exactly one source.

    Known limitation: two coordinators sharing one store can interleave
    a refresh (which clears) with a load-more (which appends), dropping
    the appended page.  This is accepted rather than locked against.
    """

    def __init__(
        self,
        remote: RemoteProductSource,
        local: LocalProductStore,
        connectivity: ConnectivityProbe,
    ) -> None:
        self.remote = remote
        self.local = local
        self.connectivity = connectivity

    # ── Pages ────────────────────────────────────────────

    async def fetch_page(
        self, skip: int, limit: int,
    ) -> Result[ProductPage]:
        """Return the ``(skip, limit)`` page from the best source.

        ``skip == 0`` is a refresh: a successful remote page replaces the
        whole cache.  Any other offset only adds rows.
        """
        if skip < 0 or limit <= 0:
            return Failure(CacheError(
                CacheErrorKind.INVALID_ARGUMENT,
                f"skip must be >= 0 and limit > 0 (got {skip}, {limit})",
            ))

        remote_error: RemoteFetchError | None = None
        if await self.connectivity.is_online():
            try:
                page = await asyncio.to_thread(
                    self.remote.fetch, skip, limit
                )
            except RemoteFetchError as exc:
                remote_error = exc
                logger.warning(
                    "Remote fetch failed (skip=%d, limit=%d): %s; "
                    "falling back to cache",
                    skip,
                    limit,
                    exc,
                )
            else:
                await self._write_back(page, clear_first=skip == 0)
                return Success(page)
        else:
            logger.info(
                "Offline, serving cached page (skip=%d, limit=%d)",
                skip,
                limit,
            )

        return await self._read_cached_page(skip, limit, remote_error)

    async def _write_back(
        self, page: ProductPage, clear_first: bool,
    ) -> None:
        """Persist a remote page; failures only degrade the cache."""
        try:
            await asyncio.to_thread(
                self.local.write_page, page, clear_first
            )
        except StorageError as exc:
            logger.warning(
                "Failed to cache %d products: %s",
                len(page.products),
                exc,
                exc_info=True,
            )

    async def _read_cached_page(
        self,
        skip: int,
        limit: int,
        remote_error: RemoteFetchError | None,
    ) -> Result[ProductPage]:
        """Serve a page from the local store."""
        try:
            page = await asyncio.to_thread(
                self.local.read_page, skip, limit
            )
        except StorageError as exc:
            logger.error(
                "Cache read failed (skip=%d, limit=%d): %s",
                skip,
                limit,
                exc,
                exc_info=True,
            )
            return Failure(self._fallback_error(exc, remote_error))

        if page.is_empty:
            return Failure(CacheError(
                CacheErrorKind.NO_CACHED_DATA,
                f"No cached products for skip={skip}, limit={limit}",
            ))
        logger.debug(
            "Served %d cached products (skip=%d, local total=%d)",
            len(page.products),
            skip,
            page.total,
        )
        return Success(page)

    # ── Single product ───────────────────────────────────

    async def get_product(self, product_id: int) -> Result[Product]:
        """Return one product, preferring the API over the cache."""
        if product_id <= 0:
            return Failure(CacheError(
                CacheErrorKind.INVALID_ARGUMENT,
                f"product id must be positive (got {product_id})",
            ))

        remote_error: RemoteFetchError | None = None
        if await self.connectivity.is_online():
            try:
                product = await asyncio.to_thread(
                    self.remote.fetch_product, product_id
                )
            except RemoteFetchError as exc:
                remote_error = exc
                logger.warning(
                    "Remote lookup of product %d failed: %s",
                    product_id,
                    exc,
                )
            else:
                try:
                    await asyncio.to_thread(
                        self.local.upsert_product, product
                    )
                except StorageError as exc:
                    logger.warning(
                        "Failed to cache product %d: %s",
                        product_id,
                        exc,
                    )
                return Success(product)

        try:
            cached = await asyncio.to_thread(
                self.local.get_product, product_id
            )
        except StorageError as exc:
            logger.error(
                "Cache lookup of product %d failed: %s",
                product_id,
                exc,
                exc_info=True,
            )
            return Failure(self._fallback_error(exc, remote_error))

        if cached is None:
            return Failure(CacheError(
                CacheErrorKind.NO_CACHED_DATA,
                f"Product {product_id} is not cached",
            ))
        return Success(cached)

    @staticmethod
    def _fallback_error(
        storage_error: StorageError,
        remote_error: RemoteFetchError | None,
    ) -> CacheError:
        """Classify a failed fallback read."""
        if remote_error is not None:
            return CacheError(
                CacheErrorKind.NETWORK_ERROR,
                f"{remote_error}; cache fallback failed: {storage_error}",
            )
        return CacheError(CacheErrorKind.STORAGE_ERROR, str(storage_error))
