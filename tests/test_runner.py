# tests/test_runner.py

"""Tests for the headless CLI commands."""

import io
import json
import unittest
from contextlib import redirect_stderr, redirect_stdout
from unittest.mock import AsyncMock, MagicMock, patch

from product_cache.cli import runner
from product_cache.exceptions import StorageError
from product_cache.models.product import Product
from product_cache.models.product_page import ProductPage
from product_cache.models.result import (
    CacheError,
    CacheErrorKind,
    Failure,
    Success,
)
from product_cache.services.connectivity import ConnectivityResult

STORE_PATH = "product_cache.cli.runner.LocalProductStore"
BUILD_PATH = "product_cache.cli.runner.build_coordinator"


def _page(start: int, count: int, total: int) -> ProductPage:
    return ProductPage(
        products=tuple(
            Product(id=i, title=f"P{i}", price=10.0)
            for i in range(start, start + count)
        ),
        total=total,
        skip=start - 1,
        limit=count,
    )


@patch(STORE_PATH)
class TestBrowse(unittest.IsolatedAsyncioTestCase):
    """runner.browse end to end with a fake coordinator."""

    async def test_json_output(self, mock_store_cls: MagicMock) -> None:
        """Loaded products are dumped as JSON to stdout."""
        coordinator = MagicMock()
        coordinator.fetch_page = AsyncMock(side_effect=[
            Success(_page(1, 2, total=4)),
            Success(_page(3, 2, total=4)),
        ])
        out = io.StringIO()
        with patch(BUILD_PATH, return_value=coordinator), \
                redirect_stdout(out):
            code = await runner.browse(
                pages=3, limit=2, refresh=False, output_format="json",
            )
        self.assertEqual(code, 0)
        data = json.loads(out.getvalue())
        self.assertEqual([p["id"] for p in data], [1, 2, 3, 4])
        # third page skipped: catalog exhausted
        self.assertEqual(coordinator.fetch_page.await_count, 2)
        mock_store_cls.return_value.close.assert_called_once()

    async def test_refresh_starts_at_zero(
        self, _mock_store_cls: MagicMock,
    ) -> None:
        """--refresh issues a skip=0 request first."""
        coordinator = MagicMock()
        coordinator.fetch_page = AsyncMock(
            return_value=Success(_page(1, 2, total=2)),
        )
        with patch(BUILD_PATH, return_value=coordinator), \
                redirect_stdout(io.StringIO()):
            await runner.browse(
                pages=1, limit=2, refresh=True, output_format="json",
            )
        coordinator.fetch_page.assert_awaited_once_with(0, 2)

    async def test_failure_exit_code(
        self, _mock_store_cls: MagicMock,
    ) -> None:
        """Nothing loaded returns exit code 1."""
        coordinator = MagicMock()
        coordinator.fetch_page = AsyncMock(return_value=Failure(
            CacheError(CacheErrorKind.NO_CACHED_DATA, "offline"),
        ))
        with patch(BUILD_PATH, return_value=coordinator):
            code = await runner.browse(
                pages=1, limit=2, refresh=False, output_format="json",
            )
        self.assertEqual(code, 1)


@patch(STORE_PATH)
class TestShowProduct(unittest.IsolatedAsyncioTestCase):
    """runner.show_product output."""

    async def test_prints_product(self, _mock_store_cls: MagicMock) -> None:
        """A found product is printed as a one-item list."""
        coordinator = MagicMock()
        coordinator.get_product = AsyncMock(
            return_value=Success(Product(id=3, title="Three")),
        )
        out = io.StringIO()
        with patch(BUILD_PATH, return_value=coordinator), \
                redirect_stdout(out):
            code = await runner.show_product(3, "json")
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out.getvalue())[0]["title"], "Three")

    async def test_missing_product(self, _mock_store_cls: MagicMock) -> None:
        """A lookup failure returns exit code 1."""
        coordinator = MagicMock()
        coordinator.get_product = AsyncMock(return_value=Failure(
            CacheError(CacheErrorKind.NO_CACHED_DATA, "missing"),
        ))
        with patch(BUILD_PATH, return_value=coordinator):
            code = await runner.show_product(3, "json")
        self.assertEqual(code, 1)


class TestMaintenanceCommands(unittest.IsolatedAsyncioTestCase):
    """clear-cache and status commands."""

    @patch(STORE_PATH)
    def test_clear_cache(self, mock_store_cls: MagicMock) -> None:
        """run_clear_cache empties the store."""
        mock_store_cls.return_value.clear.return_value = 12
        self.assertEqual(runner.run_clear_cache(), 0)
        mock_store_cls.return_value.clear.assert_called_once()

    @patch("product_cache.cli.runner.ConnectivityProbe")
    @patch(STORE_PATH)
    async def test_status_offline(
        self,
        mock_store_cls: MagicMock,
        mock_probe_cls: MagicMock,
    ) -> None:
        """An offline probe gives exit code 1."""
        mock_store_cls.return_value.count.return_value = 30
        mock_probe_cls.return_value.check.return_value = (
            ConnectivityResult(False, "down", 0.0, "unreachable")
        )
        with redirect_stdout(io.StringIO()):
            code = await runner.run_status()
        self.assertEqual(code, 1)

    @patch("product_cache.cli.runner.ConnectivityProbe")
    @patch(STORE_PATH)
    async def test_status_online(
        self,
        mock_store_cls: MagicMock,
        mock_probe_cls: MagicMock,
    ) -> None:
        """An online probe gives exit code 0."""
        mock_store_cls.return_value.count.return_value = 0
        mock_probe_cls.return_value.check.return_value = (
            ConnectivityResult(True, "ok", 42.0, "")
        )
        with redirect_stdout(io.StringIO()):
            code = await runner.run_status()
        self.assertEqual(code, 0)


class TestStorageFaults(unittest.IsolatedAsyncioTestCase):
    """An unusable cache is reported on stderr with exit code 1."""

    def _assert_reported(self, err: io.StringIO) -> None:
        self.assertIn("Local cache unavailable", err.getvalue())
        self.assertIn("disk I/O error", err.getvalue())

    @patch(STORE_PATH, side_effect=StorageError("disk I/O error"))
    async def test_browse_cannot_open(
        self, _mock_store_cls: MagicMock,
    ) -> None:
        """browse exits 1 when the cache cannot be opened."""
        err = io.StringIO()
        with patch(BUILD_PATH) as mock_build, redirect_stderr(err):
            code = await runner.browse(
                pages=1, limit=2, refresh=False, output_format="json",
            )
        self.assertEqual(code, 1)
        mock_build.assert_not_called()
        self._assert_reported(err)

    @patch(STORE_PATH, side_effect=StorageError("disk I/O error"))
    async def test_show_product_cannot_open(
        self, _mock_store_cls: MagicMock,
    ) -> None:
        """show_product exits 1 when the cache cannot be opened."""
        err = io.StringIO()
        with redirect_stderr(err):
            code = await runner.show_product(3, "json")
        self.assertEqual(code, 1)
        self._assert_reported(err)

    @patch(STORE_PATH, side_effect=StorageError("disk I/O error"))
    def test_clear_cache_cannot_open(
        self, _mock_store_cls: MagicMock,
    ) -> None:
        """run_clear_cache exits 1 when the cache cannot be opened."""
        err = io.StringIO()
        with redirect_stderr(err):
            code = runner.run_clear_cache()
        self.assertEqual(code, 1)
        self._assert_reported(err)

    @patch(STORE_PATH)
    def test_clear_cache_fault_closes_store(
        self, mock_store_cls: MagicMock,
    ) -> None:
        """A failing purge is reported and the store still closed."""
        store = mock_store_cls.return_value
        store.clear.side_effect = StorageError("disk I/O error")
        err = io.StringIO()
        with redirect_stderr(err):
            code = runner.run_clear_cache()
        self.assertEqual(code, 1)
        store.close.assert_called_once()
        self._assert_reported(err)

    @patch("product_cache.cli.runner.ConnectivityProbe")
    @patch(STORE_PATH, side_effect=StorageError("disk I/O error"))
    async def test_status_cannot_open(
        self,
        _mock_store_cls: MagicMock,
        mock_probe_cls: MagicMock,
    ) -> None:
        """run_status exits 1 when the cache cannot be opened."""
        mock_probe_cls.return_value.check.return_value = (
            ConnectivityResult(True, "ok", 42.0, "")
        )
        err = io.StringIO()
        with redirect_stderr(err), redirect_stdout(io.StringIO()):
            code = await runner.run_status()
        self.assertEqual(code, 1)
        self._assert_reported(err)


if __name__ == "__main__":
    unittest.main()
