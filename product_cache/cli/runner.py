# product_cache/cli/runner.py

"""Headless CLI commands built on the cache coordinator."""

import asyncio
import json
import logging
import sys

from rich.console import Console
from rich.table import Table

from product_cache.exceptions import StorageError
from product_cache.models.product import Product
from product_cache.models.result import Failure
from product_cache.remote.product_api import RemoteProductSource
from product_cache.services.cache_coordinator import ProductCacheCoordinator
from product_cache.services.catalog_state import CacheState
from product_cache.services.connectivity import ConnectivityProbe
from product_cache.storage.product_store import LocalProductStore

logger = logging.getLogger("product_cache.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)


def build_coordinator(
    store: LocalProductStore,
) -> ProductCacheCoordinator:
    """Composition root: wire the coordinator's collaborators."""
    return ProductCacheCoordinator(
        remote=RemoteProductSource(),
        local=store,
        connectivity=ConnectivityProbe(),
    )


def _report_storage_error(exc: StorageError) -> None:
    """Tell the user the local cache is unusable."""
    logger.error("Product cache unavailable: %s", exc)
    _err.print("[red]Local cache unavailable. Check the cache path.[/red]")
    _err.print(f"[dim]{exc}[/dim]")


def _print_table(products: list[Product], title: str) -> None:
    """Render a Rich table of products to stdout."""
    table = Table(
        title=title,
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("ID", style="dim", justify="right")
    table.add_column("Title", max_width=50)
    table.add_column("Category", style="magenta")
    table.add_column("Price", justify="right", style="green")
    table.add_column("Discounted", justify="right", style="green")
    table.add_column("Rating", justify="center")
    table.add_column("Stock", justify="right")

    for p in products:
        table.add_row(
            str(p.id),
            p.title[:50],
            p.category,
            f"{p.price:,.2f}",
            f"{p.discounted_price:,.2f}",
            f"{p.rating:.1f}",
            str(p.stock),
        )

    Console().print(table)


def _emit(products: list[Product], output_format: str, title: str) -> None:
    """Write products to stdout as JSON or a table."""
    if output_format == "table":
        _print_table(products, title)
        return
    json.dump(
        [p.to_dict() for p in products],
        sys.stdout,
        ensure_ascii=False,
        indent=2,
    )
    sys.stdout.write("\n")


async def browse(
    pages: int,
    limit: int,
    refresh: bool,
    output_format: str,
) -> int:
    """Load up to *pages* pages and print everything loaded."""
    try:
        store = LocalProductStore()
    except StorageError as exc:
        _report_storage_error(exc)
        return 1
    try:
        state = CacheState(
            coordinator=build_coordinator(store), limit=limit,
        )
        for index in range(pages):
            if index == 0 and refresh:
                result = await state.refresh()
            else:
                result = await state.load_next()
            if result is None:
                break
            if isinstance(result, Failure):
                _err.print(f"[red]{result.error.user_message}[/red]")
                _err.print(f"[dim]{result.error.message}[/dim]")
                break
    finally:
        store.close()

    if not state.loaded_products:
        return 1

    total = state.total if state.total is not None else 0
    more = "more available" if state.has_more else "end of catalog"
    _err.print(
        f"[green]✓ {len(state.loaded_products)} of {total} products"
        f"[/green] [dim]({more})[/dim]"
    )
    _emit(state.loaded_products, output_format, "Products")
    return 0


async def show_product(product_id: int, output_format: str) -> int:
    """Print one product by id."""
    try:
        store = LocalProductStore()
    except StorageError as exc:
        _report_storage_error(exc)
        return 1
    try:
        result = await build_coordinator(store).get_product(product_id)
    finally:
        store.close()

    if isinstance(result, Failure):
        _err.print(f"[red]{result.error.user_message}[/red]")
        _err.print(f"[dim]{result.error.message}[/dim]")
        return 1
    _emit([result.value], output_format, f"Product {product_id}")
    return 0


def run_clear_cache() -> int:
    """Wipe the local product cache."""
    try:
        store = LocalProductStore()
    except StorageError as exc:
        _report_storage_error(exc)
        return 1
    try:
        count = store.clear()
    except StorageError as exc:
        _report_storage_error(exc)
        return 1
    finally:
        store.close()
    _err.print(f"[green]✓ Removed {count:,} cached products[/green]")
    return 0


async def run_status() -> int:
    """Report connectivity and cache size."""
    probe = ConnectivityProbe()
    result = await asyncio.to_thread(probe.check)

    try:
        store = LocalProductStore()
    except StorageError as exc:
        _report_storage_error(exc)
        return 1
    try:
        cached = store.count()
    except StorageError as exc:
        _report_storage_error(exc)
        return 1
    finally:
        store.close()

    table = Table(
        title="Product Cache Status",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Check", style="bold")
    table.add_column("Status", justify="center")
    table.add_column("Notes", style="dim")

    if result.status == "ok":
        status = "[green]✅ ONLINE[/green]"
    elif result.status == "slow":
        status = "[yellow]⚠️  SLOW[/yellow]"
    else:
        status = "[red]❌ OFFLINE[/red]"
    latency = (
        f"{result.latency_ms:.0f}ms" if result.latency_ms > 0 else "—"
    )
    table.add_row(
        "Network", status, f"{latency} {result.message}".strip(),
    )
    table.add_row("Cache", f"{cached:,} products", "")

    Console().print(table)
    return 0 if result.online else 1
