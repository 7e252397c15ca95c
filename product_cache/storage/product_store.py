# product_cache/storage/product_store.py

"""SQLite-backed local product cache for offline browsing."""

import json
import logging
import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any

from product_cache.config.settings import Settings
from product_cache.exceptions import StorageError
from product_cache.models.product import Product
from product_cache.models.product_page import ProductPage

logger = logging.getLogger("product_cache.store")

# ``position`` records cache order: a refresh restarts it at 0 and
# load-more batches continue after the current maximum, so earlier
# windows never shift when later pages are appended.
_SCHEMA = """\
CREATE TABLE IF NOT EXISTS products (
    id                  INTEGER PRIMARY KEY,
    position            INTEGER NOT NULL,
    title               TEXT    NOT NULL,
    description         TEXT    NOT NULL,
    category            TEXT    NOT NULL,
    price               REAL    NOT NULL,
    discount_percentage REAL    NOT NULL,
    rating              REAL    NOT NULL,
    stock               INTEGER NOT NULL,
    tags                TEXT    NOT NULL,
    brand               TEXT,
    sku                 TEXT    NOT NULL,
    thumbnail           TEXT    NOT NULL,
    images              TEXT    NOT NULL,
    cached_at           TEXT    NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_products_position
    ON products(position);
"""

_COLUMNS = (
    "id, title, description, category, price, discount_percentage, "
    "rating, stock, tags, brand, sku, thumbnail, images"
)

_UPSERT = (
    "INSERT INTO products "
    "(id, position, title, description, category, price, "
    " discount_percentage, rating, stock, tags, brand, sku, "
    " thumbnail, images, cached_at) "
    "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?) "
    "ON CONFLICT(id) DO UPDATE SET "
    "title=excluded.title, description=excluded.description, "
    "category=excluded.category, price=excluded.price, "
    "discount_percentage=excluded.discount_percentage, "
    "rating=excluded.rating, stock=excluded.stock, "
    "tags=excluded.tags, brand=excluded.brand, sku=excluded.sku, "
    "thumbnail=excluded.thumbnail, images=excluded.images, "
    "cached_at=excluded.cached_at"
)


def _row_to_product(row: tuple[Any, ...]) -> Product:
    """Convert a ``_COLUMNS`` row into a Product."""
    try:
        tags: Any = json.loads(row[8])
        images: Any = json.loads(row[12])
    except (json.JSONDecodeError, TypeError) as exc:
        msg = f"Corrupt cached row for product {row[0]}: {exc}"
        raise StorageError(msg) from exc
    if not isinstance(tags, list) or not isinstance(images, list):
        msg = f"Corrupt cached row for product {row[0]}"
        raise StorageError(msg)
    return Product(
        id=row[0],
        title=row[1],
        description=row[2],
        category=row[3],
        price=row[4],
        discount_percentage=row[5],
        rating=row[6],
        stock=row[7],
        tags=tuple(str(t) for t in tags),
        brand=row[9],
        sku=row[10],
        thumbnail=row[11],
        images=tuple(str(i) for i in images),
    )


class LocalProductStore:
    """On-device product cache.

    Every write runs inside a single transaction under a lock, so a
    concurrent ``read_page`` sees either the old rows or the new ones,
    never a half-written page.
    """

    def __init__(
        self, db_path: Path | None = None,
    ) -> None:
        path = db_path or Settings.CACHE_DB_PATH
        path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        try:
            self._conn = sqlite3.connect(
                str(path), check_same_thread=False,
            )
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.executescript(_SCHEMA)
        except sqlite3.Error as exc:
            msg = f"Cannot open product cache at {path}: {exc}"
            raise StorageError(msg) from exc
        logger.debug("LocalProductStore opened at %s", path)

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        """Serialise access and translate sqlite errors."""
        with self._lock:
            try:
                with self._conn:
                    yield self._conn
            except sqlite3.Error as exc:
                raise StorageError(f"Product cache fault: {exc}") from exc

    # ── Writing ──────────────────────────────────────────

    def write_page(
        self, page: ProductPage, clear_first: bool = False,
    ) -> int:
        """Store a page of products.

        With ``clear_first`` every existing row is removed in the same
        transaction before the new rows go in.  Otherwise rows are
        upserted by id: a product already cached keeps its position
        and takes the newer field values.

        Returns the number of rows written.
        """
        ts = datetime.now().isoformat()
        with self._transaction() as conn:
            if clear_first:
                conn.execute("DELETE FROM products")
                start = 0
            else:
                row = conn.execute(
                    "SELECT COALESCE(MAX(position) + 1, 0) FROM products"
                ).fetchone()
                start = row[0]
            conn.executemany(
                _UPSERT,
                [
                    (
                        p.id,
                        start + offset,
                        p.title,
                        p.description,
                        p.category,
                        p.price,
                        p.discount_percentage,
                        p.rating,
                        p.stock,
                        json.dumps(list(p.tags)),
                        p.brand,
                        p.sku,
                        p.thumbnail,
                        json.dumps(list(p.images)),
                        ts,
                    )
                    for offset, p in enumerate(page.products)
                ],
            )
        logger.info(
            "Cached %d products (clear_first=%s)",
            len(page.products),
            clear_first,
        )
        return len(page.products)

    def upsert_product(self, product: Product) -> None:
        """Insert or refresh a single product without clearing."""
        self.write_page(
            ProductPage(products=(product,), total=1, skip=0, limit=1)
        )

    def clear(self) -> int:
        """Remove every cached product.

        Returns the number of rows removed.
        """
        with self._transaction() as conn:
            count = conn.execute("DELETE FROM products").rowcount
        logger.info("Product cache purged (%d rows removed)", count)
        return count

    # ── Reading ──────────────────────────────────────────

    def read_page(self, skip: int, limit: int) -> ProductPage:
        """Return the ``(skip, limit)`` window in cache order.

        ``total`` on the returned page is the local row count.
        """
        with self._transaction() as conn:
            rows = conn.execute(
                f"SELECT {_COLUMNS} FROM products "
                "ORDER BY position ASC LIMIT ? OFFSET ?",
                (limit, skip),
            ).fetchall()
            total: int = conn.execute(
                "SELECT COUNT(*) FROM products"
            ).fetchone()[0]
        products = tuple(_row_to_product(r) for r in rows)
        return ProductPage(
            products=products, total=total, skip=skip, limit=limit,
        )

    def get_product(self, product_id: int) -> Product | None:
        """Look up one cached product by id."""
        with self._transaction() as conn:
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM products WHERE id = ?",
                (product_id,),
            ).fetchone()
        return _row_to_product(row) if row else None

    def count(self) -> int:
        """Number of cached products."""
        with self._transaction() as conn:
            result: int = conn.execute(
                "SELECT COUNT(*) FROM products"
            ).fetchone()[0]
        return result
