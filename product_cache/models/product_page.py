# product_cache/models/product_page.py

"""Paginated slice of the product catalog."""

from dataclasses import dataclass, field
from typing import Any

from product_cache.models.product import Product


@dataclass(frozen=True)
class ProductPage:
    """A page of products addressed by ``skip``/``limit``.

    ``total`` means different things depending on where the page came
    from: the remote catalog size for API pages, the local row count for
    pages read back from the cache.
    """

    products: tuple[Product, ...] = field(default_factory=tuple)
    total: int = 0
    skip: int = 0
    limit: int = 0

    def __post_init__(self) -> None:
        if len(self.products) > self.limit:
            msg = (
                f"page holds {len(self.products)} products "
                f"but limit is {self.limit}"
            )
            raise ValueError(msg)

    def __len__(self) -> int:
        return len(self.products)

    @property
    def is_empty(self) -> bool:
        """True when the page carries no products."""
        return not self.products

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProductPage":
        """Parse a ``{products, total, skip, limit}`` response body."""
        raw: Any = data.get("products") or []
        if not isinstance(raw, list) or not all(
            isinstance(p, dict) for p in raw
        ):
            msg = "products must be a list of objects"
            raise TypeError(msg)
        products = tuple(Product.from_dict(p) for p in raw)
        return cls(
            products=products,
            total=int(data.get("total", 0)),
            skip=int(data.get("skip", 0)),
            limit=int(data.get("limit", len(products))),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialise back to the response body shape."""
        return {
            "products": [p.to_dict() for p in self.products],
            "total": self.total,
            "skip": self.skip,
            "limit": self.limit,
        }
