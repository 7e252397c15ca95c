# product_cache/models/product.py

"""Product data model shared by the remote source and the local store."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Product:
    """One catalog item.

    Instances are never mutated; a changed product is a new value.
    """

    id: int
    title: str
    description: str = ""
    category: str = ""
    price: float = 0.0
    discount_percentage: float = 0.0
    rating: float = 0.0
    stock: int = 0
    tags: tuple[str, ...] = field(default_factory=tuple)
    brand: str | None = None
    sku: str = ""
    thumbnail: str = ""
    images: tuple[str, ...] = field(default_factory=tuple)

    @property
    def discounted_price(self) -> float:
        """Price after the discount percentage is applied."""
        return self.price * (1 - self.discount_percentage / 100)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Product":
        """Build a Product from an API JSON object.

        Raises ``KeyError``/``TypeError``/``ValueError`` on malformed
        input; callers translate these into their own error type.
        """
        if not isinstance(data, dict):
            msg = f"product must be an object, got {type(data).__name__}"
            raise TypeError(msg)
        brand = data.get("brand")
        return cls(
            id=int(data["id"]),
            title=str(data["title"]),
            description=str(data.get("description", "")),
            category=str(data.get("category", "")),
            price=float(data.get("price", 0)),
            discount_percentage=float(
                data.get("discountPercentage", 0)
            ),
            rating=float(data.get("rating", 0)),
            stock=int(data.get("stock", 0)),
            tags=tuple(str(t) for t in data.get("tags") or []),
            brand=str(brand) if brand is not None else None,
            sku=str(data.get("sku", "")),
            thumbnail=str(data.get("thumbnail", "")),
            images=tuple(str(i) for i in data.get("images") or []),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the API's camelCase JSON shape."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "price": self.price,
            "discountPercentage": self.discount_percentage,
            "rating": self.rating,
            "stock": self.stock,
            "tags": list(self.tags),
            "brand": self.brand,
            "sku": self.sku,
            "thumbnail": self.thumbnail,
            "images": list(self.images),
        }
