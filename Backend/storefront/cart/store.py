"""
Tenant-partitioned shopping cart.

One browsing session has one CartStore, shared by every store the session
visits. Line items live in a map of store slug -> lines, so there is no
read path that can see another store's lines: every read names its slug.

Identity key: (product_id, variant_id, tenant_slug). The same product and
variant under two stores are two independent lines.

Clearing: clear(slug) empties one store's cart (checkout does this);
clear_all() is the explicit escape hatch that empties every store.
"""

import logging
from dataclasses import dataclass, replace
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Optional

from .storage import CartStorage, MemoryCartStorage

logger = logging.getLogger(__name__)

DOCUMENT_VERSION = 1


def _normalize_slug(tenant_slug: str) -> str:
    slug = (tenant_slug or "").strip().lower()
    if not slug:
        raise ValueError("tenant_slug is required")
    return slug


@dataclass(frozen=True)
class CartLineItem:
    """
    One line in a store's cart.

    Attributes:
        product_id: ID of the product
        variant_id: ID of the variant, None for products without variants
        tenant_slug: Store the line belongs to
        name: Product name for display
        unit_price: Price per unit at the time it was added
        quantity: Number of units, at least 1
        variant_name: Variant label for display (e.g. "Red / Large")
        image_ref: Product image URL
    """

    product_id: str
    variant_id: Optional[str]
    tenant_slug: str
    name: str
    unit_price: Decimal
    quantity: int = 1
    variant_name: Optional[str] = None
    image_ref: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "tenant_slug", _normalize_slug(self.tenant_slug))
        object.__setattr__(self, "unit_price", Decimal(str(self.unit_price)))
        if self.quantity < 1:
            raise ValueError(f"quantity must be at least 1, got {self.quantity}")
        if self.unit_price < 0:
            raise ValueError(f"unit_price must not be negative, got {self.unit_price}")

    @property
    def key(self) -> tuple[str, Optional[str], str]:
        return (self.product_id, self.variant_id, self.tenant_slug)

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    def matches(self, product_id: str, variant_id: Optional[str]) -> bool:
        return self.product_id == product_id and self.variant_id == variant_id

    def to_dict(self) -> dict[str, Any]:
        return {
            "product_id": self.product_id,
            "variant_id": self.variant_id,
            "tenant_slug": self.tenant_slug,
            "name": self.name,
            "variant_name": self.variant_name,
            "unit_price": str(self.unit_price),
            "quantity": self.quantity,
            "image_ref": self.image_ref,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], tenant_slug: Optional[str] = None) -> "CartLineItem":
        return cls(
            product_id=str(data["product_id"]),
            variant_id=data.get("variant_id"),
            tenant_slug=tenant_slug or data["tenant_slug"],
            name=data.get("name", ""),
            unit_price=Decimal(str(data.get("unit_price", "0"))),
            quantity=int(data.get("quantity", 1)),
            variant_name=data.get("variant_name"),
            image_ref=data.get("image_ref"),
        )


@dataclass(frozen=True)
class CheckoutSummary:
    """What a checkout submission for one store is built from."""

    tenant_slug: str
    lines: tuple[CartLineItem, ...]
    item_count: int
    total: Decimal

    @property
    def is_empty(self) -> bool:
        return not self.lines


class CartStore:
    """
    Session cart partitioned by store slug.

    All operations are synchronous; the storage document is rewritten after
    every mutation.
    """

    def __init__(self, storage: Optional[CartStorage] = None, key: str = "cart"):
        self._storage = storage if storage is not None else MemoryCartStorage()
        self._key = key
        self._partitions: dict[str, list[CartLineItem]] = self._load()

    # ────────────────────────────────────────────────────────────
    # Mutations
    # ────────────────────────────────────────────────────────────

    def add_item(self, item: CartLineItem) -> CartLineItem:
        """Add a line, or add its quantity to the existing line with the same key."""
        lines = self._partitions.setdefault(item.tenant_slug, [])
        for index, line in enumerate(lines):
            if line.matches(item.product_id, item.variant_id):
                merged = replace(line, quantity=line.quantity + item.quantity)
                lines[index] = merged
                self._save()
                return merged

        lines.append(item)
        self._save()
        return item

    def update_quantity(
        self,
        tenant_slug: str,
        product_id: str,
        variant_id: Optional[str],
        quantity: int,
    ) -> Optional[CartLineItem]:
        """
        Set a line's quantity.

        Quantities below 1 are rejected with ValueError and change nothing;
        use remove_item() to delete a line. Returns None if no such line.
        """
        if quantity < 1:
            raise ValueError(f"quantity must be at least 1, got {quantity}; use remove_item() instead")

        lines = self._partitions.get(_normalize_slug(tenant_slug), [])
        for index, line in enumerate(lines):
            if line.matches(product_id, variant_id):
                updated = replace(line, quantity=quantity)
                lines[index] = updated
                self._save()
                return updated
        return None

    def remove_item(self, tenant_slug: str, product_id: str, variant_id: Optional[str]) -> bool:
        slug = _normalize_slug(tenant_slug)
        lines = self._partitions.get(slug)
        if not lines:
            return False

        kept = [line for line in lines if not line.matches(product_id, variant_id)]
        if len(kept) == len(lines):
            return False

        if kept:
            self._partitions[slug] = kept
        else:
            del self._partitions[slug]
        self._save()
        return True

    def clear(self, tenant_slug: str) -> int:
        """Empty one store's cart. Returns the number of lines removed."""
        removed = self._partitions.pop(_normalize_slug(tenant_slug), [])
        if removed:
            self._save()
        return len(removed)

    def clear_all(self) -> int:
        """Empty every store's cart in this session."""
        removed = sum(len(lines) for lines in self._partitions.values())
        self._partitions = {}
        self._save()
        return removed

    # ────────────────────────────────────────────────────────────
    # Tenant-scoped reads
    # ────────────────────────────────────────────────────────────

    def items_for(self, tenant_slug: str) -> tuple[CartLineItem, ...]:
        return tuple(self._partitions.get(_normalize_slug(tenant_slug), ()))

    def total_for(self, tenant_slug: str) -> Decimal:
        return sum((line.line_total for line in self.items_for(tenant_slug)), Decimal("0"))

    def count_for(self, tenant_slug: str) -> int:
        return sum(line.quantity for line in self.items_for(tenant_slug))

    def checkout_for(self, tenant_slug: str) -> CheckoutSummary:
        lines = self.items_for(tenant_slug)
        return CheckoutSummary(
            tenant_slug=_normalize_slug(tenant_slug),
            lines=lines,
            item_count=sum(line.quantity for line in lines),
            total=sum((line.line_total for line in lines), Decimal("0")),
        )

    def tenants(self) -> tuple[str, ...]:
        """Slugs of stores that currently have lines in this cart."""
        return tuple(self._partitions)

    def for_tenant(self, tenant_slug: str) -> "TenantCart":
        return TenantCart(self, tenant_slug)

    # ────────────────────────────────────────────────────────────
    # Persistence
    # ────────────────────────────────────────────────────────────

    def _document(self) -> dict[str, Any]:
        return {
            "version": DOCUMENT_VERSION,
            "tenants": {
                slug: [line.to_dict() for line in lines]
                for slug, lines in self._partitions.items()
            },
        }

    def _save(self) -> None:
        self._storage.save(self._key, self._document())

    def _load(self) -> dict[str, list[CartLineItem]]:
        document = self._storage.load(self._key)
        if not document:
            return {}

        try:
            if isinstance(document, list):
                # Flat list of lines, each carrying its own tenant_slug
                return self._partition(CartLineItem.from_dict(entry) for entry in document)

            partitions: dict[str, list[CartLineItem]] = {}
            for slug, entries in document.get("tenants", {}).items():
                for entry in entries:
                    line = CartLineItem.from_dict(entry, tenant_slug=slug)
                    self._merge_into(partitions, line)
            return partitions
        except (KeyError, TypeError, ValueError, AttributeError, InvalidOperation) as e:
            logger.warning(f"Discarding unreadable cart '{self._key}': {e}")
            return {}

    @classmethod
    def _partition(cls, lines: Iterable[CartLineItem]) -> dict[str, list[CartLineItem]]:
        partitions: dict[str, list[CartLineItem]] = {}
        for line in lines:
            cls._merge_into(partitions, line)
        return partitions

    @staticmethod
    def _merge_into(partitions: dict[str, list[CartLineItem]], item: CartLineItem) -> None:
        lines = partitions.setdefault(item.tenant_slug, [])
        for index, line in enumerate(lines):
            if line.matches(item.product_id, item.variant_id):
                lines[index] = replace(line, quantity=line.quantity + item.quantity)
                return
        lines.append(item)


class TenantCart:
    """A CartStore view bound to one store slug."""

    def __init__(self, store: CartStore, tenant_slug: str):
        self._store = store
        self.tenant_slug = _normalize_slug(tenant_slug)

    def add_item(
        self,
        product_id: str,
        name: str,
        unit_price,
        quantity: int = 1,
        variant_id: Optional[str] = None,
        variant_name: Optional[str] = None,
        image_ref: Optional[str] = None,
    ) -> CartLineItem:
        return self._store.add_item(
            CartLineItem(
                product_id=product_id,
                variant_id=variant_id,
                tenant_slug=self.tenant_slug,
                name=name,
                unit_price=unit_price,
                quantity=quantity,
                variant_name=variant_name,
                image_ref=image_ref,
            )
        )

    def update_quantity(self, product_id: str, variant_id: Optional[str], quantity: int) -> Optional[CartLineItem]:
        return self._store.update_quantity(self.tenant_slug, product_id, variant_id, quantity)

    def remove_item(self, product_id: str, variant_id: Optional[str]) -> bool:
        return self._store.remove_item(self.tenant_slug, product_id, variant_id)

    def clear(self) -> int:
        return self._store.clear(self.tenant_slug)

    @property
    def items(self) -> tuple[CartLineItem, ...]:
        return self._store.items_for(self.tenant_slug)

    @property
    def total(self) -> Decimal:
        return self._store.total_for(self.tenant_slug)

    @property
    def item_count(self) -> int:
        return self._store.count_for(self.tenant_slug)

    def checkout(self) -> CheckoutSummary:
        return self._store.checkout_for(self.tenant_slug)
