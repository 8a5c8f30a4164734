"""
Catalog Index - Fast lookup structures for product matching.

Instead of scanning the whole catalog for every purchase row, we build
lookup dictionaries once:
- by_id: O(1) product lookup
- by_catalog_number: O(1) exact catalog-number match (case-insensitive)
- by_category: category -> product ids, most recently updated first
- vendor_keys: product id -> lowercased vendor ids and names selling it
"""

from dataclasses import dataclass, field
from typing import Optional, Union

from .models import CatalogProduct, VendorOffer

# A single vendor id or name, or a set of equivalent names for one vendor
VendorScope = Union[str, frozenset[str]]


@dataclass
class CatalogIndex:
    """
    Indexed catalog snapshot.

    Attributes:
        by_id: Dict mapping product id -> CatalogProduct
        order: Product ids in catalog (insertion) order
        by_catalog_number: Dict mapping lowercased catalog number -> product ids
        by_category: Dict mapping category -> product ids, newest first
        offers_by_product: Dict mapping product id -> offers in listing order
        vendor_keys: Dict mapping product id -> lowercased vendor ids/names
    """
    by_id: dict[str, CatalogProduct] = field(default_factory=dict)
    order: list[str] = field(default_factory=list)
    by_catalog_number: dict[str, list[str]] = field(default_factory=dict)
    by_category: dict[str, list[str]] = field(default_factory=dict)
    offers_by_product: dict[str, list[VendorOffer]] = field(default_factory=dict)
    vendor_keys: dict[str, set[str]] = field(default_factory=dict)

    @property
    def product_count(self) -> int:
        return len(self.order)

    @property
    def offer_count(self) -> int:
        return sum(len(offers) for offers in self.offers_by_product.values())

    def lookup_id(self, product_id: str) -> Optional[CatalogProduct]:
        """Look up a product by id."""
        return self.by_id.get(product_id)

    def lookup_catalog_number(self, catalog_number: str) -> list[CatalogProduct]:
        """Look up products by exact catalog number, case-insensitive."""
        ids = self.by_catalog_number.get(normalize_catalog_number(catalog_number), [])
        return [self.by_id[pid] for pid in ids]

    def sells(self, product_id: str, vendor: VendorScope) -> bool:
        """Check whether a vendor (id or display name) has an offer for the product."""
        return not vendor_scope_keys(vendor).isdisjoint(self.vendor_keys.get(product_id, set()))


def normalize_catalog_number(value: str) -> str:
    """Normalize a catalog number for case-insensitive comparison."""
    return value.strip().lower() if value else ""


def vendor_scope_keys(vendor: VendorScope) -> frozenset[str]:
    """Lowercased lookup keys for a vendor id, name, or set of names."""
    names = [vendor] if isinstance(vendor, str) else vendor
    return frozenset(n.lower().strip() for n in names if n and n.strip())


def _recency_key(product: CatalogProduct) -> float:
    if product.updated_at is None:
        return float("-inf")
    return product.updated_at.timestamp()


def build_index(
    products: list[CatalogProduct],
    offers: list[VendorOffer] | None = None,
) -> CatalogIndex:
    """
    Build lookup index from catalog products and their vendor offers.

    Args:
        products: Catalog snapshot, in catalog order
        offers: Vendor offers, in listing order

    Returns:
        CatalogIndex with id, catalog-number, category and vendor lookups
    """
    index = CatalogIndex()

    for product in products:
        # Duplicate id - last write wins, keep the original position
        if product.id not in index.by_id:
            index.order.append(product.id)
        index.by_id[product.id] = product

    # Secondary lookups come from the final records only
    for product_id in index.order:
        product = index.by_id[product_id]
        index.offers_by_product[product_id] = []
        index.vendor_keys[product_id] = set()
        if product.catalog_number:
            key = normalize_catalog_number(product.catalog_number)
            index.by_catalog_number.setdefault(key, []).append(product_id)
        index.by_category.setdefault(product.category, []).append(product_id)

    # Category lists: newest first, catalog order among equals (stable sort)
    for category, ids in index.by_category.items():
        ids.sort(key=lambda pid: _recency_key(index.by_id[pid]), reverse=True)

    for offer in offers or []:
        if offer.product_id not in index.by_id:
            continue  # Offer for a product outside the snapshot
        index.offers_by_product[offer.product_id].append(offer)
        keys = index.vendor_keys[offer.product_id]
        keys.add(offer.vendor_id.lower().strip())
        if offer.vendor_name:
            keys.add(offer.vendor_name.lower().strip())

    return index
