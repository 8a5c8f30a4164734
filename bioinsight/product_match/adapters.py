"""
Catalog Adapters - Bridge to reference data sources.

The adapter pattern lets us swap implementations (in-memory for testing,
file snapshots for the CLI, a database elsewhere) without changing
matcher or scoring logic. Every adapter is read-only.
"""

import csv
import json
from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Optional

from .index import CatalogIndex, VendorScope, build_index, normalize_catalog_number
from .models import CatalogProduct, PurchaseRecordInput, VendorOffer


class CatalogAdapter(ABC):
    """
    Abstract interface for catalog lookups.

    Vendor arguments are a vendor id or display name, or a set of names
    for one vendor; a product is in scope when any of them has an offer for it.
    """

    @abstractmethod
    def get_product(self, product_id: str) -> Optional[CatalogProduct]:
        """Fetch a single product, or None if absent."""
        pass

    @abstractmethod
    def get_products(self, product_ids: list[str]) -> list[CatalogProduct]:
        """Fetch products in the requested order, skipping unknown ids."""
        pass

    @abstractmethod
    def find_by_catalog_number(
        self, catalog_number: str, vendor: Optional[VendorScope] = None
    ) -> Optional[CatalogProduct]:
        """First product whose catalog number equals the given one (case-insensitive)."""
        pass

    @abstractmethod
    def find_by_catalog_prefix(
        self, prefix: str, vendor: Optional[VendorScope] = None
    ) -> list[CatalogProduct]:
        """All products whose catalog number starts with the prefix (case-insensitive)."""
        pass

    @abstractmethod
    def list_by_category(
        self, category: str, exclude_id: Optional[str] = None, limit: int = 50
    ) -> list[CatalogProduct]:
        """Products in a category, most recently updated first."""
        pass

    @abstractmethod
    def find_by_name_containing(
        self, text: str, vendor: Optional[VendorScope] = None
    ) -> Optional[CatalogProduct]:
        """First product whose name or alternate name contains the text (case-insensitive)."""
        pass

    @abstractmethod
    def all_products(self) -> list[CatalogProduct]:
        """Every product, in catalog order."""
        pass

    @abstractmethod
    def product_vendors(self, product_id: str) -> set[str]:
        """Lowercased vendor ids and names with an offer for the product."""
        pass


class OfferAdapter(ABC):
    """Abstract interface for vendor-offer lookups."""

    @abstractmethod
    def get_offers(self, product_id: str) -> list[VendorOffer]:
        """All offers for a product, in listing order."""
        pass


class EmbeddingAdapter(ABC):
    """
    Abstract interface for the optional semantic embedding store.

    Implementations raise SignalUnavailableError when the store is down.
    """

    @abstractmethod
    def get_embedding(self, product_id: str) -> Optional[list[float]]:
        """Embedding vector for a product, or None if it has none."""
        pass

    @property
    def is_ready(self) -> bool:
        return True


class FuzzyNameIndex(ABC):
    """
    Abstract interface for fuzzy product-name search.

    Implementations raise SignalUnavailableError when the index cannot answer.
    """

    @abstractmethod
    def search(
        self,
        name: str,
        vendor: Optional[VendorScope] = None,
        threshold: float = 0.3,
        limit: int = 5,
    ) -> list[tuple[CatalogProduct, float]]:
        """(product, similarity) pairs at or above the threshold, best first."""
        pass

    @property
    def is_ready(self) -> bool:
        return True


class InMemoryCatalogAdapter(CatalogAdapter, OfferAdapter):
    """
    In-memory adapter over a catalog snapshot and its vendor offers.

    Useful for unit tests where you want to control exact records, and as
    the backing store of file snapshots.
    """

    def __init__(
        self,
        products: list[CatalogProduct] | None = None,
        offers: list[VendorOffer] | None = None,
    ):
        self._index: CatalogIndex = build_index(products or [], offers or [])

    @property
    def index(self) -> CatalogIndex:
        return self._index

    def _in_scope(self, product: CatalogProduct, vendor: Optional[VendorScope]) -> bool:
        return not vendor or self._index.sells(product.id, vendor)

    def _iter_products(self):
        for product_id in self._index.order:
            yield self._index.by_id[product_id]

    def get_product(self, product_id: str) -> Optional[CatalogProduct]:
        return self._index.lookup_id(product_id)

    def get_products(self, product_ids: list[str]) -> list[CatalogProduct]:
        found = (self._index.lookup_id(pid) for pid in product_ids)
        return [p for p in found if p is not None]

    def find_by_catalog_number(
        self, catalog_number: str, vendor: Optional[VendorScope] = None
    ) -> Optional[CatalogProduct]:
        for product in self._index.lookup_catalog_number(catalog_number):
            if self._in_scope(product, vendor):
                return product
        return None

    def find_by_catalog_prefix(
        self, prefix: str, vendor: Optional[VendorScope] = None
    ) -> list[CatalogProduct]:
        needle = normalize_catalog_number(prefix)
        if not needle:
            return []
        return [
            p for p in self._iter_products()
            if p.catalog_number
            and normalize_catalog_number(p.catalog_number).startswith(needle)
            and self._in_scope(p, vendor)
        ]

    def list_by_category(
        self, category: str, exclude_id: Optional[str] = None, limit: int = 50
    ) -> list[CatalogProduct]:
        ids = [pid for pid in self._index.by_category.get(category, []) if pid != exclude_id]
        return [self._index.by_id[pid] for pid in ids[:limit]]

    def find_by_name_containing(
        self, text: str, vendor: Optional[VendorScope] = None
    ) -> Optional[CatalogProduct]:
        needle = text.strip().lower()
        if not needle:
            return None
        for product in self._iter_products():
            names = [product.name, product.name_alt or ""]
            if any(needle in n.lower() for n in names) and self._in_scope(product, vendor):
                return product
        return None

    def all_products(self) -> list[CatalogProduct]:
        return list(self._iter_products())

    def product_vendors(self, product_id: str) -> set[str]:
        return set(self._index.vendor_keys.get(product_id, set()))

    def get_offers(self, product_id: str) -> list[VendorOffer]:
        return list(self._index.offers_by_product.get(product_id, []))


class InMemoryEmbeddingAdapter(EmbeddingAdapter):
    """Embedding store backed by a plain dict, for tests and snapshots."""

    def __init__(self, embeddings: dict[str, list[float]] | None = None):
        self._embeddings = dict(embeddings or {})

    def add_embedding(self, product_id: str, vector: list[float]):
        self._embeddings[product_id] = list(vector)

    def get_embedding(self, product_id: str) -> Optional[list[float]]:
        return self._embeddings.get(product_id)


class JsonCatalogAdapter(InMemoryCatalogAdapter):
    """
    Catalog adapter that loads a snapshot exported by the catalog-sync job.

    JSON format expected:
        {
          "products": [{"id": "p1", "name": "...", "category": "...", ...}, ...],
          "offers": [{"product_id": "p1", "vendor_id": "v1", "price": 90000, ...}, ...]
        }
    """

    def __init__(self, data_path: str | Path):
        """
        Initialize adapter with a snapshot file.

        Args:
            data_path: Path to the catalog snapshot JSON
        """
        self._data_path = Path(data_path)
        products, offers = self._load_data()
        super().__init__(products, offers)

    def _load_data(self) -> tuple[list[CatalogProduct], list[VendorOffer]]:
        """Load products and offers from file."""
        if not self._data_path.exists():
            raise FileNotFoundError(f"Catalog snapshot not found: {self._data_path}")
        if self._data_path.suffix.lower() != ".json":
            raise ValueError(f"Unsupported file format: {self._data_path.suffix}")

        with open(self._data_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        products = [p for p in (parse_product(row) for row in data.get("products", [])) if p]
        offers = [o for o in (parse_offer(row) for row in data.get("offers", [])) if o]
        return products, offers


def _parse_decimal(value: Any) -> Optional[Decimal]:
    """Parse a money value to Decimal, handling strings with commas."""
    if value is None or value == "":
        return None
    try:
        return Decimal(str(value).replace(",", "").strip())
    except InvalidOperation:
        return None


def _parse_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _parse_datetime(value: Any) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


def parse_product(row: dict) -> Optional[CatalogProduct]:
    """Parse a row dict into CatalogProduct, or None if required fields are missing."""
    product_id = row.get("id")
    name = row.get("name")
    category = row.get("category")
    if not product_id or not name or not category:
        return None

    embedding = row.get("embedding")
    if embedding is not None:
        try:
            embedding = [float(x) for x in embedding]
        except (TypeError, ValueError):
            embedding = None

    return CatalogProduct(
        id=str(product_id).strip(),
        name=str(name).strip(),
        category=str(category).strip(),
        name_alt=row.get("name_alt") or None,
        brand=row.get("brand") or None,
        catalog_number=str(row["catalog_number"]).strip() if row.get("catalog_number") else None,
        specifications=dict(row.get("specifications") or {}),
        specification=row.get("specification") or None,
        grade=row.get("grade") or None,
        embedding=embedding,
        hazard_codes=tuple(row.get("hazard_codes") or ()),
        updated_at=_parse_datetime(row.get("updated_at")),
    )


def parse_offer(row: dict) -> Optional[VendorOffer]:
    """Parse a row dict into VendorOffer, or None if it has no usable price."""
    product_id = row.get("product_id")
    vendor_id = row.get("vendor_id")
    price = _parse_decimal(row.get("price"))
    if not product_id or not vendor_id or price is None:
        return None

    return VendorOffer(
        product_id=str(product_id).strip(),
        vendor_id=str(vendor_id).strip(),
        price=price,
        vendor_name=row.get("vendor_name") or None,
        currency=row.get("currency") or "KRW",
        lead_time_days=_parse_int(row.get("lead_time_days")),
        stock_status=row.get("stock_status") or None,
    )


def load_purchase_rows(data_path: str | Path) -> list[PurchaseRecordInput]:
    """
    Load purchase rows to match from a CSV or JSON file.

    CSV format expected:
        item_name,catalog_number,vendor_hint,quantity
        Gibco FBS 500ml,,,2

    JSON format expected:
        [{"item_name": "...", "catalog_number": "...", ...}, ...]
    """
    path = Path(data_path)
    if not path.exists():
        raise FileNotFoundError(f"Purchase rows file not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".csv":
        with open(path, "r", newline="", encoding="utf-8") as f:
            rows = list(csv.DictReader(f))
    elif suffix == ".json":
        with open(path, "r", encoding="utf-8") as f:
            rows = json.load(f)
    else:
        raise ValueError(f"Unsupported file format: {suffix}")

    return [_parse_purchase_row(row) for row in rows]


def _parse_purchase_row(row: dict) -> PurchaseRecordInput:
    quantity = _parse_decimal(row.get("quantity")) or Decimal("1")
    return PurchaseRecordInput(
        item_name=str(row.get("item_name") or "").strip(),
        catalog_number=str(row.get("catalog_number") or "").strip() or None,
        vendor_hint=str(row.get("vendor_hint") or "").strip() or None,
        quantity=quantity,
    )
