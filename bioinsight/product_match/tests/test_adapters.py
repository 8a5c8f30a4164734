"""
Tests for the catalog index and the catalog adapters.

Run with: pytest bioinsight/product_match/tests/test_adapters.py -v
"""

import json

import pytest
from datetime import datetime
from decimal import Decimal

from bioinsight.product_match.models import CatalogProduct, VendorOffer
from bioinsight.product_match.index import build_index, normalize_catalog_number
from bioinsight.product_match.adapters import (
    InMemoryCatalogAdapter,
    InMemoryEmbeddingAdapter,
    JsonCatalogAdapter,
    load_purchase_rows,
    parse_offer,
    parse_product,
)


@pytest.fixture
def products():
    return [
        CatalogProduct(id="p1", name="Tris Base", category="Chemicals", catalog_number="T1503",
                       updated_at=datetime(2025, 1, 1)),
        CatalogProduct(id="p2", name="Tris Base 1 kg", category="Chemicals", catalog_number="t1503-1kg",
                       updated_at=datetime(2026, 1, 1)),
        CatalogProduct(id="p3", name="Sodium Chloride", name_alt="염화나트륨", category="Chemicals"),
        CatalogProduct(id="p4", name="Pipette", category="Equipment", catalog_number="3123000047"),
    ]


@pytest.fixture
def offers():
    return [
        VendorOffer(product_id="p1", vendor_id="sigma", vendor_name="Sigma-Aldrich", price=Decimal("85000")),
        VendorOffer(product_id="p2", vendor_id="sigma", price=Decimal("250000")),
        VendorOffer(product_id="p3", vendor_id="daejung", price=Decimal("30000")),
        VendorOffer(product_id="p4", vendor_id="eppendorf", price=Decimal("600000")),
    ]


@pytest.fixture
def adapter(products, offers):
    return InMemoryCatalogAdapter(products, offers)


class TestBuildIndex:
    """Test catalog index construction."""

    def test_counts(self, products, offers):
        index = build_index(products, offers)
        assert index.product_count == 4
        assert index.offer_count == 4

    def test_catalog_number_lookup_case_insensitive(self, products):
        index = build_index(products)
        assert [p.id for p in index.lookup_catalog_number("t1503")] == ["p1"]
        assert [p.id for p in index.lookup_catalog_number(" T1503-1KG ")] == ["p2"]
        assert index.lookup_catalog_number("nope") == []

    def test_category_newest_first(self, products):
        index = build_index(products)
        # p3 has no timestamp and sorts last
        assert index.by_category["Chemicals"] == ["p2", "p1", "p3"]

    def test_duplicate_id_last_write_wins(self):
        index = build_index([
            CatalogProduct(id="p1", name="Old", category="A", catalog_number="OLD-1"),
            CatalogProduct(id="p2", name="Other", category="A"),
            CatalogProduct(id="p1", name="New", category="B", catalog_number="NEW-1"),
        ])
        assert index.order == ["p1", "p2"]
        assert index.lookup_id("p1").name == "New"
        assert [p.name for p in index.lookup_catalog_number("new-1")] == ["New"]
        assert index.lookup_catalog_number("OLD-1") == []
        assert index.by_category == {"A": ["p2"], "B": ["p1"]}

    def test_duplicate_id_keeps_offers_and_vendors(self):
        index = build_index(
            [
                CatalogProduct(id="p1", name="Old", category="A"),
                CatalogProduct(id="p1", name="New", category="A"),
            ],
            [VendorOffer(product_id="p1", vendor_id="sigma", price=Decimal("1"))],
        )
        assert index.offer_count == 1
        assert index.sells("p1", "sigma")

    def test_offers_for_unknown_products_skipped(self, products):
        index = build_index(products, [VendorOffer(product_id="zzz", vendor_id="v", price=Decimal("1"))])
        assert index.offer_count == 0

    def test_vendor_keys_include_ids_and_names(self, products, offers):
        index = build_index(products, offers)
        assert index.sells("p1", "sigma")
        assert index.sells("p1", "SIGMA-ALDRICH")
        assert not index.sells("p1", "eppendorf")

    def test_sells_accepts_a_set_of_names(self, products, offers):
        index = build_index(products, offers)
        assert index.sells("p1", frozenset({"merck", "sigma-aldrich"}))
        assert not index.sells("p1", frozenset({"merck", "milliporesigma"}))
        assert not index.sells("p1", frozenset())

    def test_normalize_catalog_number(self):
        assert normalize_catalog_number("  AbC-100 ") == "abc-100"
        assert normalize_catalog_number("") == ""
        assert normalize_catalog_number(None) == ""


class TestInMemoryCatalogAdapter:
    """Test in-memory catalog lookups."""

    def test_get_product(self, adapter):
        assert adapter.get_product("p1").name == "Tris Base"
        assert adapter.get_product("missing") is None

    def test_get_products_keeps_order_skips_unknown(self, adapter):
        assert [p.id for p in adapter.get_products(["p3", "zzz", "p1"])] == ["p3", "p1"]

    def test_find_by_catalog_number(self, adapter):
        assert adapter.find_by_catalog_number("t1503").id == "p1"
        assert adapter.find_by_catalog_number("T1503", vendor="sigma").id == "p1"
        assert adapter.find_by_catalog_number("T1503", vendor="eppendorf") is None

    def test_find_by_catalog_prefix(self, adapter):
        assert {p.id for p in adapter.find_by_catalog_prefix("T150")} == {"p1", "p2"}
        assert adapter.find_by_catalog_prefix("T150", vendor="daejung") == []
        assert adapter.find_by_catalog_prefix("  ") == []

    def test_list_by_category(self, adapter):
        assert [p.id for p in adapter.list_by_category("Chemicals", exclude_id="p2")] == ["p1", "p3"]
        assert [p.id for p in adapter.list_by_category("Chemicals", limit=1)] == ["p2"]
        assert adapter.list_by_category("Nothing") == []

    def test_find_by_name_containing(self, adapter):
        assert adapter.find_by_name_containing("tris").id == "p1"
        assert adapter.find_by_name_containing("나트륨").id == "p3"
        assert adapter.find_by_name_containing("tris", vendor="daejung") is None
        assert adapter.find_by_name_containing("") is None

    def test_offers(self, adapter):
        assert [o.vendor_id for o in adapter.get_offers("p1")] == ["sigma"]
        assert adapter.get_offers("missing") == []
        assert adapter.product_vendors("p1") == {"sigma", "sigma-aldrich"}


class TestInMemoryEmbeddingAdapter:
    """Test dict-backed embedding store."""

    def test_lookup(self):
        store = InMemoryEmbeddingAdapter({"p1": [1.0, 0.0]})
        store.add_embedding("p2", (0.0, 1.0))
        assert store.is_ready
        assert store.get_embedding("p1") == [1.0, 0.0]
        assert store.get_embedding("p2") == [0.0, 1.0]
        assert store.get_embedding("p3") is None


class TestJsonCatalogAdapter:
    """Test loading catalog snapshots."""

    def test_load_sample_snapshot(self, catalog):
        # The row without an id and the offers without a product or price are dropped
        assert catalog.index.product_count == 7
        assert catalog.index.offer_count == 9
        fbs = catalog.get_product("P-FBS")
        assert fbs.name_alt == "소태아혈청"
        assert fbs.specifications["volume"] == "500 mL"
        assert fbs.updated_at.year == 2026
        assert catalog.get_product("P-TRIS").hazard_codes == ("H315", "H319")

    def test_price_with_commas(self, catalog):
        prices = {o.vendor_id: o.price for o in catalog.get_offers("P-FBS")}
        assert prices == {"thermofisher": Decimal("450000"), "korea_bio": Decimal("420000")}

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            JsonCatalogAdapter(tmp_path / "missing.json")

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "catalog.xml"
        path.write_text("<catalog/>")
        with pytest.raises(ValueError):
            JsonCatalogAdapter(path)


class TestParsing:
    """Test row parsing helpers."""

    def test_product_requires_id_name_category(self):
        assert parse_product({"id": "p1", "name": "Tris"}) is None
        assert parse_product({"id": "p1", "name": "Tris", "category": "Chemicals"}).id == "p1"

    def test_product_bad_embedding_dropped(self):
        product = parse_product({"id": "p1", "name": "Tris", "category": "C", "embedding": ["x"]})
        assert product.embedding is None

    def test_offer_requires_price(self):
        assert parse_offer({"product_id": "p1", "vendor_id": "v1", "price": "n/a"}) is None
        offer = parse_offer({"product_id": "p1", "vendor_id": "v1", "price": "1,200", "lead_time_days": "7"})
        assert offer.price == Decimal("1200")
        assert offer.lead_time_days == 7


class TestLoadPurchaseRows:
    """Test loading purchase rows to match."""

    def test_csv(self, tmp_path):
        path = tmp_path / "purchases.csv"
        path.write_text(
            "item_name,catalog_number,vendor_hint,quantity\n"
            "Gibco FBS 500ml,,Gibco,2\n"
            "Tris Base,T1503,,\n",
            encoding="utf-8",
        )
        rows = load_purchase_rows(path)
        assert len(rows) == 2
        assert rows[0].item_name == "Gibco FBS 500ml"
        assert rows[0].catalog_number is None
        assert rows[0].vendor_hint == "Gibco"
        assert rows[0].quantity == Decimal("2")
        assert rows[1].catalog_number == "T1503"
        assert rows[1].quantity == Decimal("1")

    def test_json(self, tmp_path):
        path = tmp_path / "purchases.json"
        path.write_text(json.dumps([{"item_name": "Tris Base", "quantity": 3}]))
        rows = load_purchase_rows(path)
        assert rows[0].item_name == "Tris Base"
        assert rows[0].quantity == Decimal("3")

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "purchases.txt"
        path.write_text("Tris Base")
        with pytest.raises(ValueError):
            load_purchase_rows(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_purchase_rows(tmp_path / "missing.csv")
