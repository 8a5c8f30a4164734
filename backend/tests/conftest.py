"""
Test configuration and fixtures for the BioInsight backend test suite.

Provides:
- In-memory product match engine (no catalog snapshot on disk)
- FastAPI TestClient fixture with the engine patched in
- Factory functions for creating test catalog data
"""
from decimal import Decimal
from typing import Optional
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from bioinsight.product_match import (
    CatalogProduct,
    InMemoryCatalogAdapter,
    ProductMatchEngine,
    VendorOffer,
)


# ---------------------------------------------------------------------------
# Factory functions
# ---------------------------------------------------------------------------

def create_product(
    product_id: str,
    name: str,
    *,
    category: str = "Cell Culture",
    catalog_number: Optional[str] = None,
    grade: Optional[str] = None,
    specifications: Optional[dict] = None,
) -> CatalogProduct:
    """Build a catalog product with sensible defaults."""
    return CatalogProduct(
        id=product_id,
        name=name,
        category=category,
        catalog_number=catalog_number,
        grade=grade,
        specifications=specifications or {},
    )


def create_offer(
    product_id: str,
    vendor_id: str,
    price: str,
    lead_time_days: Optional[int] = None,
) -> VendorOffer:
    """Build a vendor offer; price is given as a string to keep it exact."""
    return VendorOffer(
        product_id=product_id,
        vendor_id=vendor_id,
        price=Decimal(price),
        lead_time_days=lead_time_days,
    )


# ---------------------------------------------------------------------------
# Engine fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def engine():
    """A small engine: two sibling sera, one medium and the ABC-100 tips."""
    fbs_specs = {"volume": "500 mL", "origin": "USA"}
    products = [
        create_product("P-FBS", "Gibco Fetal Bovine Serum (500 mL)", catalog_number="16000-044",
                       grade="Cell culture grade", specifications=fbs_specs),
        create_product("P-FBS-HI", "Gibco Heat Inactivated Fetal Bovine Serum (500 mL)",
                       catalog_number="10082-147", grade="Cell culture grade", specifications=fbs_specs),
        create_product("P-DMEM", "DMEM High Glucose Medium", catalog_number="11965-092"),
        create_product("P1", "Sterile Filter Tips 200 uL", category="Consumables", catalog_number="ABC-100"),
    ]
    offers = [
        create_offer("P-FBS", "thermofisher", "450000", 7),
        create_offer("P-FBS-HI", "thermofisher", "480000", 7),
        create_offer("P-DMEM", "thermofisher", "45000", 3),
        create_offer("P1", "V1", "100000", 5),
        create_offer("P1", "V2", "90000", 10),
    ]
    return ProductMatchEngine.from_catalog(InMemoryCatalogAdapter(products, offers))


@pytest.fixture()
def client(engine):
    """
    Provide a FastAPI TestClient with the product match engine patched in.

    The router's lazy loader sees an initialized state and never touches
    the catalog snapshot path.
    """
    from backend.api.main import app

    state = {"engine": engine, "initialized": True}
    with patch.dict("backend.api.routers.product_match._product_match_state", state):
        with TestClient(app) as c:
            yield c


@pytest.fixture()
def unloaded_client(tmp_path):
    """TestClient whose catalog snapshot does not exist."""
    from backend.api.main import app
    from backend.core.config import settings

    state = {"engine": None, "initialized": False}
    with patch.dict("backend.api.routers.product_match._product_match_state", state), \
         patch.object(settings, "CATALOG_PATH", str(tmp_path / "missing.json")):
        with TestClient(app) as c:
            yield c
