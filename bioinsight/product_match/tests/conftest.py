"""
Shared fixtures for the product match tests.

The sample catalog is a small snapshot in the catalog-sync export format:
three cell-culture products, two chemicals, one pipette and the
"ABC-100" filter tips with two competing vendor offers.
"""

from pathlib import Path

import pytest

from bioinsight.product_match.adapters import JsonCatalogAdapter
from bioinsight.product_match.config import load_config
from bioinsight.product_match.trigram import build_trigram_index


FIXTURES_DIR = Path(__file__).parent / "fixtures"
SAMPLE_CATALOG = FIXTURES_DIR / "sample_catalog.json"


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def catalog():
    return JsonCatalogAdapter(SAMPLE_CATALOG)


@pytest.fixture
def fuzzy_index(catalog):
    return build_trigram_index(catalog)


@pytest.fixture
def sample_catalog_path():
    return SAMPLE_CATALOG
