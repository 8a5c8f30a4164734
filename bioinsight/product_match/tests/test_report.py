"""
Tests for report generator.

Run with: pytest bioinsight/product_match/tests/test_report.py -v
"""

import csv
import io

import pytest
from decimal import Decimal

from bioinsight.product_match.models import (
    CatalogProduct,
    MatchResult,
    MatchTier,
    PurchaseRecordInput,
    RecommendationBundle,
    RecommendationResult,
    RejectedProduct,
    ScoredProduct,
    SimilarityResult,
    VendorOffer,
)
from bioinsight.product_match.report import (
    export_csv,
    format_alternatives,
    format_console,
    format_recommendations,
)


@pytest.fixture
def sample_results():
    """Sample match results for testing."""
    return [
        MatchResult(
            product_id="P-TRIS",
            tier=MatchTier.EXACT_CATALOG,
            confidence=1.0,
            reason="Catalog number exact match: T1503",
            matched_catalog_number="T1503",
            matched_name="Tris Base",
            record=PurchaseRecordInput(item_name="Tris", catalog_number="T1503"),
        ),
        MatchResult(
            product_id="P-FBS",
            tier=MatchTier.FUZZY_NAME,
            confidence=0.4,
            reason="Product name similarity (40%): Gibco FBS 500ml",
            matched_catalog_number="16000-044",
            matched_name="Gibco Fetal Bovine Serum (500 mL)",
            record=PurchaseRecordInput(item_name="Gibco FBS 500ml", vendor_hint="Gibco", quantity=Decimal("2")),
        ),
        MatchResult(
            product_id=None,
            tier=MatchTier.UNMATCHED,
            confidence=0.0,
            reason="No catalog match",
            record=PurchaseRecordInput(item_name="Mystery widget"),
        ),
    ]


class TestFormatConsole:
    """Test console output formatting."""

    def test_empty_results(self):
        assert "No purchase rows" in format_console([])

    def test_sections_and_summary(self, sample_results):
        output = format_console(sample_results)

        assert "UNMATCHED (1)" in output
        assert "FUZZY MATCHES (1)" in output
        assert "Mystery widget" in output
        assert "-> Gibco Fetal Bovine Serum" in output
        assert "CATALOG NUMBER MATCHES" not in output
        assert "Total rows:     3" in output
        assert "Actionable:     2" in output

    def test_unmatched_listed_before_fuzzy(self, sample_results):
        output = format_console(sample_results)
        assert output.index("UNMATCHED (1)") < output.index("FUZZY MATCHES (1)")

    def test_show_matched(self, sample_results):
        output = format_console(sample_results, show_matched=True)
        assert "CATALOG NUMBER MATCHES (1)" in output
        assert "T1503" in output


class TestExportCsv:
    """Test CSV export."""

    def test_header_and_rows(self, sample_results):
        content = export_csv(sample_results)
        rows = list(csv.DictReader(io.StringIO(content)))

        assert len(rows) == 3
        assert rows[0]["tier"] == "EXACT_CATALOG"
        assert rows[0]["confidence"] == "1.0000"
        assert rows[1]["vendor_hint"] == "Gibco"
        assert rows[1]["quantity"] == "2"
        assert rows[1]["matched_name"] == "Gibco Fetal Bovine Serum (500 mL)"
        assert rows[2]["product_id"] == ""

    def test_exclude_matched(self, sample_results):
        content = export_csv(sample_results, include_matched=False)
        rows = list(csv.DictReader(io.StringIO(content)))
        assert [r["tier"] for r in rows] == ["FUZZY_NAME", "UNMATCHED"]

    def test_writes_to_output(self, sample_results):
        output = io.StringIO()
        content = export_csv(sample_results, output=output)
        assert output.getvalue() == content


class TestFormatAlternatives:

    def test_no_alternatives(self):
        assert format_alternatives("P-X", []) == "No alternatives found for P-X.\n"

    def test_lists_score_price_and_reasons(self):
        product = CatalogProduct(id="P-FBS-HI", name="Gibco Heat Inactivated FBS", category="Cell Culture")
        offer = VendorOffer(product_id="P-FBS-HI", vendor_id="thermofisher", price=Decimal("480000"))
        output = format_alternatives(
            "P-FBS", [SimilarityResult(product, 0.59, ["similar specifications"], offer)]
        )
        assert "ALTERNATIVES FOR P-FBS" in output
        assert " 0.59" in output
        assert "480,000 KRW" in output
        assert "similar specifications" in output


class TestFormatRecommendations:

    def test_ranked_rejected_and_bundle(self):
        product = CatalogProduct(id="P1", name="Filter Tips", category="Consumables")
        offer = VendorOffer(product_id="P1", vendor_id="V2", price=Decimal("90000"), lead_time_days=10)
        scored = ScoredProduct(product, offer, 37.1, 5.3, 66.7, 50.0, ["meets constraints"])
        result = RecommendationResult(
            ranked=[scored],
            rejected=[RejectedProduct("P9", ["product not found"])],
            bundle=RecommendationBundle([scored], Decimal("90000"), Decimal("5000"), 10.0),
        )

        output = format_recommendations(result)

        assert "Filter Tips" in output
        assert "10d" in output
        assert "REJECTED (1)" in output
        assert "product not found" in output
        assert "Total price:      90,000" in output
        assert "Remaining budget: 5,000" in output
        assert "10.0 days" in output

    def test_nothing_ranked(self):
        output = format_recommendations(RecommendationResult())
        assert "No product satisfies the constraints." in output
        assert "BUNDLE" not in output
