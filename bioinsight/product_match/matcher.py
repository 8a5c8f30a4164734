"""
Catalog Matcher - Resolve free-text purchase rows to catalog products.

Stages are evaluated in order and stop at the first hit:

| Stage | Lookup                                  | Tier           | Confidence |
|-------|-----------------------------------------|----------------|------------|
| 1     | Catalog number equal (case-insensitive) | EXACT_CATALOG  | 1.0        |
| 2     | Catalog number starts-with              | PREFIX_CATALOG | 0.8        |
| 3     | Trigram similarity on name / alt name   | FUZZY_NAME     | similarity |
| 4     | Name contains item (fuzzy index down)   | FUZZY_NAME     | 0.5        |
| 5     | Nothing                                 | UNMATCHED      | 0          |

Every stage is scoped to the vendor hint when one is given. Matching is
read-only; callers persist any linkage.
"""

import logging
from dataclasses import replace
from typing import Optional

from .adapters import CatalogAdapter, FuzzyNameIndex
from .config import Config, load_config, vendor_names
from .index import VendorScope
from .models import CatalogProduct, MatchResult, MatchTier, PurchaseRecordInput

logger = logging.getLogger(__name__)


class CatalogMatcher:
    """
    Match purchase rows against a catalog.

    Args:
        catalog: Read-only catalog lookups
        fuzzy_index: Trigram index; None means the fuzzy signal is unavailable
        config: Engine configuration (default: module's engine_config.json)
    """

    def __init__(
        self,
        catalog: CatalogAdapter,
        fuzzy_index: Optional[FuzzyNameIndex] = None,
        config: Optional[Config] = None,
    ):
        self.catalog = catalog
        self.fuzzy_index = fuzzy_index
        self.config = config or load_config()
        self.settings = self.config.matcher

    def match(
        self,
        item_name: str,
        catalog_number: Optional[str] = None,
        vendor_hint: Optional[str] = None,
    ) -> MatchResult:
        """
        Resolve one purchase row to a catalog product.

        Args:
            item_name: Free-text item name from the purchase row
            catalog_number: Catalog number if the row has one
            vendor_hint: Vendor id or name to scope the lookup to

        Returns:
            MatchResult; never raises for bad input or a degraded fuzzy index
        """
        name = (item_name or "").strip()
        number = (catalog_number or "").strip()
        vendor = self._resolve_vendor(vendor_hint)

        if not name and not number:
            return _unmatched("Empty item name and no catalog number")

        if number:
            result = self._match_catalog_number(number, vendor)
            if result is not None:
                return result

        if name:
            result = self._match_name(name, vendor)
            if result is not None:
                return result

        return _unmatched("No catalog match")

    def match_record(self, record: PurchaseRecordInput) -> MatchResult:
        """Match a purchase row and attach it to the result."""
        result = self.match(record.item_name, record.catalog_number, record.vendor_hint)
        return replace(result, record=record)

    def _resolve_vendor(self, vendor_hint: Optional[str]) -> Optional[VendorScope]:
        """Expand a vendor hint to all its aliases; unknown hints are used verbatim."""
        return vendor_names(vendor_hint or "", self.config) or None

    def _match_catalog_number(
        self, number: str, vendor: Optional[VendorScope]
    ) -> Optional[MatchResult]:
        # 1. Exact catalog number
        product = self.catalog.find_by_catalog_number(number, vendor)
        if product is not None:
            return _matched(
                product,
                MatchTier.EXACT_CATALOG,
                self.settings.exact_confidence,
                f"Catalog number exact match: {number}",
            )

        # 2. Prefix - most specific (shortest) catalog number wins
        candidates = self.catalog.find_by_catalog_prefix(number, vendor)
        if candidates:
            product = min(candidates, key=lambda p: (len(p.catalog_number), p.catalog_number.lower()))
            return _matched(
                product,
                MatchTier.PREFIX_CATALOG,
                self.settings.prefix_confidence,
                f"Catalog number prefix match: {product.catalog_number}",
            )
        return None

    def _match_name(self, name: str, vendor: Optional[VendorScope]) -> Optional[MatchResult]:
        # 3. Trigram similarity
        if self.fuzzy_index is not None and self.fuzzy_index.is_ready:
            try:
                hits = self.fuzzy_index.search(
                    name, vendor=vendor, threshold=self.settings.fuzzy_threshold, limit=1
                )
            except Exception as e:
                logger.warning(f"Fuzzy matching failed, falling back to contains search: {e}")
            else:
                if hits:
                    product, score = hits[0]
                    confidence = min(score, self.settings.fuzzy_confidence_cap)
                    return _matched(
                        product,
                        MatchTier.FUZZY_NAME,
                        confidence,
                        f"Product name similarity ({score * 100:.0f}%): {name}",
                    )
                return None
        else:
            logger.warning("Fuzzy index unavailable, falling back to contains search")

        # 4. Degraded - plain substring containment
        product = self.catalog.find_by_name_containing(name, vendor)
        if product is not None:
            return _matched(
                product,
                MatchTier.FUZZY_NAME,
                self.settings.contains_confidence,
                f"Product name contains: {name}",
            )
        return None


def _matched(product: CatalogProduct, tier: MatchTier, confidence: float, reason: str) -> MatchResult:
    return MatchResult(
        product_id=product.id,
        tier=tier,
        confidence=confidence,
        reason=reason,
        matched_catalog_number=product.catalog_number,
        matched_name=product.name,
        hazard_codes=product.hazard_codes,
    )


def _unmatched(reason: str) -> MatchResult:
    return MatchResult(product_id=None, tier=MatchTier.UNMATCHED, confidence=0.0, reason=reason)


def match_purchases(
    records: list[PurchaseRecordInput],
    matcher: CatalogMatcher,
) -> list[MatchResult]:
    """
    Match a batch of purchase rows.

    Args:
        records: Rows from a purchase import
        matcher: Configured catalog matcher

    Returns:
        One MatchResult per row, in input order, each carrying its row
    """
    return [matcher.match_record(record) for record in records]


def sort_results_for_report(results: list[MatchResult]) -> list[MatchResult]:
    """
    Sort results for human review.

    Least trustworthy first (UNMATCHED, then FUZZY_NAME by ascending
    confidence), so the rows that need a look come first.
    """
    return sorted(results, key=lambda r: (-r.tier.priority, r.confidence))


def filter_actionable(results: list[MatchResult]) -> list[MatchResult]:
    """Filter to rows that need review (fuzzy or unmatched)."""
    return [r for r in results if r.tier in (MatchTier.FUZZY_NAME, MatchTier.UNMATCHED)]


def summarize_results(results: list[MatchResult]) -> dict:
    """Generate summary statistics for results."""
    counts = {
        "total": len(results),
        "exact_catalog": 0,
        "prefix_catalog": 0,
        "fuzzy_name": 0,
        "unmatched": 0,
    }

    for result in results:
        counts[result.tier.value.lower()] += 1

    counts["matched"] = counts["total"] - counts["unmatched"]
    counts["actionable"] = counts["fuzzy_name"] + counts["unmatched"]
    return counts
