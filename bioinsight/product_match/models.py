"""
Data models for the Product Match & Recommendation Engine.

All structured data uses dataclasses for type hints, __eq__, and __repr__.
Money values use Decimal for precision; scores are plain floats.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional


class SignalUnavailableError(RuntimeError):
    """
    Raised by an optional signal source (fuzzy index, embedding index)
    that cannot answer right now.

    The engine catches it, logs a warning and skips the signal.
    """


class MatchTier(Enum):
    """
    How a purchase row was resolved to a catalog product.

    Tiers are listed from most to least trustworthy:
    - EXACT_CATALOG: catalog number equal (case-insensitive)
    - PREFIX_CATALOG: catalog number starts with the given one
    - FUZZY_NAME: item name similar to the product name
    - UNMATCHED: nothing found
    """
    EXACT_CATALOG = "EXACT_CATALOG"
    PREFIX_CATALOG = "PREFIX_CATALOG"
    FUZZY_NAME = "FUZZY_NAME"
    UNMATCHED = "UNMATCHED"

    @property
    def priority(self) -> int:
        """Lower is more trustworthy."""
        return _TIER_PRIORITY[self]


_TIER_PRIORITY = {
    MatchTier.EXACT_CATALOG: 0,
    MatchTier.PREFIX_CATALOG: 1,
    MatchTier.FUZZY_NAME: 2,
    MatchTier.UNMATCHED: 3,
}


@dataclass
class CatalogProduct:
    """
    Canonical catalog entry for a purchasable reagent or piece of equipment.

    `specifications` is the structured key/value map, `specification` the
    free-text spec line shown on product pages (e.g. "500 mL, sterile").
    """
    id: str
    name: str
    category: str
    name_alt: Optional[str] = None      # Localized / alternate name
    brand: Optional[str] = None
    catalog_number: Optional[str] = None
    specifications: dict[str, Any] = field(default_factory=dict)
    specification: Optional[str] = None
    grade: Optional[str] = None
    embedding: Optional[list[float]] = None
    hazard_codes: tuple[str, ...] = ()
    updated_at: Optional[datetime] = None  # For recency-ordered candidate pools

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization (embedding omitted)."""
        result: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "category": self.category,
        }
        if self.name_alt:
            result["name_alt"] = self.name_alt
        if self.brand:
            result["brand"] = self.brand
        if self.catalog_number:
            result["catalog_number"] = self.catalog_number
        if self.specifications:
            result["specifications"] = dict(self.specifications)
        if self.specification:
            result["specification"] = self.specification
        if self.grade:
            result["grade"] = self.grade
        if self.hazard_codes:
            result["hazard_codes"] = list(self.hazard_codes)
        return result


@dataclass
class VendorOffer:
    """A vendor's price / lead-time / stock quote for one catalog product."""
    product_id: str
    vendor_id: str
    price: Decimal
    vendor_name: Optional[str] = None
    currency: str = "KRW"
    lead_time_days: Optional[int] = None  # None or 0 = not quoted
    stock_status: Optional[str] = None

    @property
    def lead_time(self) -> int:
        """Lead time in days, 0 when unknown."""
        return self.lead_time_days or 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "product_id": self.product_id,
            "vendor_id": self.vendor_id,
            "vendor_name": self.vendor_name,
            "price": float(self.price),
            "currency": self.currency,
            "lead_time_days": self.lead_time_days,
            "stock_status": self.stock_status,
        }


@dataclass
class PurchaseRecordInput:
    """A single free-text row from a purchase import."""
    item_name: str
    catalog_number: Optional[str] = None
    vendor_hint: Optional[str] = None
    quantity: Decimal = Decimal("1")


@dataclass
class MatchResult:
    """
    Output of the catalog matcher for a single purchase row.

    Confidence follows the tier: EXACT_CATALOG 1.0, PREFIX_CATALOG 0.8,
    FUZZY_NAME 0.3-0.99, UNMATCHED 0.
    """
    product_id: Optional[str]
    tier: MatchTier
    confidence: float
    reason: str = ""  # Human-readable explanation

    matched_catalog_number: Optional[str] = None
    matched_name: Optional[str] = None
    # Hazard snapshot of the matched product, taken at match time
    hazard_codes: tuple[str, ...] = ()

    # Set when matched as part of a batch
    record: Optional[PurchaseRecordInput] = None

    @property
    def is_matched(self) -> bool:
        return self.product_id is not None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "product_id": self.product_id,
            "tier": self.tier.value,
            "confidence": self.confidence,
            "reason": self.reason,
        }
        if self.matched_catalog_number:
            result["matched_catalog_number"] = self.matched_catalog_number
        if self.matched_name:
            result["matched_name"] = self.matched_name
        if self.hazard_codes:
            result["hazard_codes"] = list(self.hazard_codes)
        if self.record is not None:
            result["item_name"] = self.record.item_name
            result["catalog_number"] = self.record.catalog_number
            result["vendor_hint"] = self.record.vendor_hint
            result["quantity"] = float(self.record.quantity)
        return result


@dataclass
class SimilarityResult:
    """A candidate substitute with its aggregate score and the signals that fired."""
    product: CatalogProduct
    score: float
    reasons: list[str] = field(default_factory=list)

    # Attached by the alternative finder for display
    cheapest_offer: Optional[VendorOffer] = None

    def to_dict(self) -> dict[str, Any]:
        result = self.product.to_dict()
        result["similarity"] = self.score
        result["similarity_reasons"] = list(self.reasons)
        if self.cheapest_offer is not None:
            result["min_price"] = float(self.cheapest_offer.price)
            result["cheapest_offer"] = self.cheapest_offer.to_dict()
        return result


@dataclass
class OptimizationParams:
    """Constraints for the budget / lead-time recommender. Every field is optional."""
    budget: Optional[Decimal] = None
    max_lead_time: Optional[int] = None
    preferred_vendors: frozenset[str] = frozenset()
    required_categories: frozenset[str] = frozenset()
    exclude_product_ids: frozenset[str] = frozenset()


@dataclass
class ScoredProduct:
    """A product with its best-scoring vendor offer under the constraints."""
    product: CatalogProduct
    offer: VendorOffer
    score: float
    price_score: float
    lead_time_score: float
    vendor_score: float
    reasons: list[str] = field(default_factory=list)

    @property
    def price(self) -> Decimal:
        return self.offer.price

    def to_dict(self) -> dict[str, Any]:
        return {
            "product": self.product.to_dict(),
            "offer": self.offer.to_dict(),
            "score": round(self.score, 2),
            "price_score": round(self.price_score, 2),
            "lead_time_score": round(self.lead_time_score, 2),
            "vendor_score": round(self.vendor_score, 2),
            "reasons": list(self.reasons),
        }


@dataclass
class RejectedProduct:
    """A candidate the recommender dropped, with why."""
    product_id: str
    reasons: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"product_id": self.product_id, "reasons": list(self.reasons)}


@dataclass
class RecommendationBundle:
    """Greedy budget-respecting selection of scored products."""
    selected: list[ScoredProduct] = field(default_factory=list)
    total_price: Decimal = Decimal("0")
    remaining_budget: Decimal = Decimal("0")
    average_lead_time: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "selected": [p.to_dict() for p in self.selected],
            "total_price": float(self.total_price),
            "remaining_budget": float(self.remaining_budget),
            "average_lead_time": self.average_lead_time,
        }


@dataclass
class RecommendationResult:
    """Output of the recommender: the ranking, the dropped products and an optional bundle."""
    ranked: list[ScoredProduct] = field(default_factory=list)
    rejected: list[RejectedProduct] = field(default_factory=list)
    bundle: Optional[RecommendationBundle] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "ranked": [p.to_dict() for p in self.ranked],
            "rejected": [r.to_dict() for r in self.rejected],
            "bundle": self.bundle.to_dict() if self.bundle is not None else None,
        }
