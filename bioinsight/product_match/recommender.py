"""
Constrained Recommender - Pick vendor offers under budget and lead-time limits.

Per product, every offer that breaks a supplied constraint is discarded
and the survivors are scored (0-100 each):
- price: against the budget, else a fixed reference price
- lead time: against the cap, else a fixed 30-day reference
- vendor: 100 for a preferred vendor, 50 otherwise
Composite = 0.4 price + 0.3 lead time + 0.3 vendor. Only the best offer
per product is kept.

Bundles are assembled greedily: highest composite first, accepted while
the offer price fits the remaining budget. This is deliberately not a
subset-sum optimum; the greedy order and its tie-breaking (original
candidate order) are part of the contract.
"""

import logging
from dataclasses import replace
from decimal import Decimal
from typing import Optional, Union

from .adapters import CatalogAdapter, OfferAdapter
from .config import Config, load_config
from .models import (
    CatalogProduct,
    OptimizationParams,
    RecommendationBundle,
    RecommendationResult,
    RejectedProduct,
    ScoredProduct,
    VendorOffer,
)

logger = logging.getLogger(__name__)

REASON_BUDGET_EXCEEDED = "budget exceeded"
REASON_LEAD_TIME_EXCEEDED = "lead time exceeded"
REASON_NO_OFFERS = "no vendor offers"
REASON_NOT_FOUND = "product not found"
REASON_EXCLUDED = "excluded"
REASON_CATEGORY = "category not allowed"


class ConstrainedRecommender:
    """
    Score vendor offers per product and assemble budget-respecting bundles.

    Args:
        catalog: Read-only catalog lookups
        offers: Vendor offers per product
        config: Engine configuration (default: module's engine_config.json)
    """

    def __init__(
        self,
        catalog: CatalogAdapter,
        offers: OfferAdapter,
        config: Optional[Config] = None,
    ):
        self.catalog = catalog
        self.offers = offers
        self.config = config or load_config()
        self.settings = self.config.recommender

    def recommend(
        self,
        candidate_ids: list[str],
        params: Optional[OptimizationParams] = None,
        limit: Optional[int] = None,
    ) -> RecommendationResult:
        """
        Rank candidate products by their best offer and, when a budget is
        given, assemble a bundle.

        Args:
            candidate_ids: Products to consider, in priority order
            params: Budget, lead-time cap, preferred vendors, category
                allow-list and exclusions
            limit: Max ranked results (default from config, 10)

        Returns:
            RecommendationResult with ranked products, rejected products
            and the bundle (None without a budget)
        """
        params = params or OptimizationParams()
        if params.budget is not None and not isinstance(params.budget, Decimal):
            params = replace(params, budget=Decimal(str(params.budget)))
        if limit is None:
            limit = self.settings.default_limit

        if params.budget is not None and params.budget < 0:
            logger.info(f"Ignoring recommendation request with negative budget {params.budget}")
            return RecommendationResult()
        if params.max_lead_time is not None and params.max_lead_time < 0:
            logger.info(f"Ignoring recommendation request with negative lead-time cap {params.max_lead_time}")
            return RecommendationResult()

        scored: list[ScoredProduct] = []
        rejected: list[RejectedProduct] = []
        seen: set[str] = set()

        for product_id in candidate_ids:
            if product_id in seen:
                continue
            seen.add(product_id)

            if product_id in params.exclude_product_ids:
                rejected.append(RejectedProduct(product_id, [REASON_EXCLUDED]))
                continue

            product = self.catalog.get_product(product_id)
            if product is None:
                rejected.append(RejectedProduct(product_id, [REASON_NOT_FOUND]))
                continue

            if params.required_categories and product.category not in params.required_categories:
                rejected.append(RejectedProduct(product_id, [REASON_CATEGORY]))
                continue

            outcome = self.score_product(product, params)
            if isinstance(outcome, RejectedProduct):
                rejected.append(outcome)
            else:
                scored.append(outcome)

        ranked = sorted(scored, key=lambda p: p.score, reverse=True)[:max(limit, 0)]
        bundle = assemble_bundle(scored, params.budget) if params.budget is not None else None

        return RecommendationResult(ranked=ranked, rejected=rejected, bundle=bundle)

    def score_product(
        self, product: CatalogProduct, params: OptimizationParams
    ) -> Union[ScoredProduct, RejectedProduct]:
        """
        Pick the best offer for one product under the constraints.

        Offers are visited cheapest first and a later offer must score
        strictly higher to replace the current best.
        """
        offers = sorted(self.offers.get_offers(product.id), key=lambda o: o.price)
        if not offers:
            return RejectedProduct(product.id, [REASON_NO_OFFERS])

        budget = params.budget
        cap = params.max_lead_time
        over_budget = False
        over_lead_time = False

        best: Optional[ScoredProduct] = None
        for offer in offers:
            lead_time = offer.lead_time
            if budget is not None and offer.price > budget:
                over_budget = True
                continue
            if cap is not None and lead_time > 0 and lead_time > cap:
                over_lead_time = True
                continue

            price_score = self._price_score(offer.price, budget)
            lead_time_score = self._lead_time_score(lead_time, cap)
            vendor_score = self._vendor_score(offer, params)
            score = (
                price_score * self.settings.price_weight
                + lead_time_score * self.settings.lead_time_weight
                + vendor_score * self.settings.vendor_weight
            )

            if best is None or score > best.score:
                best = ScoredProduct(
                    product=product,
                    offer=offer,
                    score=score,
                    price_score=price_score,
                    lead_time_score=lead_time_score,
                    vendor_score=vendor_score,
                )

        if best is None:
            reasons = []
            if over_budget:
                reasons.append(REASON_BUDGET_EXCEEDED)
            if over_lead_time:
                reasons.append(REASON_LEAD_TIME_EXCEEDED)
            return RejectedProduct(product.id, reasons)

        best.reasons = self._reasons(best.offer, params)
        return best

    def _price_score(self, price: Decimal, budget: Optional[Decimal]) -> float:
        if budget:
            return max(0.0, 100 - float(price) / float(budget) * 100)
        if price > 0:
            return max(0.0, 100 - float(price) / self.settings.reference_price * 100)
        return float(self.settings.unknown_score)

    def _lead_time_score(self, lead_time: int, cap: Optional[int]) -> float:
        if cap:
            return max(0.0, 100 - lead_time / cap * 100)
        if lead_time > 0:
            return max(0.0, 100 - lead_time / self.settings.reference_lead_time_days * 100)
        return float(self.settings.unknown_score)

    def _vendor_score(self, offer: VendorOffer, params: OptimizationParams) -> float:
        if offer.vendor_id in params.preferred_vendors:
            return float(self.settings.preferred_vendor_score)
        return float(self.settings.default_vendor_score)

    def _reasons(self, offer: VendorOffer, params: OptimizationParams) -> list[str]:
        reasons = []
        if params.budget and offer.price <= params.budget * Decimal(str(self.settings.good_price_ratio)):
            reasons.append("best price within budget")
        if (
            params.max_lead_time
            and offer.lead_time > 0
            and offer.lead_time <= params.max_lead_time * self.settings.fast_delivery_ratio
        ):
            reasons.append("fast delivery")
        if offer.vendor_id in params.preferred_vendors:
            reasons.append("preferred vendor")
        if not reasons:
            reasons.append("meets constraints")
        return reasons


def assemble_bundle(scored: list[ScoredProduct], budget: Decimal) -> RecommendationBundle:
    """
    Greedily fill a budget with scored products.

    Products are visited by composite score, highest first (stable, so
    ties keep candidate order). Each is accepted if its offer price fits
    what is left of the budget; the scan never stops early.

    Args:
        scored: Scored products in candidate order
        budget: Budget ceiling

    Returns:
        RecommendationBundle with totals and mean quoted lead time
    """
    remaining = budget
    selected: list[ScoredProduct] = []

    for item in sorted(scored, key=lambda p: p.score, reverse=True):
        if item.price <= remaining:
            selected.append(item)
            remaining -= item.price

    lead_times = [p.offer.lead_time for p in selected if p.offer.lead_time > 0]
    average_lead_time = sum(lead_times) / len(lead_times) if lead_times else None

    return RecommendationBundle(
        selected=selected,
        total_price=budget - remaining,
        remaining_budget=remaining,
        average_lead_time=average_lead_time,
    )
