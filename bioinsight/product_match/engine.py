"""
Product Match Engine - One entry point for the three algorithms.

Wires the catalog matcher, the alternative finder and the constrained
recommender to the same reference-data adapters and configuration.
Every operation is a pure request/response call; the engine keeps no
per-request state.
"""

import logging
from pathlib import Path
from typing import Optional

from .adapters import (
    CatalogAdapter,
    EmbeddingAdapter,
    FuzzyNameIndex,
    JsonCatalogAdapter,
    OfferAdapter,
)
from .alternatives import AlternativeFinder
from .config import Config, load_config
from .matcher import CatalogMatcher, match_purchases
from .models import (
    MatchResult,
    OptimizationParams,
    PurchaseRecordInput,
    RecommendationResult,
    SimilarityResult,
)
from .recommender import ConstrainedRecommender
from .trigram import build_trigram_index

logger = logging.getLogger(__name__)


class ProductMatchEngine:
    """
    Facade over the matching and recommendation components.

    Args:
        catalog: Read-only catalog lookups
        offers: Vendor offers (default: the catalog, if it also serves offers)
        embeddings: Optional semantic embedding store
        fuzzy_index: Optional trigram index for name matching
        config: Engine configuration (default: module's engine_config.json)
    """

    def __init__(
        self,
        catalog: CatalogAdapter,
        offers: Optional[OfferAdapter] = None,
        embeddings: Optional[EmbeddingAdapter] = None,
        fuzzy_index: Optional[FuzzyNameIndex] = None,
        config: Optional[Config] = None,
    ):
        if offers is None:
            if not isinstance(catalog, OfferAdapter):
                raise ValueError("An offer adapter is required when the catalog does not serve offers")
            offers = catalog

        self.catalog = catalog
        self.offers = offers
        self.embeddings = embeddings
        self.fuzzy_index = fuzzy_index
        self.config = config or load_config()

        self.matcher = CatalogMatcher(catalog, fuzzy_index, self.config)
        self.alternative_finder = AlternativeFinder(catalog, offers, embeddings, self.config)
        self.recommender = ConstrainedRecommender(catalog, offers, self.config)

    @classmethod
    def from_catalog(
        cls,
        catalog: CatalogAdapter,
        offers: Optional[OfferAdapter] = None,
        embeddings: Optional[EmbeddingAdapter] = None,
        config: Optional[Config] = None,
    ) -> "ProductMatchEngine":
        """Build an engine with a freshly built trigram index."""
        return cls(
            catalog,
            offers=offers,
            embeddings=embeddings,
            fuzzy_index=build_trigram_index(catalog),
            config=config,
        )

    @classmethod
    def from_json(
        cls,
        catalog_path: str | Path,
        embeddings: Optional[EmbeddingAdapter] = None,
        config: Optional[Config] = None,
    ) -> "ProductMatchEngine":
        """Build an engine over a catalog snapshot file."""
        catalog = JsonCatalogAdapter(catalog_path)
        logger.info(f"Loaded catalog snapshot with {catalog.index.product_count} products")
        return cls.from_catalog(catalog, embeddings=embeddings, config=config)

    def match(
        self,
        item_name: str,
        catalog_number: Optional[str] = None,
        vendor_hint: Optional[str] = None,
    ) -> MatchResult:
        """Resolve one purchase row to a catalog product."""
        return self.matcher.match(item_name, catalog_number, vendor_hint)

    def match_records(self, records: list[PurchaseRecordInput]) -> list[MatchResult]:
        """Resolve a batch of purchase rows."""
        return match_purchases(records, self.matcher)

    def find_alternatives(self, product_id: str, limit: Optional[int] = None) -> list[SimilarityResult]:
        """Rank substitutes for a product."""
        return self.alternative_finder.find(product_id, limit)

    def recommend(
        self,
        candidate_ids: list[str],
        params: Optional[OptimizationParams] = None,
        limit: Optional[int] = None,
    ) -> RecommendationResult:
        """Rank candidate products by best offer and assemble a bundle under budget."""
        return self.recommender.recommend(candidate_ids, params, limit)

    def status(self) -> dict:
        """Readiness of the reference data and optional signal sources."""
        return {
            "product_count": len(self.catalog.all_products()),
            "fuzzy_ready": self.fuzzy_index is not None and self.fuzzy_index.is_ready,
            "embedding_ready": self.embeddings is not None and self.embeddings.is_ready,
        }
