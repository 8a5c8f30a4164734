"""
Alternative Finder - Rank substitute products for a catalog entry.

Candidates come from the reference's top-level category, most recently
updated first, capped at a fixed pool size. That bound trades recall for
cost; the search is not exhaustive.
"""

import logging
from typing import Optional

from .adapters import CatalogAdapter, EmbeddingAdapter, OfferAdapter
from .config import Config, load_config
from .models import SignalUnavailableError, SimilarityResult, VendorOffer
from .similarity import score_similarity

logger = logging.getLogger(__name__)


def cheapest_offer(offers: list[VendorOffer]) -> Optional[VendorOffer]:
    """Lowest-priced offer; the earliest listed wins a tie."""
    best = None
    for offer in offers:
        if best is None or offer.price < best.price:
            best = offer
    return best


class AlternativeFinder:
    """
    Find substitutes for a product using the similarity scorer.

    Args:
        catalog: Read-only catalog lookups
        offers: Vendor offers, used to attach each substitute's cheapest quote
        embeddings: Optional semantic embedding store
        config: Engine configuration (default: module's engine_config.json)
    """

    def __init__(
        self,
        catalog: CatalogAdapter,
        offers: OfferAdapter,
        embeddings: Optional[EmbeddingAdapter] = None,
        config: Optional[Config] = None,
    ):
        self.catalog = catalog
        self.offers = offers
        self.embeddings = embeddings
        self.config = config or load_config()
        self.settings = self.config.alternatives

    def find(self, product_id: str, limit: Optional[int] = None) -> list[SimilarityResult]:
        """
        Rank substitutes for a product.

        Args:
            product_id: Reference product
            limit: Max results (default from config, 3)

        Returns:
            Up to `limit` results, best first, never including the reference.
            Empty when the product is unknown or limit is not positive.
        """
        if limit is None:
            limit = self.settings.default_limit
        if limit <= 0:
            return []

        reference = self.catalog.get_product(product_id)
        if reference is None:
            logger.info(f"Alternatives requested for unknown product {product_id}")
            return []

        candidates = self.catalog.list_by_category(
            reference.category,
            exclude_id=reference.id,
            limit=self.settings.candidate_pool_size,
        )

        store = self.embeddings if self.embeddings is not None and self.embeddings.is_ready else None
        reference_embedding = reference.embedding
        if reference_embedding is None and store is not None:
            reference_embedding, store = _lookup_embedding(store, reference.id)
        # Without a reference vector the cosine signal is skipped for this call;
        # its weight is not redistributed.

        alternatives = []
        for candidate in candidates:
            if candidate.id == reference.id:
                continue
            candidate_embedding = candidate.embedding
            if candidate_embedding is None and store is not None and reference_embedding is not None:
                candidate_embedding, store = _lookup_embedding(store, candidate.id)
            result = score_similarity(
                reference,
                candidate,
                self.config.similarity,
                reference_embedding=reference_embedding,
                candidate_embedding=candidate_embedding,
            )
            if result.score <= self.settings.min_score:
                continue
            result.cheapest_offer = cheapest_offer(self.offers.get_offers(candidate.id))
            alternatives.append(result)

        alternatives.sort(key=lambda r: r.score, reverse=True)
        return alternatives[:limit]


def _lookup_embedding(
    store: EmbeddingAdapter, product_id: str
) -> tuple[Optional[list[float]], Optional[EmbeddingAdapter]]:
    """
    Fetch one embedding from the store.

    Returns the vector and the store to keep using; the store comes back
    as None once it has failed so the rest of the call skips it.
    """
    try:
        return store.get_embedding(product_id), store
    except SignalUnavailableError as e:
        logger.warning(f"Embedding store unavailable, skipping semantic signal: {e}")
        return None, None
