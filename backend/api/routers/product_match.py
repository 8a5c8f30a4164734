"""
Product match API router.
"""
import logging
from decimal import Decimal
from pathlib import Path

from fastapi import APIRouter, HTTPException, Query

from backend.api.models import BatchMatchRequest, MatchRequest, RecommendRequest
from backend.core.config import settings

from bioinsight.product_match import (
    load_config, summarize_results,
    OptimizationParams, ProductMatchEngine, PurchaseRecordInput,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Product Match"])

# Global state for the engine (loaded on first use)
_product_match_state = {
    "engine": None,
    "initialized": False,
}


def _init_product_match():
    """Initialize the engine from the catalog snapshot if not already done."""
    if _product_match_state["initialized"]:
        return True

    catalog_path = Path(settings.CATALOG_PATH)
    if not catalog_path.exists():
        logger.warning(f"Catalog snapshot not found: {catalog_path}")
        return False

    try:
        config = load_config(settings.ENGINE_CONFIG_PATH or None)

        embeddings = None
        if settings.EMBEDDINGS_ENABLED:
            from bioinsight.product_match.embeddings import ChromaEmbeddingAdapter

            store = ChromaEmbeddingAdapter(
                settings.CHROMA_DIR,
                ollama_url=settings.OLLAMA_URL,
                model=settings.EMBED_MODEL,
            )
            if store.connect():
                embeddings = store

        _product_match_state["engine"] = ProductMatchEngine.from_json(
            catalog_path, embeddings=embeddings, config=config
        )
        _product_match_state["initialized"] = True
        return True
    except (OSError, ValueError) as e:
        logger.warning(f"Failed to initialize product match: {e}")
        return False


def _get_engine() -> ProductMatchEngine:
    _init_product_match()
    engine = _product_match_state.get("engine")
    if engine is None:
        raise HTTPException(status_code=503, detail="Catalog not loaded. Run the catalog sync first.")
    return engine


@router.get("/api/product-match/status")
def product_match_status():
    """Get product match system status."""
    _init_product_match()

    engine = _product_match_state.get("engine")
    status = {"initialized": _product_match_state["initialized"]}
    if engine is None:
        status.update({"product_count": 0, "fuzzy_ready": False, "embedding_ready": False})
    else:
        status.update(engine.status())
    return status


@router.post("/api/product-match/match")
def match_purchase(request: MatchRequest):
    """Resolve one purchase row to a catalog product."""
    engine = _get_engine()
    result = engine.match(request.item_name, request.catalog_number, request.vendor_hint)
    return result.to_dict()


@router.post("/api/product-match/match/batch")
def match_purchase_batch(request: BatchMatchRequest):
    """
    Resolve a batch of purchase rows.

    Returns one result per row in input order plus tier counts.
    """
    engine = _get_engine()
    records = [
        PurchaseRecordInput(
            item_name=row.item_name,
            catalog_number=row.catalog_number,
            vendor_hint=row.vendor_hint,
            quantity=Decimal(str(row.quantity)),
        )
        for row in request.rows
    ]
    results = engine.match_records(records)
    return {
        "results": [r.to_dict() for r in results],
        "summary": summarize_results(results),
    }


@router.get("/api/products/{product_id}/alternatives")
def product_alternatives(product_id: str, limit: int = Query(3, ge=1, le=20)):
    """Find substitute products in the same category, best first."""
    engine = _get_engine()
    if engine.catalog.get_product(product_id) is None:
        raise HTTPException(status_code=404, detail="Product not found")

    alternatives = engine.find_alternatives(product_id, limit)
    return {
        "alternatives": [a.to_dict() for a in alternatives],
        "count": len(alternatives),
    }


@router.post("/api/recommendations/optimized")
def optimized_recommendations(request: RecommendRequest):
    """
    Budget / lead-time optimized recommendations.

    Ranks candidate products by their best vendor offer; when a budget is
    given, also assembles a greedy bundle within it.
    """
    if not request.product_ids:
        raise HTTPException(status_code=400, detail="product_ids array is required")

    engine = _get_engine()
    params = OptimizationParams(
        budget=Decimal(str(request.budget)) if request.budget is not None else None,
        max_lead_time=request.max_lead_time,
        preferred_vendors=frozenset(request.preferred_vendors),
        required_categories=frozenset(request.required_categories),
        exclude_product_ids=frozenset(request.exclude_product_ids),
    )
    result = engine.recommend(request.product_ids, params, request.limit)
    return result.to_dict()
