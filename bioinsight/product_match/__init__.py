# Product Match & Recommendation Engine
# Siloed module - no imports from the web backend

from .models import (
    CatalogProduct,
    VendorOffer,
    PurchaseRecordInput,
    MatchTier,
    MatchResult,
    SimilarityResult,
    OptimizationParams,
    ScoredProduct,
    RejectedProduct,
    RecommendationBundle,
    RecommendationResult,
    SignalUnavailableError,
)
from .config import load_config, normalize_vendor, vendor_names, Config
from .index import build_index, CatalogIndex
from .adapters import (
    CatalogAdapter,
    OfferAdapter,
    EmbeddingAdapter,
    FuzzyNameIndex,
    InMemoryCatalogAdapter,
    InMemoryEmbeddingAdapter,
    JsonCatalogAdapter,
)
from .trigram import TrigramIndex, build_trigram_index, trigram_similarity
from .matcher import CatalogMatcher, match_purchases, summarize_results
from .similarity import score_similarity
from .alternatives import AlternativeFinder
from .recommender import ConstrainedRecommender, assemble_bundle
from .engine import ProductMatchEngine
from .report import format_console, export_csv

__version__ = "1.0.0"

__all__ = [
    # Models
    "CatalogProduct",
    "VendorOffer",
    "PurchaseRecordInput",
    "MatchTier",
    "MatchResult",
    "SimilarityResult",
    "OptimizationParams",
    "ScoredProduct",
    "RejectedProduct",
    "RecommendationBundle",
    "RecommendationResult",
    "SignalUnavailableError",
    # Config
    "Config",
    "load_config",
    "normalize_vendor",
    "vendor_names",
    # Catalog
    "build_index",
    "CatalogIndex",
    # Adapters
    "CatalogAdapter",
    "OfferAdapter",
    "EmbeddingAdapter",
    "FuzzyNameIndex",
    "InMemoryCatalogAdapter",
    "InMemoryEmbeddingAdapter",
    "JsonCatalogAdapter",
    # Fuzzy index
    "TrigramIndex",
    "build_trigram_index",
    "trigram_similarity",
    # Components
    "CatalogMatcher",
    "match_purchases",
    "summarize_results",
    "score_similarity",
    "AlternativeFinder",
    "ConstrainedRecommender",
    "assemble_bundle",
    "ProductMatchEngine",
    # Report
    "format_console",
    "export_csv",
]
