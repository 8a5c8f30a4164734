"""
Similarity Scorer - Multi-signal similarity between two catalog products.

Signals (default weights, see engine_config.json):
- Semantic embedding cosine: 0.4, fires above 0.7
- Structured specification overlap: 0.3, fires above 0.3
- Same grade: flat 0.15
- Specification text token overlap: 0.1, fires above 0.5
- Product name token overlap: 0.1, fires above 0.3

A signal that does not fire contributes nothing and its weight is not
redistributed. Each signal value is clamped to 0-1 before weighting.
"""

import math
from typing import Any, Optional

import numpy as np

from .config import SimilarityWeights
from .models import CatalogProduct, SimilarityResult

REASON_EMBEDDING = "similar description"
REASON_SPECS = "similar specifications"
REASON_SPEC_TEXT = "similar specification text"
REASON_NAME = "similar name"
REASON_CATEGORY = "same category"


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def _round_half_up(value: float, places: int = 2) -> float:
    factor = 10 ** places
    return math.floor(value * factor + 0.5) / factor


def cosine_similarity(a: Optional[list[float]], b: Optional[list[float]]) -> Optional[float]:
    """Cosine of two vectors, or None if missing, of different length, or zero."""
    if not a or not b or len(a) != len(b):
        return None
    va = np.asarray(a, dtype=float)
    vb = np.asarray(b, dtype=float)
    norm = np.linalg.norm(va) * np.linalg.norm(vb)
    if norm == 0:
        return None
    return float(np.dot(va, vb) / norm)


def spec_overlap(spec1: Optional[dict[str, Any]], spec2: Optional[dict[str, Any]]) -> float:
    """
    Overlap of two specification maps, 0-1.

    Each shared key scores 2 for an equal value (case/whitespace-insensitive)
    or 1 when one value contains the other. Normalized by 2x the larger
    key count.
    """
    if not spec1 or not spec2:
        return 0.0

    points = 0
    for key in spec1.keys() & spec2.keys():
        val1 = str(spec1[key]).lower().strip()
        val2 = str(spec2[key]).lower().strip()
        if val1 == val2:
            points += 2
        elif val1 in val2 or val2 in val1:
            points += 1

    return points / (max(len(spec1), len(spec2)) * 2)


def token_overlap(text1: Optional[str], text2: Optional[str]) -> float:
    """Share of words (3+ chars, lowercased) of text1 found in text2, over the longer word list."""
    if not text1 or not text2:
        return 0.0
    words1 = [w for w in text1.lower().split() if len(w) > 2]
    words2 = [w for w in text2.lower().split() if len(w) > 2]
    if not words1 or not words2:
        return 0.0

    vocabulary = set(words2)
    common = sum(1 for w in words1 if w in vocabulary)
    return common / max(len(words1), len(words2))


def score_similarity(
    reference: CatalogProduct,
    candidate: CatalogProduct,
    weights: Optional[SimilarityWeights] = None,
    reference_embedding: Optional[list[float]] = None,
    candidate_embedding: Optional[list[float]] = None,
) -> SimilarityResult:
    """
    Score how well a candidate could substitute for the reference product.

    Args:
        reference: Product being replaced
        candidate: Possible substitute
        weights: Signal weights and thresholds (default: SimilarityWeights())
        reference_embedding: Overrides reference.embedding when given
        candidate_embedding: Overrides candidate.embedding when given

    Returns:
        SimilarityResult with score rounded to 2 decimals and reasons in firing order
    """
    w = weights or SimilarityWeights()
    score = 0.0
    reasons: list[str] = []

    cosine = cosine_similarity(
        reference_embedding if reference_embedding is not None else reference.embedding,
        candidate_embedding if candidate_embedding is not None else candidate.embedding,
    )
    if cosine is not None and cosine > w.embedding_threshold:
        score += _clamp(cosine) * w.embedding_weight
        reasons.append(REASON_EMBEDDING)

    specs = spec_overlap(reference.specifications, candidate.specifications)
    if specs > w.spec_threshold:
        score += _clamp(specs) * w.spec_weight
        reasons.append(REASON_SPECS)

    if reference.grade and candidate.grade and reference.grade == candidate.grade:
        score += w.grade_weight
        reasons.append(f"same grade: {reference.grade}")

    spec_text = token_overlap(reference.specification, candidate.specification)
    if spec_text > w.spec_text_threshold:
        score += _clamp(spec_text) * w.spec_text_weight
        reasons.append(REASON_SPEC_TEXT)

    # Name overlap only explains the match when nothing stronger fired
    name = token_overlap(reference.name, candidate.name)
    if name > w.name_threshold:
        score += _clamp(name) * w.name_weight
        if not reasons:
            reasons.append(REASON_NAME)

    if not reasons and reference.category == candidate.category:
        reasons.append(REASON_CATEGORY)

    return SimilarityResult(
        product=candidate,
        score=_round_half_up(_clamp(score)),
        reasons=reasons,
    )
