"""
Trigram Index - Fuzzy product-name lookup for the catalog matcher.

Similarity is the share of three-character substrings two names have in
common: |A & B| / |A | B|. Each word is lowercased and padded with two
leading spaces and one trailing space before slicing, so word starts
weigh more than word ends. Digit runs and letter runs are separate words,
so "500ml" and "500 mL" produce the same trigrams.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

from .adapters import CatalogAdapter, FuzzyNameIndex
from .index import VendorScope, vendor_scope_keys
from .models import CatalogProduct, SignalUnavailableError

logger = logging.getLogger(__name__)

_WORD_RE = re.compile(r"[0-9]+|[^\W\d_]+")


def extract_words(text: str) -> list[str]:
    """Split text into lowercase alphabetic and numeric words."""
    if not text:
        return []
    return _WORD_RE.findall(text.lower())


def trigrams(text: str) -> frozenset[str]:
    """Set of padded trigrams for every word in the text."""
    grams = set()
    for word in extract_words(text):
        padded = f"  {word} "
        for i in range(len(padded) - 2):
            grams.add(padded[i:i + 3])
    return frozenset(grams)


def trigram_similarity(a: str, b: str) -> float:
    """Trigram similarity between two strings, 0-1."""
    return _jaccard(trigrams(a), trigrams(b))


@dataclass
class _Entry:
    product: CatalogProduct
    name_grams: frozenset[str]
    alt_grams: frozenset[str]


class TrigramIndex(FuzzyNameIndex):
    """
    Fuzzy name index over a catalog.

    Trigram sets for every product name and alternate name are computed
    once at build time. Searching an index that was never built raises
    SignalUnavailableError so callers can fall back to a cheaper lookup.
    """

    def __init__(self, catalog: CatalogAdapter):
        self._catalog = catalog
        self._entries: list[_Entry] = []
        self._initialized = False

    def build(self) -> bool:
        """Compute trigram sets for the whole catalog."""
        self._entries = [
            _Entry(
                product=product,
                name_grams=trigrams(product.name),
                alt_grams=trigrams(product.name_alt or ""),
            )
            for product in self._catalog.all_products()
        ]
        self._initialized = True
        logger.info(f"Trigram index built with {len(self._entries)} products")
        return True

    @property
    def is_ready(self) -> bool:
        return self._initialized

    @property
    def size(self) -> int:
        return len(self._entries)

    def search(
        self,
        name: str,
        vendor: Optional[VendorScope] = None,
        threshold: float = 0.3,
        limit: int = 5,
    ) -> list[tuple[CatalogProduct, float]]:
        """
        Find products whose name or alternate name resembles the query.

        Args:
            name: Free-text item name
            vendor: Restrict to products this vendor (id, name or name set) offers
            threshold: Minimum similarity (inclusive)
            limit: Max results to return

        Returns:
            (product, similarity) pairs, best first; catalog order among ties
        """
        if not self._initialized:
            raise SignalUnavailableError("Trigram index has not been built")

        query = trigrams(name)
        if not query:
            return []

        scope = vendor_scope_keys(vendor) if vendor else frozenset()
        scored = []
        for entry in self._entries:
            score = max(_jaccard(query, entry.name_grams), _jaccard(query, entry.alt_grams))
            if score < threshold:
                continue
            if scope and scope.isdisjoint(self._catalog.product_vendors(entry.product.id)):
                continue
            scored.append((entry.product, score))

        scored.sort(key=lambda pair: pair[1], reverse=True)
        return scored[:limit]


def _jaccard(a: frozenset[str], b: frozenset[str]) -> float:
    if not a or not b:
        return 0.0
    return len(a & b) / len(a | b)


def build_trigram_index(catalog: CatalogAdapter) -> TrigramIndex:
    """Build and return a ready trigram index for the catalog."""
    index = TrigramIndex(catalog)
    index.build()
    return index
