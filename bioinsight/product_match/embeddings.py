"""
Product Embedding Index - Semantic vectors for the similarity scorer.

Uses ChromaDB + Ollama embeddings. The engine only reads vectors back by
product id; building the index belongs to the catalog-sync job and is
exposed here so that job (and the tests) can fill the collection.
"""

import logging
from pathlib import Path
from typing import Optional

import chromadb
import requests
from chromadb.config import Settings

from .adapters import EmbeddingAdapter
from .models import CatalogProduct, SignalUnavailableError

logger = logging.getLogger(__name__)

# Configuration
OLLAMA_URL = "http://localhost:11434"
EMBED_MODEL = "nomic-embed-text:v1.5"
COLLECTION_NAME = "catalog_products"
BATCH_SIZE = 100


def product_text(product: CatalogProduct) -> str:
    """Searchable text embedded for a product."""
    parts = [product.name, product.name_alt, product.brand, product.specification]
    return " ".join(p for p in parts if p)


class ChromaEmbeddingAdapter(EmbeddingAdapter):
    """
    Embedding store backed by a persistent ChromaDB collection.

    Args:
        persist_dir: Directory of the Chroma database
        ollama_url: Base URL of the Ollama server used to embed text
        model: Ollama embedding model
        collection: Pre-opened collection (skips connect())
    """

    def __init__(
        self,
        persist_dir: str | Path,
        ollama_url: str = OLLAMA_URL,
        model: str = EMBED_MODEL,
        collection=None,
    ):
        self.persist_dir = Path(persist_dir)
        self.ollama_url = ollama_url.rstrip("/")
        self.model = model
        self.collection = collection

    def connect(self) -> bool:
        """Open (or create) the collection. Returns False when Chroma is unusable."""
        try:
            self.persist_dir.mkdir(parents=True, exist_ok=True)
            client = chromadb.PersistentClient(
                path=str(self.persist_dir),
                settings=Settings(anonymized_telemetry=False),
            )
            self.collection = client.get_or_create_collection(
                name=COLLECTION_NAME,
                metadata={"description": "Catalog products for substitute search"},
            )
        except Exception as e:
            logger.warning(f"Embedding store unavailable: {e}")
            self.collection = None
            return False

        logger.info(f"Embedding store ready with {self.collection.count()} products")
        return True

    @property
    def is_ready(self) -> bool:
        """Check if the store can answer lookups."""
        return self.collection is not None

    def _embed_text(self, text: str) -> Optional[list[float]]:
        """Generate embedding using Ollama."""
        try:
            response = requests.post(
                f"{self.ollama_url}/api/embeddings",
                json={"model": self.model, "prompt": text},
                timeout=30,
            )
            response.raise_for_status()
            return response.json().get("embedding")
        except requests.RequestException as e:
            logger.error(f"Embedding failed: {e}")
            return None

    def get_embedding(self, product_id: str) -> Optional[list[float]]:
        """
        Read a product's vector back from the collection.

        Raises:
            SignalUnavailableError: store not connected or query failed
        """
        if not self.is_ready:
            raise SignalUnavailableError("Embedding store is not connected")

        try:
            result = self.collection.get(ids=[product_id], include=["embeddings"])
        except Exception as e:
            raise SignalUnavailableError(f"Embedding lookup failed: {e}") from e

        embeddings = result.get("embeddings") if result else None
        if embeddings is None or len(embeddings) == 0:
            return None
        return [float(x) for x in embeddings[0]]

    def build_index(self, products: list[CatalogProduct], force_rebuild: bool = False) -> int:
        """
        Embed products and store them in the collection.

        Args:
            products: Catalog snapshot to embed
            force_rebuild: Drop existing vectors first

        Returns:
            Number of products indexed
        """
        if not self.is_ready:
            raise SignalUnavailableError("Embedding store is not connected")

        existing_count = self.collection.count()
        if existing_count > 0 and not force_rebuild:
            logger.info(f"Product embedding index already has {existing_count} items")
            return 0

        if force_rebuild and existing_count > 0:
            logger.info("Force rebuilding product embedding index...")
            all_ids = self.collection.get()["ids"]
            if all_ids:
                self.collection.delete(ids=all_ids)

        logger.info(f"Building embedding index for {len(products)} products...")
        indexed = 0

        for i in range(0, len(products), BATCH_SIZE):
            batch = products[i:i + BATCH_SIZE]

            ids = []
            embeddings = []
            documents = []
            metadatas = []

            for product in batch:
                text = product_text(product)
                embedding = product.embedding or self._embed_text(text)
                if not embedding:
                    continue
                ids.append(product.id)
                embeddings.append(embedding)
                documents.append(text)
                metadatas.append({
                    "name": product.name,
                    "category": product.category,
                    "catalog_number": product.catalog_number or "",
                })

            if ids:
                self.collection.add(
                    ids=ids,
                    embeddings=embeddings,
                    documents=documents,
                    metadatas=metadatas,
                )
                indexed += len(ids)
                logger.info(f"Indexed {indexed}/{len(products)} products...")

        logger.info(f"Product embedding index built with {indexed} items")
        return indexed
