"""
Pydantic request/response models for the API.
"""
from pydantic import BaseModel, Field
from typing import List, Optional


# ============== Catalog Matching ==============

class MatchRequest(BaseModel):
    item_name: str = ""
    catalog_number: Optional[str] = None
    vendor_hint: Optional[str] = None


class PurchaseRow(BaseModel):
    item_name: str = ""
    catalog_number: Optional[str] = None
    vendor_hint: Optional[str] = None
    quantity: float = 1


class BatchMatchRequest(BaseModel):
    rows: List[PurchaseRow]


# ============== Recommendations ==============

class RecommendRequest(BaseModel):
    """Request model for budget / lead-time optimized recommendations."""
    product_ids: List[str]
    budget: Optional[float] = Field(None, ge=0)
    max_lead_time: Optional[int] = Field(None, ge=0)  # Days
    preferred_vendors: List[str] = []
    required_categories: List[str] = []
    exclude_product_ids: List[str] = []
    limit: int = Field(10, ge=1, le=100)
