"""
Pydantic request/response models for the API.
"""
from pydantic import BaseModel
from typing import Dict, List, Optional


# ============== Requests ==============

class ExtractRequest(BaseModel):
    transcript: str
    role: str = "customer"


# ============== Responses ==============

class CatalogItemModel(BaseModel):
    id: str
    name: Dict[str, str]
    english_name: str
    category_id: Optional[str] = None
    category_name: Dict[str, str] = {}
    measurement_unit: int
    points: float
    price: float
    image: str = ""


class ExtractedMaterialModel(BaseModel):
    material: str
    quantity: float
    unit: str
    original_text: Optional[str] = None


class VerifiedMaterialModel(BaseModel):
    material: str
    quantity: float
    unit: str
    available: bool
    matched_item: Optional[CatalogItemModel] = None
    match_similarity: float
    unit_matched: bool
    original_text: Optional[str] = None


class OrderLineModel(BaseModel):
    item: CatalogItemModel
    quantity: float
    unit: str
    points: float
    price: float


class VerificationSummary(BaseModel):
    total: int
    available: int
    unavailable: int
    unit_mismatches: int
    total_points: float
    total_price: float


class ProcessResponse(BaseModel):
    """Everything the order builder needs from one pipeline run."""
    transcription: str
    extracted_materials: List[ExtractedMaterialModel]
    verified_materials: List[VerifiedMaterialModel]
    order_lines: List[OrderLineModel]
    summary: VerificationSummary
