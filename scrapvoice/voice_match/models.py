"""
Data models for the voice-to-inventory pipeline.

All structured data uses dataclasses for type hints, __eq__, and __repr__.
Records flow one way: transcript -> ExtractedMaterial -> VerifiedMaterial.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Unit(Enum):
    """Measurement unit for a material."""
    KG = "KG"
    PIECE = "PIECE"

    @classmethod
    def from_measurement_code(cls, code) -> "Unit":
        """Map the catalog's numeric measurement_unit (1=KG, 2=piece)."""
        try:
            code = int(code)
        except (TypeError, ValueError):
            return cls.PIECE
        return cls.KG if code == 1 else cls.PIECE


class PipelineStage(Enum):
    """Lifecycle of a single pipeline invocation."""
    IDLE = "idle"
    TRANSCRIBING = "transcribing"
    EXTRACTING = "extracting"
    VERIFYING = "verifying"
    DONE = "done"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (PipelineStage.DONE, PipelineStage.FAILED, PipelineStage.CANCELLED)


@dataclass(frozen=True)
class CanonicalCatalogEntry:
    """
    One material from the fixed bilingual vocabulary.

    `name` keeps the display casing ("Plastics"); `key` is the lowercase
    lookup form.
    """
    name: str
    arabic_name: str
    default_unit: Unit

    @property
    def key(self) -> str:
        return self.name.lower()


@dataclass
class ExtractedMaterial:
    """A material the language model found in the transcript, canonicalized."""
    material: str               # Canonical display name
    quantity: float
    unit: Unit
    original_text: Optional[str] = None  # Transcript fragment, often Arabic


@dataclass(frozen=True)
class LiveCatalogItem:
    """
    A single item from the role-scoped backend catalog.

    Names are multilingual dicts keyed by language code ({"en": ..., "ar": ...}).
    """
    id: str
    name: dict
    category_id: Optional[str] = None
    category_name: dict = field(default_factory=dict)
    measurement_unit: int = 2
    points: float = 0.0
    price: float = 0.0
    image: str = ""

    @property
    def english_name(self) -> str:
        return project_name(self.name)

    @property
    def unit(self) -> Unit:
        return Unit.from_measurement_code(self.measurement_unit)

    def __hash__(self):
        return hash(self.id)


@dataclass
class VerifiedMaterial:
    """
    Output of catalog resolution for a single extracted material.

    available is True exactly when matched_item is set; match_similarity is 0
    exactly when it is not.
    """
    material: str
    quantity: float
    unit: Unit
    available: bool
    matched_item: Optional[LiveCatalogItem] = None
    match_similarity: float = 0.0
    unit_matched: bool = False
    original_text: Optional[str] = None

    @property
    def catalog_name(self) -> Optional[str]:
        if self.matched_item is None:
            return None
        return self.matched_item.english_name


@dataclass
class OrderLine:
    """An available material priced and point-valued against its catalog item."""
    item: LiveCatalogItem
    quantity: float
    unit: Unit
    points: float
    price: float


@dataclass
class PipelineResult:
    transcription: str
    extracted_materials: list[ExtractedMaterial] = field(default_factory=list)
    verified_materials: list[VerifiedMaterial] = field(default_factory=list)


@dataclass
class PipelineRun:
    """Observable state of one invocation. Each call owns its own run."""
    stage: PipelineStage = PipelineStage.IDLE
    error: Optional[str] = None
    history: list[PipelineStage] = field(default_factory=list)

    def advance(self, stage: PipelineStage):
        self.stage = stage
        self.history.append(stage)


def project_name(name, language: str = "en") -> str:
    """
    Reduce a multilingual name to a single string.

    Tries the requested language, then English, then Arabic, then any value.
    Plain strings pass through.
    """
    if not name:
        return ""
    if isinstance(name, str):
        return name
    if isinstance(name, dict):
        for lang in (language, "en", "ar"):
            value = name.get(lang)
            if value:
                return str(value)
        for value in name.values():
            if value:
                return str(value)
        return ""
    return str(name)
