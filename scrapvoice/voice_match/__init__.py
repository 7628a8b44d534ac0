# Voice Match: speech-to-inventory resolution
# Siloed module - no imports from the backend service

from .models import (
    Unit,
    PipelineStage,
    CanonicalCatalogEntry,
    ExtractedMaterial,
    LiveCatalogItem,
    VerifiedMaterial,
    OrderLine,
    PipelineResult,
    PipelineRun,
)
from .errors import (
    VoiceMatchError,
    TranscriptionError,
    ExtractionParseError,
    ExtractionTransportError,
    CatalogFetchError,
)
from .config import load_config, Config
from .canon_loader import load_canonical_catalog, CanonicalCatalog, normalize_unit
from .extractor import MaterialExtractor
from .index import build_index, CatalogIndex
from .adapters import CatalogSource, HttpCatalogSource, InMemoryCatalogSource
from .catalog_cache import LiveCatalogCache
from .matcher import CatalogResolver, filter_available, summarize_results
from .pipeline import PipelineOrchestrator

__version__ = "1.0.0"

__all__ = [
    # Models
    "Unit",
    "PipelineStage",
    "CanonicalCatalogEntry",
    "ExtractedMaterial",
    "LiveCatalogItem",
    "VerifiedMaterial",
    "OrderLine",
    "PipelineResult",
    "PipelineRun",
    # Errors
    "VoiceMatchError",
    "TranscriptionError",
    "ExtractionParseError",
    "ExtractionTransportError",
    "CatalogFetchError",
    # Config
    "Config",
    "load_config",
    # Vocabulary
    "load_canonical_catalog",
    "CanonicalCatalog",
    "normalize_unit",
    # Extraction
    "MaterialExtractor",
    # Catalog
    "build_index",
    "CatalogIndex",
    "CatalogSource",
    "HttpCatalogSource",
    "InMemoryCatalogSource",
    "LiveCatalogCache",
    # Resolution
    "CatalogResolver",
    "filter_available",
    "summarize_results",
    # Pipeline
    "PipelineOrchestrator",
]
