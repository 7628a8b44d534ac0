"""
Configuration for the voice-to-inventory pipeline.

The similarity thresholds and cache windows are empirical, hand-tuned values.
They live in declarative JSON (match_config.json) so they can be tuned
without touching the code.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

DEFAULT_CONFIG_PATH = Path(__file__).parent / "match_config.json"


@dataclass
class ExtractionSettings:
    """Settings for canonicalizing model output against the vocabulary."""
    vocabulary_threshold: float = 80
    tie_window: float = 5


@dataclass
class ResolutionSettings:
    """Settings for matching extracted materials to live catalog items."""
    similarity_threshold: float = 65
    tie_break_window: float = 8
    tie_break_min_gap: float = 3


@dataclass
class CatalogSettings:
    """Settings for fetching and caching the live catalog."""
    cache_ttl_seconds: float = 300
    page_size: int = 100
    max_pages: int = 50


@dataclass
class Config:
    """Full configuration for the pipeline."""
    extraction: ExtractionSettings = field(default_factory=ExtractionSettings)
    resolution: ResolutionSettings = field(default_factory=ResolutionSettings)
    catalog: CatalogSettings = field(default_factory=CatalogSettings)


def _section(cls, data: dict):
    """Build a settings dataclass from a dict, ignoring unknown keys."""
    known = {name for name in cls.__dataclass_fields__}
    return cls(**{k: v for k, v in (data or {}).items() if k in known})


def load_config(config_path: Optional[str | Path] = None) -> Config:
    """
    Load pipeline configuration from a JSON file.

    Args:
        config_path: Path to a match_config.json (defaults to the bundled one)

    Returns:
        Config with extraction, resolution, and catalog settings. Missing
        sections or keys keep their defaults.
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    return Config(
        extraction=_section(ExtractionSettings, data.get("extraction")),
        resolution=_section(ResolutionSettings, data.get("resolution")),
        catalog=_section(CatalogSettings, data.get("catalog")),
    )
