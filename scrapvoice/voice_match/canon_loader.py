"""
Canon Loader - The fixed bilingual material vocabulary.

The vocabulary is the closed world the extractor works in: anything the
language model reports that does not resolve to an entry here is dropped.
Built once at startup from materials.json:

    {"Plastics": {"arname": "بلاستيك", "unit": "KG"}, ...}
"""

import json
from pathlib import Path
from typing import Optional

from .models import CanonicalCatalogEntry, Unit
from .similarity import normalize_name

DEFAULT_MATERIALS_PATH = Path(__file__).parent / "materials.json"

# Free-form unit tokens that mean kilograms; everything else is a piece count
KG_UNIT_TOKENS = {
    "kg", "kgs", "kilo", "kilos", "kilogram", "kilograms", "kilogramme", "kilogrammes",
    "كيلو", "كجم", "كغ", "كيلوجرام", "كيلوغرام",
}


def normalize_unit(unit) -> Unit:
    """Map a free-form unit token to KG or PIECE."""
    if isinstance(unit, Unit):
        return unit
    token = normalize_name(str(unit or ""))
    if token in KG_UNIT_TOKENS:
        return Unit.KG
    return Unit.PIECE


class CanonicalCatalog:
    """
    In-memory bilingual lookup over the material vocabulary.

    Provides exact lookups by English key or Arabic name, and the combined
    candidate list used for fuzzy matching.
    """

    def __init__(self, entries: list[CanonicalCatalogEntry]):
        self._by_key: dict[str, CanonicalCatalogEntry] = {}
        self._by_arabic: dict[str, CanonicalCatalogEntry] = {}

        for entry in entries:
            if entry.key in self._by_key:
                raise ValueError(f"Duplicate material name in vocabulary: {entry.name}")
            if entry.arabic_name in self._by_arabic:
                raise ValueError(f"Duplicate Arabic name in vocabulary: {entry.arabic_name}")
            self._by_key[entry.key] = entry
            self._by_arabic[entry.arabic_name] = entry

    def __len__(self) -> int:
        return len(self._by_key)

    def __contains__(self, name: str) -> bool:
        return self.lookup(name) is not None

    @property
    def entries(self) -> list[CanonicalCatalogEntry]:
        return list(self._by_key.values())

    def lookup(self, name: str) -> Optional[CanonicalCatalogEntry]:
        """Exact, case-insensitive English lookup."""
        if not name:
            return None
        return self._by_key.get(name.strip().lower())

    def from_arabic(self, name: str) -> Optional[CanonicalCatalogEntry]:
        """Exact Arabic lookup."""
        if not name:
            return None
        return self._by_arabic.get(name.strip())

    def candidate_names(self) -> list[str]:
        """English keys and Arabic names, interleaved per entry."""
        names = []
        for entry in self._by_key.values():
            names.append(entry.key)
            names.append(entry.arabic_name)
        return names

    def resolve_candidate(self, candidate: str) -> Optional[CanonicalCatalogEntry]:
        """Map a candidate name (English key or Arabic) back to its entry."""
        return self.lookup(candidate) or self.from_arabic(candidate)


def load_canonical_catalog(materials_path: Optional[str | Path] = None) -> CanonicalCatalog:
    """
    Load the material vocabulary from JSON.

    Args:
        materials_path: Path to a materials JSON file (defaults to the bundled one)

    Returns:
        CanonicalCatalog ready for lookups

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If names are duplicated or an entry has no Arabic name
    """
    path = Path(materials_path) if materials_path else DEFAULT_MATERIALS_PATH
    if not path.exists():
        raise FileNotFoundError(f"Materials file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    entries = []
    for name, info in data.items():
        arabic_name = str(info.get("arname") or "").strip()
        if not arabic_name:
            raise ValueError(f"Material {name!r} has no Arabic name")
        entries.append(CanonicalCatalogEntry(
            name=name.strip(),
            arabic_name=arabic_name,
            default_unit=normalize_unit(info.get("unit")),
        ))

    return CanonicalCatalog(entries)
