"""
Tests for the bilingual material vocabulary.

Run with: pytest scrapvoice/voice_match/tests/test_canon_loader.py -v
"""

import json

import pytest

from scrapvoice.voice_match.models import CanonicalCatalogEntry, Unit
from scrapvoice.voice_match.canon_loader import (
    CanonicalCatalog,
    load_canonical_catalog,
    normalize_unit,
)


class TestNormalizeUnit:

    @pytest.mark.parametrize("token", ["KG", "kg", "Kilo", "kilograms", " kgs ", "كيلو", "كجم",
                                       "kg.", "KGs.", "k.g.", "kilogrammes", "Kilogramme"])
    def test_kg_tokens(self, token):
        assert normalize_unit(token) == Unit.KG

    @pytest.mark.parametrize("token", ["piece", "pieces", "PIECE", "قطعة", "bag", "", None])
    def test_everything_else_is_piece(self, token):
        assert normalize_unit(token) == Unit.PIECE

    def test_unit_passes_through(self):
        assert normalize_unit(Unit.KG) == Unit.KG


class TestBundledVocabulary:
    """Test the shipped materials.json."""

    def test_loads(self, catalog):
        assert len(catalog) >= 30

    def test_english_keys_unique(self, catalog):
        keys = [entry.key for entry in catalog.entries]
        assert len(keys) == len(set(keys))

    def test_arabic_names_unique(self, catalog):
        names = [entry.arabic_name for entry in catalog.entries]
        assert len(names) == len(set(names))

    def test_default_units(self, catalog):
        assert catalog.lookup("Plastics").default_unit == Unit.KG
        assert catalog.lookup("Chair").default_unit == Unit.PIECE
        assert catalog.lookup("Iron").default_unit == Unit.PIECE

    def test_lookup_is_case_insensitive(self, catalog):
        entry = catalog.lookup("  PLASTICS ")
        assert entry is not None
        assert entry.name == "Plastics"

    def test_from_arabic(self, catalog):
        assert catalog.from_arabic("بلاستيك").name == "Plastics"
        assert catalog.from_arabic("كرسي").name == "Chair"
        assert catalog.from_arabic("مكواة").name == "Iron"

    def test_lookup_misses(self, catalog):
        assert catalog.lookup("unicorn") is None
        assert catalog.lookup("") is None
        assert catalog.from_arabic("") is None
        assert "unicorn" not in catalog
        assert "chair" in catalog

    def test_candidate_names_cover_both_languages(self, catalog):
        names = catalog.candidate_names()
        assert "plastics" in names
        assert "بلاستيك" in names
        assert len(names) == 2 * len(catalog)

    def test_resolve_candidate(self, catalog):
        assert catalog.resolve_candidate("chair").name == "Chair"
        assert catalog.resolve_candidate("كرسي").name == "Chair"
        assert catalog.resolve_candidate("nothing") is None


class TestCatalogConstruction:

    def test_duplicate_english_name_rejected(self):
        entries = [
            CanonicalCatalogEntry("Chair", "كرسي", Unit.PIECE),
            CanonicalCatalogEntry("CHAIR", "كراسي", Unit.PIECE),
        ]
        with pytest.raises(ValueError, match="Duplicate material name"):
            CanonicalCatalog(entries)

    def test_duplicate_arabic_name_rejected(self):
        entries = [
            CanonicalCatalogEntry("Chair", "كرسي", Unit.PIECE),
            CanonicalCatalogEntry("Stool", "كرسي", Unit.PIECE),
        ]
        with pytest.raises(ValueError, match="Duplicate Arabic name"):
            CanonicalCatalog(entries)


class TestLoadCanonicalCatalog:

    def test_custom_file(self, tmp_path):
        path = tmp_path / "materials.json"
        path.write_text(json.dumps({
            "Paper": {"arname": "ورق", "unit": "KG"},
            "Fan": {"arname": "مروحة", "unit": "piece"},
            "Sofa": {"arname": "كنبة"},
        }, ensure_ascii=False), encoding="utf-8")

        catalog = load_canonical_catalog(path)

        assert len(catalog) == 3
        assert catalog.lookup("paper").default_unit == Unit.KG
        assert catalog.lookup("fan").default_unit == Unit.PIECE
        assert catalog.lookup("sofa").default_unit == Unit.PIECE

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_canonical_catalog(tmp_path / "missing.json")

    def test_missing_arabic_name(self, tmp_path):
        path = tmp_path / "materials.json"
        path.write_text(json.dumps({"Paper": {"unit": "KG"}}), encoding="utf-8")

        with pytest.raises(ValueError, match="no Arabic name"):
            load_canonical_catalog(path)
