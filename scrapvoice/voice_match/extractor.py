"""
Material Extractor - Transcript to structured, canonical materials.

The language model does the heavy lifting on noisy mixed Arabic/English
speech, but its output is never trusted as-is:

1. The system prompt restricts it to the known vocabulary and a strict JSON shape
2. Every reported material is snapped back onto the vocabulary (exact, then fuzzy)
3. Units and quantities are normalized; duplicates are merged

Malformed model output degrades to an empty extraction. Transport failures
propagate.
"""

import json
import logging
import math
from typing import Awaitable, Callable, Optional

from .canon_loader import CanonicalCatalog, normalize_unit
from .config import ExtractionSettings
from .errors import ExtractionParseError, ExtractionTransportError
from .models import CanonicalCatalogEntry, ExtractedMaterial, Unit
from .similarity import best_vocabulary_match

logger = logging.getLogger(__name__)

# async (system_prompt, user_content) -> raw model text
CompletionFn = Callable[[str, str], Awaitable[str]]

ARABIC_INDIC_DIGITS = str.maketrans("٠١٢٣٤٥٦٧٨٩٫", "0123456789.")

PROMPT_TEMPLATE = """\
You are a professional AI assistant for a recycling app. Extract a list of materials, their quantities, and units from noisy, possibly misspelled, Arabic or English speech transcriptions.

Rules:
- CRITICAL: Only return valid JSON in this exact format:
{{
  "items": [
    {{
      "material": "English name here",
      "originalText": "Original text from transcription if different from English name",
      "quantity": float,
      "unit": "KG" | "piece"
    }}
  ]
}}
- If you do not follow this, the system will fail.
- Only use materials from the provided list (see below). If a material is not in the list, ignore it.
- If a material appears multiple times, merge them and sum their quantities.
- For each material, use the canonical English name from the list.
- Include "originalText" with the original Arabic/transcribed text if the input was not in English.
- If the unit is missing or ambiguous, use the default unit for that material from the list.
- Accept both Arabic and English names, and be robust to typos and variants.
- If the quantity is missing, assume 1.
- Accept both singular and plural units ("piece", "pieces", "KG").
- Do not output any explanation, only the JSON object.

Material List (English name, Arabic name, unit):
{vocabulary}

Example:
Input: "3 كيلو بلاستيك و 2 كراسي و مكواة"
Output: {{
  "items": [
    {{ "material": "Plastics", "originalText": "بلاستيك", "quantity": 3, "unit": "KG" }},
    {{ "material": "Chair", "originalText": "كراسي", "quantity": 2, "unit": "piece" }},
    {{ "material": "Iron", "originalText": "مكواة", "quantity": 1, "unit": "piece" }}
  ]
}}
"""


def _unit_label(unit: Unit) -> str:
    return "KG" if unit == Unit.KG else "piece"


def build_system_prompt(catalog: CanonicalCatalog) -> str:
    """Render the constrained-vocabulary system prompt."""
    vocabulary = "\n".join(
        f"- {entry.name} ({entry.arabic_name}) [{_unit_label(entry.default_unit)}]"
        for entry in catalog.entries
    )
    return PROMPT_TEMPLATE.format(vocabulary=vocabulary)


def parse_extraction_response(raw_content: Optional[str]) -> list[dict]:
    """
    Pull the raw item list out of the model's reply.

    Accepts a bare JSON array, {"items": [...]}, or {"materials": [...]}.

    Raises:
        ExtractionParseError: If the content is empty, not JSON, or has no item array
    """
    if not raw_content or not raw_content.strip():
        raise ExtractionParseError("Empty response from language model")

    try:
        data = json.loads(raw_content)
    except json.JSONDecodeError as e:
        raise ExtractionParseError(f"Response is not valid JSON: {e}") from e

    if isinstance(data, list):
        items = data
    elif isinstance(data, dict) and isinstance(data.get("items"), list):
        items = data["items"]
    elif isinstance(data, dict) and isinstance(data.get("materials"), list):
        items = data["materials"]
    else:
        raise ExtractionParseError("Response has no items or materials array")

    return [item for item in items if isinstance(item, dict)]


def parse_quantity(value) -> float:
    """
    Coerce a model-reported quantity to a positive number.

    Numbers and numeric strings (including Arabic-Indic digits) are accepted.
    Missing, non-numeric, or non-positive values become 1.
    """
    if isinstance(value, bool):
        return 1.0
    if isinstance(value, (int, float)):
        quantity = float(value)
    elif isinstance(value, str):
        try:
            quantity = float(value.strip().translate(ARABIC_INDIC_DIGITS))
        except ValueError:
            return 1.0
    else:
        return 1.0

    if not math.isfinite(quantity) or quantity <= 0:
        return 1.0
    return quantity


def _original_text(value) -> Optional[str]:
    """Transcript fragment as reported by the model; non-strings are discarded."""
    if not isinstance(value, str) or not value.strip():
        return None
    return value.strip()


def round_pieces(quantity: float) -> float:
    """Piece counts are whole numbers, at least one."""
    return float(max(1, round(quantity)))


class MaterialExtractor:
    """
    Turns a transcript into canonical ExtractedMaterial records.

    The language model is injected as an async callable so the extractor
    doesn't know or care which provider is behind it.
    """

    def __init__(
        self,
        catalog: CanonicalCatalog,
        complete: CompletionFn,
        settings: Optional[ExtractionSettings] = None,
    ):
        self.catalog = catalog
        self._complete = complete
        self.settings = settings or ExtractionSettings()
        self.system_prompt = build_system_prompt(catalog)
        self._candidates = catalog.candidate_names()

    async def extract(self, transcript: str) -> list[ExtractedMaterial]:
        """
        Extract canonical materials from a transcript.

        Returns:
            One ExtractedMaterial per (material, unit), in order of first mention.
            Empty if the transcript is blank or the model output is unusable.

        Raises:
            ExtractionTransportError: If the language model call fails
        """
        if not transcript or not transcript.strip():
            return []

        logger.info(f"Extracting materials from transcript ({len(transcript)} chars)")
        try:
            raw_content = await self._complete(self.system_prompt, f"Input: {transcript}")
        except ExtractionTransportError:
            raise
        except Exception as e:
            raise ExtractionTransportError(f"Material extraction failed: {e}") from e

        try:
            raw_items = parse_extraction_response(raw_content)
        except ExtractionParseError as e:
            logger.warning(f"Discarding unusable model output: {e}")
            return []

        materials = self.canonicalize(raw_items)
        logger.info(f"Extracted {len(materials)} material(s) from {len(raw_items)} raw item(s)")
        return materials

    def canonicalize(self, raw_items: list[dict]) -> list[ExtractedMaterial]:
        """
        Snap raw model items onto the vocabulary and merge duplicates.

        Items whose material does not resolve are dropped.
        """
        merged: dict[tuple[str, Unit], ExtractedMaterial] = {}

        for raw in raw_items:
            raw_name = raw.get("material")
            if not isinstance(raw_name, str) or not raw_name.strip():
                continue

            entry = self.map_to_canonical(raw_name)
            if entry is None:
                logger.debug(f"Dropping out-of-vocabulary material: {raw_name!r}")
                continue

            unit = normalize_unit(raw["unit"]) if raw.get("unit") else entry.default_unit
            quantity = parse_quantity(raw.get("quantity"))
            if unit == Unit.PIECE:
                quantity = round_pieces(quantity)

            original_text = _original_text(raw.get("originalText"))
            key = (entry.name, unit)
            existing = merged.get(key)
            if existing is not None:
                existing.quantity += quantity
                if original_text and not existing.original_text:
                    existing.original_text = original_text
            else:
                merged[key] = ExtractedMaterial(
                    material=entry.name,
                    quantity=quantity,
                    unit=unit,
                    original_text=original_text,
                )

        return list(merged.values())

    def map_to_canonical(self, raw_name: str) -> Optional[CanonicalCatalogEntry]:
        """Exact English, exact Arabic, then fuzzy over both name lists."""
        entry = self.catalog.lookup(raw_name) or self.catalog.from_arabic(raw_name)
        if entry is not None:
            return entry

        match = best_vocabulary_match(
            raw_name,
            self._candidates,
            threshold=self.settings.vocabulary_threshold,
            tie_window=self.settings.tie_window,
        )
        if match is None:
            return None

        candidate, score = match
        logger.debug(f"Fuzzy vocabulary match {raw_name!r} -> {candidate!r} ({score:.0f})")
        return self.catalog.resolve_candidate(candidate)
