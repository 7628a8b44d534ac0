"""
Catalog Resolver - Match extracted materials to live catalog items.

Resolution order for each material:

| Step        | Lookup                               | Similarity     |
|-------------|--------------------------------------|----------------|
| Exact       | normalized name in by_exact_key      | 100            |
| No-space    | name without spaces in by_exact_key  | 95             |
| Fuzzy       | catalog_similarity over all items    | 65-100 or drop |
| No match    | -                                    | 0, unavailable |

When a match is found the catalog's measurement unit is authoritative.
"""

import logging
from typing import Optional

from .catalog_cache import LiveCatalogCache
from .config import ResolutionSettings
from .index import CatalogIndex
from .models import ExtractedMaterial, LiveCatalogItem, OrderLine, Unit, VerifiedMaterial
from .similarity import catalog_similarity, normalize_name, pick_best_candidate

logger = logging.getLogger(__name__)

EXACT_SIMILARITY = 100.0
NO_SPACE_SIMILARITY = 95.0


class CatalogResolver:
    """
    Verifies extracted materials against the role-scoped live catalog.

    The cache is injected; the resolver only reads from it.
    """

    def __init__(self, cache: LiveCatalogCache, settings: Optional[ResolutionSettings] = None):
        self.cache = cache
        self.settings = settings or ResolutionSettings()

    async def verify(self, materials: list[ExtractedMaterial], role: str) -> list[VerifiedMaterial]:
        """
        Resolve each material against the catalog for a role.

        Args:
            materials: Canonical extracted materials
            role: Role whose catalog (prices, points) applies

        Returns:
            One VerifiedMaterial per input, in input order

        Raises:
            CatalogFetchError: If the catalog cannot be loaded. The whole
                batch fails; there are no partial results.
        """
        if not materials:
            return []

        index = await self.cache.get(role)
        results = [self.resolve(material, index) for material in materials]

        summary = summarize_results(results)
        logger.info(f"Verified {summary['total']} material(s) for role {role!r}: "
                    f"{summary['available']} available, {summary['unavailable']} not found")
        return results

    def resolve(self, material: ExtractedMaterial, index: CatalogIndex) -> VerifiedMaterial:
        """Resolve a single material against an already-loaded index."""
        match = self.find_best_match(material.material, index)
        if match is None:
            logger.debug(f"Material not found in catalog: {material.material}")
            return VerifiedMaterial(
                material=material.material,
                quantity=material.quantity,
                unit=material.unit,
                available=False,
                matched_item=None,
                match_similarity=0.0,
                unit_matched=False,
                original_text=material.original_text,
            )

        item, similarity = match
        catalog_unit = item.unit
        unit_matched = material.unit == catalog_unit
        quantity = material.quantity
        if not unit_matched:
            logger.warning(f"Unit mismatch for {material.material}: "
                           f"extracted={material.unit.value}, catalog={catalog_unit.value}")
            if catalog_unit == Unit.PIECE:
                quantity = float(max(1, round(quantity)))

        logger.debug(f"Material verified: {material.material} -> {item.english_name} ({similarity}% match)")
        return VerifiedMaterial(
            material=material.material,
            quantity=quantity,
            unit=catalog_unit,
            available=True,
            matched_item=item,
            match_similarity=similarity,
            unit_matched=unit_matched,
            original_text=material.original_text,
        )

    def find_best_match(self, name: str, index: CatalogIndex) -> Optional[tuple[LiveCatalogItem, float]]:
        """
        Exact pass, then fuzzy pass with tie-breaking.

        Returns:
            (item, similarity) or None if nothing reaches the threshold
        """
        normalized = normalize_name(name)
        if not normalized:
            return None

        item = index.lookup(normalized)
        if item is not None:
            return item, EXACT_SIMILARITY

        item = index.lookup(normalized.replace(" ", ""))
        if item is not None:
            return item, NO_SPACE_SIMILARITY

        candidates = []
        for item in index.items:
            score = catalog_similarity(normalized, item.english_name)
            if score >= self.settings.similarity_threshold:
                candidates.append((score, item.english_name, item))

        best = pick_best_candidate(
            candidates,
            query=normalized,
            window=self.settings.tie_break_window,
            min_gap=self.settings.tie_break_min_gap,
        )
        if best is None:
            return None

        score, _, item = best
        return item, score


def filter_available(results: list[VerifiedMaterial]) -> list[OrderLine]:
    """Price and point-value the available materials for the order builder."""
    lines = []
    for result in results:
        if not result.available or result.matched_item is None:
            continue
        item = result.matched_item
        lines.append(OrderLine(
            item=item,
            quantity=result.quantity,
            unit=result.unit,
            points=round(item.points * result.quantity, 2),
            price=round(item.price * result.quantity, 2),
        ))
    return lines


def summarize_results(results: list[VerifiedMaterial]) -> dict:
    """Generate summary statistics for verification results."""
    lines = filter_available(results)
    available = len(lines)
    return {
        "total": len(results),
        "available": available,
        "unavailable": len(results) - available,
        "unit_mismatches": sum(1 for r in results if r.available and not r.unit_matched),
        "total_points": round(sum(line.points for line in lines), 2),
        "total_price": round(sum(line.price for line in lines), 2),
    }
