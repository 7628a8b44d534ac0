"""
Catalog Index - Fast lookup structures for catalog resolution.

Instead of scoring every catalog item for every extracted material, we
build a lookup dictionary once per catalog refresh:
- by_exact_key: O(1) match on name, name without spaces, singular, plural
- items: flat list for the fuzzy scan when exact lookup misses
"""

from dataclasses import dataclass, field
from typing import Optional

from .models import LiveCatalogItem
from .similarity import normalize_name


@dataclass
class CatalogIndex:
    """
    Indexed live catalog for one role.

    Attributes:
        by_exact_key: Dict mapping name variants -> LiveCatalogItem
            (last write wins for real names; derived variants never overwrite)
        items: All items, in catalog order
        role: Role the catalog was fetched for
    """
    by_exact_key: dict[str, LiveCatalogItem] = field(default_factory=dict)
    items: list[LiveCatalogItem] = field(default_factory=list)
    role: str = ""

    @property
    def item_count(self) -> int:
        return len(self.items)

    def lookup(self, key: str) -> Optional[LiveCatalogItem]:
        """Look up an item by an already-normalized key."""
        return self.by_exact_key.get(key)


def key_variants(name: str) -> list[str]:
    """
    Exact-lookup keys for a catalog name.

    Normalized name, name without spaces, and its singular or plural
    counterpart (strip or append a trailing "s").
    """
    normalized = normalize_name(name)
    if not normalized:
        return []

    variants = [normalized, normalized.replace(" ", "")]
    if normalized.endswith("s"):
        variants.append(normalized[:-1])
    else:
        variants.append(normalized + "s")
    return variants


def build_index(items: list[LiveCatalogItem], role: str = "") -> CatalogIndex:
    """
    Build lookup index from catalog items.

    Args:
        items: Flattened LiveCatalogItems
        role: Role the items belong to

    Returns:
        CatalogIndex with exact-key lookups and the flat item list
    """
    index = CatalogIndex(items=list(items), role=role)

    for item in items:
        variants = key_variants(item.english_name)
        # Real names and their no-space form overwrite; singular/plural
        # variants only fill gaps, so "plastics" never shadows "Plastic"
        for key in variants[:2]:
            index.by_exact_key[key] = item
        for key in variants[2:]:
            index.by_exact_key.setdefault(key, item)

    return index
