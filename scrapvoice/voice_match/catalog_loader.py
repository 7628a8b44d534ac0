"""
Catalog Loader - Parse the categories API into LiveCatalogItems.

The categories endpoint has answered with three shapes over time:

    [ {category}, ... ]
    {"data": [ {category}, ... ]}
    {"categories": [ {category}, ... ]}

and each category carries its items under either "items" or
"subcategories". The ambiguity is resolved here, once; everything
downstream sees a flat list[LiveCatalogItem].
"""

import logging
from typing import Optional

from .errors import CatalogFetchError
from .models import LiveCatalogItem, project_name

logger = logging.getLogger(__name__)


def unwrap_categories(payload) -> list[dict]:
    """
    Resolve a categories response to its list of category dicts.

    Raises:
        CatalogFetchError: If the payload matches none of the known shapes
    """
    if isinstance(payload, list):
        categories = payload
    elif isinstance(payload, dict) and isinstance(payload.get("data"), list):
        categories = payload["data"]
    elif isinstance(payload, dict) and isinstance(payload.get("categories"), list):
        categories = payload["categories"]
    else:
        raise CatalogFetchError("Invalid response format from categories API")

    return [c for c in categories if isinstance(c, dict)]


def _multilingual(value) -> dict:
    """Normalize a name field to a {lang: text} dict."""
    if isinstance(value, dict):
        return {str(k): str(v) for k, v in value.items() if v}
    if isinstance(value, str) and value.strip():
        return {"en": value.strip()}
    return {}


def _parse_number(value, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _parse_measurement_unit(value) -> int:
    """Catalog unit code; 'KG' strings from older payloads map to 1."""
    if isinstance(value, str) and value.strip().lower() == "kg":
        return 1
    try:
        return int(value)
    except (TypeError, ValueError):
        return 2


def _parse_item(row: dict, category: dict) -> Optional[LiveCatalogItem]:
    """Parse one item/subcategory row. Returns None for rows without a name."""
    name = _multilingual(row.get("name"))
    if not project_name(name):
        return None

    item_id = row.get("_id", row.get("id"))
    category_id = category.get("_id", category.get("id"))

    return LiveCatalogItem(
        id=str(item_id) if item_id is not None else project_name(name),
        name=name,
        category_id=str(category_id) if category_id is not None else None,
        category_name=_multilingual(category.get("name")),
        measurement_unit=_parse_measurement_unit(row.get("measurement_unit")),
        points=_parse_number(row.get("points")),
        price=_parse_number(row.get("price")),
        image=str(row.get("image") or ""),
    )


def flatten_categories(categories: list[dict]) -> list[LiveCatalogItem]:
    """
    Flatten categories into a single item list.

    Args:
        categories: Category dicts from unwrap_categories

    Returns:
        LiveCatalogItems in catalog order
    """
    items = []
    for category in categories:
        rows = category.get("items")
        if not isinstance(rows, list):
            rows = category.get("subcategories")
        if not isinstance(rows, list):
            logger.debug(f"Category {project_name(category.get('name'))!r} has no items")
            continue

        for row in rows:
            if not isinstance(row, dict):
                continue
            item = _parse_item(row, category)
            if item is None:
                logger.debug(f"Skipping unnamed catalog row: {row!r}")
                continue
            items.append(item)

    return items
