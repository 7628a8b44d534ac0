"""
Shared fixtures for voice match tests.

Provides:
- The bundled vocabulary
- A sample catalog payload covering both items[] and subcategories[] shapes
- Fakes for the language model and the clock
"""

import copy
import json

import pytest

from scrapvoice.voice_match.adapters import InMemoryCatalogSource
from scrapvoice.voice_match.canon_loader import load_canonical_catalog
from scrapvoice.voice_match.catalog_cache import LiveCatalogCache
from scrapvoice.voice_match.extractor import MaterialExtractor
from scrapvoice.voice_match.matcher import CatalogResolver


SAMPLE_CATEGORIES = {
    "data": [
        {
            "_id": "cat-plastic",
            "name": {"en": "Plastic", "ar": "بلاستيك"},
            "items": [
                {"_id": "i1", "name": {"en": "Plastics", "ar": "بلاستيك"},
                 "measurement_unit": 1, "points": 10, "price": 2.5, "image": "plastics.png"},
                {"_id": "i2", "name": {"en": "Plastic Bottles", "ar": "زجاجات بلاستيك"},
                 "measurement_unit": 1, "points": 12, "price": 3.0, "image": "bottles.png"},
            ],
        },
        {
            "_id": "cat-furniture",
            "name": {"en": "Furniture", "ar": "أثاث"},
            "subcategories": [
                {"_id": "i3", "name": {"en": "Chair", "ar": "كرسي"},
                 "measurement_unit": 2, "points": 50, "price": 20},
                {"_id": "i4", "name": {"en": "Office Chair", "ar": "كرسي مكتب"},
                 "measurement_unit": 2, "points": 70, "price": 30},
            ],
        },
        {
            "_id": "cat-metal",
            "name": {"en": "Metal", "ar": "معادن"},
            "items": [
                {"_id": "i5", "name": {"en": "Aluminum Cans"},
                 "measurement_unit": 1, "points": 25, "price": 8},
                {"_id": "i6", "name": {"en": "Copper Wire"},
                 "measurement_unit": 1, "points": 40, "price": 15},
            ],
        },
        {
            "_id": "cat-paper",
            "name": "Paper",
            "items": [
                {"id": "i9", "name": "Cardboard", "measurement_unit": 1, "points": 5, "price": 1},
            ],
        },
        {
            "_id": "cat-electronics",
            "name": {"en": "Electronics", "ar": "إلكترونيات"},
            "items": [
                {"_id": "i7", "name": {"en": "Washing Machine", "ar": "غسالة"},
                 "measurement_unit": 2, "points": 100, "price": 60},
                {"_id": "i8", "name": {"en": "Mobile Phones", "ar": "موبايلات"},
                 "measurement_unit": 2, "points": 30, "price": 12},
            ],
        },
    ]
}


class FakeCompletion:
    """
    Stand-in for the language model.

    Returns a fixed reply (dicts are JSON-encoded) and records every call.
    Arm `error` to simulate a transport failure.
    """

    def __init__(self, reply=None):
        self.reply = reply if reply is not None else {"items": []}
        self.error = None
        self.calls = []

    async def __call__(self, system: str, prompt: str) -> str:
        self.calls.append((system, prompt))
        if self.error is not None:
            raise self.error
        if isinstance(self.reply, str):
            return self.reply
        return json.dumps(self.reply, ensure_ascii=False)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def catalog():
    return load_canonical_catalog()


@pytest.fixture
def sample_categories():
    return copy.deepcopy(SAMPLE_CATEGORIES)


@pytest.fixture
def completion():
    return FakeCompletion()


@pytest.fixture
def extractor(catalog, completion):
    return MaterialExtractor(catalog, completion)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def source(sample_categories):
    return InMemoryCatalogSource(sample_categories)


@pytest.fixture
def cache(source, clock):
    return LiveCatalogCache(source, ttl_seconds=300, clock=clock)


@pytest.fixture
def resolver(cache):
    return CatalogResolver(cache)
