"""
Test configuration and fixtures for the ScrapVoice backend test suite.

Provides:
- A voice match pipeline wired to fakes (no ASR, LLM, or catalog backend)
- FastAPI TestClient fixture with that pipeline patched in
- A factory for catalog payloads
"""
import json
from typing import Optional
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from scrapvoice.voice_match import (
    CatalogResolver,
    InMemoryCatalogSource,
    LiveCatalogCache,
    MaterialExtractor,
    PipelineOrchestrator,
    load_canonical_catalog,
    load_config,
)


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------

class FakeServices:
    """
    Programmable stand-ins for transcription and the language model.

    Set `transcript` / `reply` to control output, or arm
    `transcribe_error` / `llm_error` to simulate failures.
    """

    def __init__(self):
        self.transcript = "3 كيلو بلاستيك و 2 كراسي"
        self.reply = {"items": [
            {"material": "Plastics", "originalText": "بلاستيك", "quantity": 3, "unit": "KG"},
            {"material": "Chair", "originalText": "كراسي", "quantity": 2, "unit": "piece"},
        ]}
        self.transcribe_error: Optional[Exception] = None
        self.llm_error: Optional[Exception] = None
        self.audio_received = []

    async def transcribe(self, audio: bytes) -> str:
        self.audio_received.append(audio)
        if self.transcribe_error is not None:
            raise self.transcribe_error
        return self.transcript

    async def complete(self, system: str, prompt: str) -> str:
        if self.llm_error is not None:
            raise self.llm_error
        return json.dumps(self.reply, ensure_ascii=False)


def make_catalog_payload(
    plastics_price: float = 2.5,
    include_chair: bool = True,
) -> dict:
    """Build a categories API payload in the {"data": [...]} shape."""
    categories = [{
        "_id": "cat-plastic",
        "name": {"en": "Plastic", "ar": "بلاستيك"},
        "items": [{
            "_id": "item-plastics",
            "name": {"en": "Plastics", "ar": "بلاستيك"},
            "measurement_unit": 1,
            "points": 10,
            "price": plastics_price,
            "image": "plastics.png",
        }],
    }]
    if include_chair:
        categories.append({
            "_id": "cat-furniture",
            "name": {"en": "Furniture", "ar": "أثاث"},
            "subcategories": [{
                "_id": "item-chair",
                "name": {"en": "Chair", "ar": "كرسي"},
                "measurement_unit": 2,
                "points": 50,
                "price": 20,
            }],
        })
    return {"data": categories}


# ---------------------------------------------------------------------------
# Pipeline fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def services():
    return FakeServices()


@pytest.fixture()
def catalog_payload():
    """Factory fixture for categories payloads."""
    return make_catalog_payload


@pytest.fixture()
def catalog_source():
    return InMemoryCatalogSource(make_catalog_payload())


@pytest.fixture()
def voice_state(services, catalog_source):
    """
    Patch the router's lazily-built state with a pipeline wired to fakes.
    """
    config = load_config()
    cache = LiveCatalogCache(catalog_source, ttl_seconds=config.catalog.cache_ttl_seconds)
    extractor = MaterialExtractor(load_canonical_catalog(), services.complete, config.extraction)
    resolver = CatalogResolver(cache, config.resolution)
    state = {
        "config": config,
        "cache": cache,
        "pipeline": PipelineOrchestrator(services.transcribe, extractor, resolver),
        "initialized": True,
    }

    with patch.dict("backend.api.routers.voice._voice_match_state", state):
        yield state


@pytest.fixture()
def client(voice_state):
    """
    Provide a FastAPI TestClient with the voice pipeline patched.
    """
    from backend.api.main import app

    with TestClient(app) as c:
        yield c
