"""
Voice match API router.
"""
import logging
from typing import Optional

from fastapi import APIRouter, File, Form, HTTPException, Query, UploadFile

from backend.api.models import (
    CatalogItemModel,
    ExtractedMaterialModel,
    ExtractRequest,
    OrderLineModel,
    ProcessResponse,
    VerificationSummary,
    VerifiedMaterialModel,
)
from backend.core.config import settings
from backend.core.llm import extraction_completion
from backend.core.transcription import transcribe

from scrapvoice.voice_match import (
    CatalogResolver,
    HttpCatalogSource,
    LiveCatalogCache,
    LiveCatalogItem,
    MaterialExtractor,
    PipelineOrchestrator,
    PipelineResult,
    VoiceMatchError,
    filter_available,
    load_canonical_catalog,
    load_config,
    summarize_results,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/voice", tags=["Voice Match"])

# Global state for voice match (built on first use)
_voice_match_state = {
    "config": None,
    "cache": None,
    "pipeline": None,
    "initialized": False,
}


def _init_voice_match() -> dict:
    """Build pipeline components if not already done."""
    if _voice_match_state["initialized"]:
        return _voice_match_state

    config = load_config(settings.MATCH_CONFIG_PATH or None)
    source = HttpCatalogSource(
        settings.BACKEND_API_URL,
        token=settings.BACKEND_API_TOKEN or None,
        page_size=config.catalog.page_size,
        max_pages=config.catalog.max_pages,
        timeout=settings.HTTP_TIMEOUT_SECONDS,
    )
    cache = LiveCatalogCache(source, ttl_seconds=config.catalog.cache_ttl_seconds)
    extractor = MaterialExtractor(load_canonical_catalog(), extraction_completion, config.extraction)
    resolver = CatalogResolver(cache, config.resolution)

    _voice_match_state["config"] = config
    _voice_match_state["cache"] = cache
    _voice_match_state["pipeline"] = PipelineOrchestrator(transcribe, extractor, resolver)
    _voice_match_state["initialized"] = True
    logger.info("Voice match pipeline initialized")
    return _voice_match_state


def _item_model(item: LiveCatalogItem) -> CatalogItemModel:
    return CatalogItemModel(
        id=item.id,
        name=item.name,
        english_name=item.english_name,
        category_id=item.category_id,
        category_name=item.category_name,
        measurement_unit=item.measurement_unit,
        points=item.points,
        price=item.price,
        image=item.image,
    )


def _to_response(result: PipelineResult) -> ProcessResponse:
    verified = result.verified_materials
    return ProcessResponse(
        transcription=result.transcription,
        extracted_materials=[
            ExtractedMaterialModel(
                material=m.material,
                quantity=m.quantity,
                unit=m.unit.value,
                original_text=m.original_text,
            )
            for m in result.extracted_materials
        ],
        verified_materials=[
            VerifiedMaterialModel(
                material=v.material,
                quantity=v.quantity,
                unit=v.unit.value,
                available=v.available,
                matched_item=_item_model(v.matched_item) if v.matched_item else None,
                match_similarity=v.match_similarity,
                unit_matched=v.unit_matched,
                original_text=v.original_text,
            )
            for v in verified
        ],
        order_lines=[
            OrderLineModel(
                item=_item_model(line.item),
                quantity=line.quantity,
                unit=line.unit.value,
                points=line.points,
                price=line.price,
            )
            for line in filter_available(verified)
        ],
        summary=VerificationSummary(**summarize_results(verified)),
    )


def _check_role(role: str) -> str:
    role = role.strip().lower()
    if role not in settings.CATALOG_ROLES:
        raise HTTPException(status_code=400, detail=f"Unknown role: {role}")
    return role


def _stage_failure(error: VoiceMatchError) -> HTTPException:
    return HTTPException(status_code=502, detail={"stage": error.stage, "message": str(error)})


@router.post("/process", response_model=ProcessResponse)
async def process_recording(
    audio: UploadFile = File(...),
    role: str = Form("customer"),
):
    """Transcribe a recording and resolve the materials it mentions."""
    role = _check_role(role)
    state = _init_voice_match()
    content = await audio.read()
    if not content:
        raise HTTPException(status_code=400, detail="Empty audio upload")

    try:
        result = await state["pipeline"].process(content, role=role)
    except VoiceMatchError as e:
        raise _stage_failure(e)
    return _to_response(result)


@router.post("/extract", response_model=ProcessResponse)
async def process_text(request: ExtractRequest):
    """Resolve materials from typed text, skipping transcription."""
    role = _check_role(request.role)
    state = _init_voice_match()
    try:
        result = await state["pipeline"].process_transcript(request.transcript, role=role)
    except VoiceMatchError as e:
        raise _stage_failure(e)
    return _to_response(result)


@router.delete("/catalog-cache")
def clear_catalog_cache(role: Optional[str] = Query(None)):
    """Drop cached catalog indexes (one role, or all)."""
    state = _init_voice_match()
    cache: LiveCatalogCache = state["cache"]
    if role:
        role = _check_role(role)
        cache.invalidate(role)
    else:
        cache.clear()
    return {"success": True, "role": role}
