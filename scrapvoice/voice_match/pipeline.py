"""
Pipeline Orchestrator - Audio to verified materials.

    IDLE -> TRANSCRIBING -> EXTRACTING -> VERIFYING -> DONE
                 \\              \\             \\
                  +--------------+-------------+--> FAILED

Stages run strictly in sequence. A failure at any stage ends the run with
FAILED and re-raises; nothing is retried. Cancellation ends the run with
CANCELLED, which is not a failure.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from .errors import TranscriptionError, VoiceMatchError
from .extractor import MaterialExtractor
from .matcher import CatalogResolver
from .models import PipelineResult, PipelineRun, PipelineStage

logger = logging.getLogger(__name__)

# async (audio bytes) -> transcript
TranscribeFn = Callable[[bytes], Awaitable[str]]

DEFAULT_ROLE = "customer"


class PipelineOrchestrator:
    """
    Sequences transcription, extraction, and verification.

    Holds no per-invocation state of its own: every call gets its own
    PipelineRun, so concurrent invocations never share progress. Guarding
    against duplicate submissions is the caller's job.
    """

    def __init__(
        self,
        transcribe: TranscribeFn,
        extractor: MaterialExtractor,
        resolver: CatalogResolver,
    ):
        self._transcribe = transcribe
        self.extractor = extractor
        self.resolver = resolver

    async def process(
        self,
        audio: bytes,
        role: str = DEFAULT_ROLE,
        run: Optional[PipelineRun] = None,
    ) -> PipelineResult:
        """
        Run the full pipeline on recorded audio.

        Args:
            audio: Raw audio bytes
            role: Role whose catalog applies
            run: Optional run object to observe stage changes

        Returns:
            PipelineResult with transcript, extracted, and verified materials

        Raises:
            TranscriptionError, ExtractionTransportError, CatalogFetchError
        """
        run = run if run is not None else PipelineRun()

        async def stages() -> PipelineResult:
            run.advance(PipelineStage.TRANSCRIBING)
            transcription = await self._run_transcription(audio)
            return await self._extract_and_verify(transcription, role, run)

        return await self._guard(stages(), run)

    async def process_transcript(
        self,
        transcript: str,
        role: str = DEFAULT_ROLE,
        run: Optional[PipelineRun] = None,
    ) -> PipelineResult:
        """Run extraction and verification on text the user typed."""
        run = run if run is not None else PipelineRun()
        return await self._guard(self._extract_and_verify(transcript, role, run), run)

    async def _guard(self, stages: Awaitable[PipelineResult], run: PipelineRun) -> PipelineResult:
        try:
            result = await stages
        except asyncio.CancelledError:
            logger.info(f"Pipeline cancelled during {run.stage.value}")
            run.advance(PipelineStage.CANCELLED)
            raise
        except Exception as e:
            logger.error(f"Pipeline failed during {run.stage.value}: {e}")
            run.error = str(e)
            run.advance(PipelineStage.FAILED)
            raise

        run.advance(PipelineStage.DONE)
        return result

    async def _run_transcription(self, audio: bytes) -> str:
        try:
            transcription = await self._transcribe(audio)
        except VoiceMatchError:
            raise
        except Exception as e:
            raise TranscriptionError(f"Failed to transcribe audio: {e}") from e

        transcription = (transcription or "").strip()
        if not transcription:
            raise TranscriptionError("Failed to transcribe audio")

        logger.info(f"Transcription successful ({len(transcription)} chars)")
        return transcription

    async def _extract_and_verify(self, transcription: str, role: str, run: PipelineRun) -> PipelineResult:
        run.advance(PipelineStage.EXTRACTING)
        materials = await self.extractor.extract(transcription)

        run.advance(PipelineStage.VERIFYING)
        verified = await self.resolver.verify(materials, role)

        return PipelineResult(
            transcription=transcription,
            extracted_materials=materials,
            verified_materials=verified,
        )
