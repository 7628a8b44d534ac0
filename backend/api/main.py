import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.core.config import settings
from backend.api.routers import voice_router

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle - startup and shutdown."""
    if not settings.GROQ_API_KEY:
        logger.warning("GROQ_API_KEY is not set; material extraction requests will fail")
    yield  # Application runs here


app = FastAPI(title="ScrapVoice Material Matching", version=VERSION, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(voice_router)


@app.get("/api/health")
def health_check():
    return {
        "status": "ok",
        "version": VERSION,
        "llm_configured": bool(settings.GROQ_API_KEY),
    }
