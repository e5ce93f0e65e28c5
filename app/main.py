import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import get_settings
from app.routers import matches
from app.services.match.service import get_match_service

logger = logging.getLogger(__name__)
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting Snooker Scoring API")
    logger.debug("Debug mode: %s", settings.DEBUG)

    get_match_service()
    logger.info("Match service initialized")

    yield

    logger.info("Shutting down Snooker Scoring API")


app = FastAPI(
    title="Snooker Scoring API",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
logger.debug("CORS configured with origins: %s", settings.CORS_ORIGINS)

app.include_router(matches.router, prefix="/api/v1")
logger.debug("Routers registered: /api/v1/matches")


@app.get("/health")
def health():
    return {"status": "healthy"}
