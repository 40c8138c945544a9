# fleetrecon/main.py

"""
FastAPI Application Entry Point

Fleet bonus reconciliation and performance backend.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fleetrecon.core.config import settings
from fleetrecon.core.db import Base, engine
from fleetrecon.ingest.extractor_registry import import_extractors
from fleetrecon.ingest.router import router as ingest_router
from fleetrecon.performance.router import router as performance_router
from fleetrecon.reconciliation.router import router as reconciliation_router
from fleetrecon.sessions.router import router as sessions_router
from fleetrecon.uploads.router import router as uploads_router
from fleetrecon.utils.logger import get_logger

# Import models to ensure they are registered with Base
import fleetrecon.records.models  # noqa: F401
import fleetrecon.sessions.models  # noqa: F401
import fleetrecon.uploads.models  # noqa: F401

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and register extractors on startup"""
    Base.metadata.create_all(bind=engine)
    import_extractors()
    logger.info("Application started", environment=settings.environment)
    yield


app = FastAPI(
    title="Fleet Recon",
    description="Ride-hailing CSV ingestion, bonus reconciliation and performance dashboard",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[url.strip() for url in settings.allowed_cors_urls.split(",")],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(ingest_router)
app.include_router(uploads_router)
app.include_router(sessions_router)
app.include_router(reconciliation_router)
app.include_router(performance_router)


@app.get("/health", tags=["Health"])
def health_check():
    return {"status": "ok"}
