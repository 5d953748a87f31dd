import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.api.router import api_router
from app.core import logging as app_logging  # Initialize logging
from app.services.insights.reference_loader import get_reference_table

logger = logging.getLogger(__name__)

app = FastAPI(
    title="AthleteInsight API",
    description="Genetic marker reconciliation, genotype interpretation and biometric readiness scoring",
    version="1.0.0"
)

# CORS Configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API Routers
app.include_router(api_router, prefix="/api/v1")

@app.on_event("startup")
async def startup_event():
    # Reference table must be fully built before the first request;
    # ReferenceDataError aborts startup.
    logger.info("Preloading reference table...")
    get_reference_table()

@app.get("/health")
async def health_check():
    table = get_reference_table()
    return {"status": "ok", "service": "AthleteInsight", "reference_version": table.version}
