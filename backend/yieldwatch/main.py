"""
Yieldwatch - FastAPI Application
"""
import sys
from datetime import datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from yieldwatch.config import get_settings
from yieldwatch.api.endpoints import market
from yieldwatch.api.endpoints import health as health_endpoints
from yieldwatch.services.market_data import get_market_data_service

app_settings = get_settings()

# ── Logging (single stderr sink at the configured level) ─────────────────
logger.remove()
logger.add(sys.stderr, level=app_settings.LOG_LEVEL)

# Create FastAPI app
app = FastAPI(
    title=app_settings.PROJECT_NAME,
    version="1.0.0",
    description="Sovereign yield curves and 5Y CDS spreads from public sources"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=app_settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(
    market.router,
    prefix=f"{app_settings.API_V1_PREFIX}/market",
    tags=["market"]
)

app.include_router(
    health_endpoints.router,
    prefix=f"{app_settings.API_V1_PREFIX}/health",
    tags=["health"]
)


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": f"{app_settings.PROJECT_NAME} API",
        "version": "1.0.0",
        "docs": "/docs"
    }


@app.get("/health")
async def health_check():
    """Liveness probe; never touches upstream sources."""
    return {"status": "healthy", "timestamp": datetime.now().isoformat()}


@app.on_event("shutdown")
async def shutdown_event():
    """Close the outbound aiohttp session"""
    await get_market_data_service().close()
    logger.info("Closed market data fetcher session")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("yieldwatch.main:app", host="0.0.0.0", port=8000, reload=True)
