"""FastAPI application entry point"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from prboard.config.database import init_db
from prboard.config.settings import settings
from prboard.orchestrator import RefreshConfig, RefreshOrchestrator
from prboard.services import dashboard
from prboard.services.document_store import DocumentStore

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    init_db()
    yield


app = FastAPI(
    title=settings.APP_NAME,
    description="Open pull requests of a GitHub organization ranked by approvals",
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure properly in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Shared store and orchestrator, configured once at startup
store = DocumentStore()
orchestrator = RefreshOrchestrator(RefreshConfig.from_settings(settings), store=store)


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "endpoints": {
            "health": "/api/health",
            "refresh": "GET|POST /api/refresh",
            "pull_requests": "/api/prs?sort=approvals|updated|title",
            "metadata": "/api/metadata",
        }
    }


@app.get("/api/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "prboard",
        "version": settings.APP_VERSION
    }


@app.api_route("/api/refresh", methods=["GET", "POST"])
async def refresh():
    """Run a full refresh synchronously and report the written record count"""
    logger.info("Refresh triggered")
    result = await orchestrator.run_refresh()
    if not result["success"]:
        return JSONResponse(status_code=500, content=result)
    return result


@app.get("/api/prs")
def list_pull_requests(sort: str = dashboard.SORT_APPROVALS):
    """Persisted pull requests in the requested order"""
    if sort not in dashboard.SORT_MODES:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown sort mode '{sort}', expected one of {', '.join(dashboard.SORT_MODES)}",
        )
    items = dashboard.list_pull_requests(store, sort)
    return {"count": len(items), "sort": sort, "items": items}


@app.get("/api/metadata")
def get_metadata():
    """Last refresh time and record count"""
    metadata = dashboard.get_refresh_metadata(store)
    if metadata is None:
        return {"lastRefresh": None, "lastRefreshCount": None, "lastRefreshLabel": None}
    return {
        **metadata.to_document(),
        "lastRefreshLabel": dashboard.format_last_refresh(metadata.lastRefresh),
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "prboard.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
