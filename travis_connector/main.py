from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import uvicorn
import logging
import os
from datetime import datetime, timezone

from travis_connector.routers import auth, tables
from travis_connector.core.config import settings
from travis_connector.core.exceptions import (
    ConnectorException,
    connector_exception_handler,
    general_exception_handler,
    http_exception_handler_custom
)

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info("Starting Travis CI connector service...")
    yield
    logger.info("Shutting down Travis CI connector service...")

# Create FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Travis CI build, commit and job data for BI extracts, with GitHub OAuth for private repositories",
    version="1.0.0",
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add exception handlers; subclasses resolve to the ConnectorException handler
app.add_exception_handler(ConnectorException, connector_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler_custom)
app.add_exception_handler(Exception, general_exception_handler)

# Include routers
app.include_router(auth.router, tags=["OAuth"])
app.include_router(tables.router, prefix=settings.API_V1_STR, tags=["Tables"])

@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": settings.PROJECT_NAME,
        "version": "1.0.0",
        "status": "running"
    }

@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "travis-ci-connector",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": "1.0.0"
    }

def run():
    uvicorn.run(
        "travis_connector.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "9001")),
        log_level="info"
    )

if __name__ == "__main__":
    run()
