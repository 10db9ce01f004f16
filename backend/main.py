"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import market_data
from database import init_db
from logging_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create missing tables on startup; stop background price updates on shutdown."""
    try:
        init_db()
    except Exception:
        logger.warning("Database initialization failed on startup", exc_info=True)
    yield
    market_data.shutdown_batch_session()


app = FastAPI(
    title="Price Updater",
    description="Downloads current security prices and keeps a price history",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS configuration for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(market_data.router)


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "ok"}
