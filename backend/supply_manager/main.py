"""
Trade Supply Manager – FastAPI application entry point.

Run with:
    uvicorn supply_manager.main:app --reload --host 0.0.0.0 --port 8000
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from supply_manager.api.routes import router
from supply_manager.api.inventory_routes import inventory_router
from supply_manager.api.storefront_routes import storefront_router
from supply_manager.core.config import settings
from supply_manager.core.database import create_db_and_tables
from supply_manager.core.logging import setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown hooks."""
    setup_logging()
    logger.info("Starting Trade Supply Manager backend …")
    create_db_and_tables()
    logger.info("Database tables ready")
    yield
    logger.info("Trade Supply Manager backend shut down")


app = FastAPI(
    title="Trade Supply Manager API",
    description="Orders, storefront conversion and inventory impact for a trade supply business",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS – allow the admin frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)
app.include_router(storefront_router)
app.include_router(inventory_router)


@app.get("/")
def root():
    return {"message": "Trade Supply Manager API", "docs": "/docs"}
