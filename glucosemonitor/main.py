"""Glucose monitor FastAPI application."""

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from glucosemonitor.config import settings
from glucosemonitor.logging_config import get_logger, setup_logging
from glucosemonitor.middleware import CorrelationIdMiddleware
from glucosemonitor.routers import cob, cob_settings, health
from glucosemonitor.services.cob_settings import config_store

setup_logging(
    log_format=settings.log_format,
    log_level=settings.log_level,
    service_name=settings.service_name,
)
logger = get_logger(__name__)

API_VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    config = config_store.get_config()
    logger.info(
        "Glucose monitor API started",
        carb_absorption_minutes=config.carb_absorption_minutes,
        insulin_action_minutes=config.insulin_action_minutes,
    )

    yield

    logger.info("Glucose monitor API shutdown complete")


app = FastAPI(
    title="Glucose Monitor API",
    description="Carbs and insulin on board for the glucose monitoring dashboard",
    version=API_VERSION,
    lifespan=lifespan,
)

# Middleware (order matters: first added = last executed)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(CorrelationIdMiddleware)

app.include_router(health.router)
app.include_router(cob.router)
app.include_router(cob_settings.router)


@app.get("/")
async def root() -> dict[str, Any]:
    """Root endpoint."""
    return {
        "name": "Glucose Monitor API",
        "version": API_VERSION,
        "docs": "/docs",
    }
