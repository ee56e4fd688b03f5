"""Perks Keeper - Credit Card Offer Tracker API."""
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from perks_keeper.config import get_settings

settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup: bring the store up to the current schema version
    from perks_keeper.database import upgrade_database

    upgrade_database()

    yield


app = FastAPI(
    title=settings.app_name,
    description="Track card-linked cashback offers, their caps and expiry",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS for the local frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "app": settings.app_name}


# Import and include routers
from perks_keeper.api import cards, offers, stats  # noqa: E402

app.include_router(cards.router, prefix="/api")
app.include_router(offers.router, prefix="/api")
app.include_router(stats.router, prefix="/api")
