"""Unified FastAPI application.

Single entry point that mounts both the quote UI and the JSON API.
Run with: uvicorn app.application:app --reload
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.main import STATIC_DIR
from app.main import router as ui_router
from herasquote.api import router as api_router
from herasquote.geocoding import NominatimGeocoder
from herasquote.mapview import default_map_factory
from herasquote.session import QuoteSession, SessionStore
from herasquote.settings import get_settings

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)
settings = get_settings()

geocoder = NominatimGeocoder.from_settings(settings)


def new_quote_session() -> QuoteSession:
    return QuoteSession(
        geocoder,
        default_map_factory(settings.map_enabled),
        zoom=settings.map_zoom,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    app.state.sessions.clear()
    await geocoder.aclose()
    logger.info("Geocoder client closed")


app = FastAPI(
    title="Heras Quote",
    description=(
        "Site-specific temporary fencing quick setup. "
        "Provides the PIN-gated quote page and a JSON REST API."
    ),
    version="0.1.0",
    lifespan=lifespan,
)
app.state.sessions = SessionStore(new_quote_session, max_sessions=settings.max_sessions)

# CORS - configurable via HERASQUOTE_CORS_ORIGINS env var
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Static files for the quote UI
app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

# Mount routers
app.include_router(api_router)  # /api/wind, /api/options, /api/session...
app.include_router(ui_router)   # /, /login, /logout, /health


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)
