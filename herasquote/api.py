"""JSON API for herasquote."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response

from herasquote.catalog import FENCE_OPTIONS, HEIGHT_CHOICES, get_option
from herasquote.eligibility import option_views
from herasquote.gate import AccessGate
from herasquote.mapview import MapView
from herasquote.schemas import (
    DownloadSummary,
    FieldUpdate,
    MapEvent,
    OptionView,
    QuoteSnapshot,
    WindEstimate,
)
from herasquote.session import QuoteSession, SessionStore
from herasquote.settings import get_settings
from herasquote.wind import wind_for_postcode

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["api"])


def get_gate(request: Request) -> AccessGate:
    settings = get_settings()
    return AccessGate.from_cookie(request.cookies.get(settings.auth_cookie))


def require_gate(gate: AccessGate = Depends(get_gate)) -> AccessGate:
    if not gate.authed:
        raise HTTPException(status_code=401, detail="Enter PIN to continue")
    return gate


def get_store(request: Request) -> SessionStore:
    return request.app.state.sessions


def get_quote(
    request: Request,
    store: SessionStore = Depends(get_store),
    _gate: AccessGate = Depends(require_gate),
) -> QuoteSession:
    session = store.get(request.cookies.get(get_settings().session_cookie))
    if session is None:
        raise HTTPException(status_code=404, detail="No quote session; POST /api/session first")
    return session


@router.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


@router.get("/wind", response_model=WindEstimate)
async def wind(postcode: str = Query("", description="UK postcode")):
    """
    Estimate site wind for a postcode.

    Raises:
        HTTPException: 400 for a blank postcode
    """
    estimate = wind_for_postcode(postcode)
    if estimate is None:
        raise HTTPException(status_code=400, detail="Postcode is required")
    return estimate


@router.get("/catalog")
async def catalog():
    """Static fence catalog and height choices."""
    return {
        "options": [o.model_dump() for o in FENCE_OPTIONS],
        "heights": HEIGHT_CHOICES,
    }


@router.get("/options", response_model=list[OptionView])
async def options(
    postcode: str = Query("", description="UK postcode"),
    height_m: float = Query(2.0, gt=0, description="Required fence height in metres"),
):
    """Catalog options with eligibility for the postcode's wind estimate."""
    return option_views(FENCE_OPTIONS, wind_for_postcode(postcode), height_m)


# ── Quote session ────────────────────────────────────────────────────


@router.post("/session", response_model=QuoteSnapshot)
async def create_session(
    request: Request,
    response: Response,
    store: SessionStore = Depends(get_store),
    _gate: AccessGate = Depends(require_gate),
):
    """Start a quote session (replacing any previous one for this browser)."""
    settings = get_settings()
    store.discard(request.cookies.get(settings.session_cookie))
    session_id, session = store.create()
    response.set_cookie(settings.session_cookie, session_id, httponly=True, samesite="lax")
    return session.snapshot()


@router.get("/session", response_model=QuoteSnapshot)
async def read_session(session: QuoteSession = Depends(get_quote)):
    return session.snapshot()


@router.delete("/session")
async def end_session(
    request: Request,
    response: Response,
    store: SessionStore = Depends(get_store),
):
    settings = get_settings()
    store.discard(request.cookies.get(settings.session_cookie))
    response.delete_cookie(settings.session_cookie)
    return {"status": "ended"}


@router.post("/session/field", response_model=QuoteSnapshot)
async def update_field(update: FieldUpdate, session: QuoteSession = Depends(get_quote)):
    """
    Apply a form edit. Postcode edits re-derive wind and re-run geocoding.

    Raises:
        HTTPException: 400 for an unknown field
    """
    try:
        await session.update(update.field, update.value)
    except KeyError:
        raise HTTPException(status_code=400, detail=f"Unknown field: {update.field}")
    return session.snapshot()


def _map_or_409(session: QuoteSession) -> MapView:
    map_ = session.sync.map
    if not isinstance(map_, MapView):
        raise HTTPException(status_code=409, detail="Map is not ready")
    return map_


@router.post("/session/map/click", response_model=QuoteSnapshot)
async def map_click(event: MapEvent, session: QuoteSession = Depends(get_quote)):
    await _map_or_409(session).click(event.lat, event.lon)
    return session.snapshot()


@router.post("/session/map/dragend", response_model=QuoteSnapshot)
async def marker_drag_end(event: MapEvent, session: QuoteSession = Depends(get_quote)):
    await _map_or_409(session).drag_end(event.lat, event.lon)
    return session.snapshot()


@router.post("/session/submit", response_model=QuoteSnapshot)
async def submit(session: QuoteSession = Depends(get_quote)):
    """Validate the form; field errors come back in ``errors``."""
    session.submit()
    return session.snapshot()


@router.post("/session/select/{option_id}", response_model=QuoteSnapshot)
async def toggle_option(option_id: str, session: QuoteSession = Depends(get_quote)):
    if get_option(option_id) is None:
        raise HTTPException(status_code=404, detail=f"Unknown option: {option_id}")
    session.toggle(option_id)
    return session.snapshot()


@router.get("/session/download", response_model=DownloadSummary)
async def download(session: QuoteSession = Depends(get_quote)):
    """
    Download stub: summarises the selection, no file is produced.

    Raises:
        HTTPException: 400 when nothing is selected
    """
    if not session.selected:
        raise HTTPException(status_code=400, detail="Select at least one option")
    summary = session.download_summary()
    logger.info(
        "Download requested for %s (%d option(s))",
        summary.project_name or "unnamed project",
        summary.count,
    )
    return summary


__all__ = ["router", "get_gate", "require_gate", "get_store", "get_quote"]
