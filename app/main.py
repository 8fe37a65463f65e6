"""FastAPI pages for the Heras quick-setup form."""

from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from herasquote.catalog import DURATION_CHOICES, GROUND_CHOICES, HEIGHT_CHOICES
from herasquote.errors import MAP_LOAD_FAILED_MESSAGE
from herasquote.gate import AccessGate
from herasquote.settings import get_settings

BASE_DIR = Path(__file__).resolve().parent
TEMPLATES_DIR = BASE_DIR / "templates"
STATIC_DIR = BASE_DIR / "static"

router = APIRouter()
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def _gate(request: Request) -> AccessGate:
    return AccessGate.from_cookie(request.cookies.get(get_settings().auth_cookie))


@router.get("/", response_class=HTMLResponse)
async def index(request: Request):
    """PIN page until the gate is open, then the quote form."""

    gate = _gate(request)
    if not gate.authed:
        return templates.TemplateResponse(request, "login.html", {"error": ""})

    settings = get_settings()
    return templates.TemplateResponse(
        request,
        "quote.html",
        {
            "durations": DURATION_CHOICES,
            "grounds": GROUND_CHOICES,
            "heights": HEIGHT_CHOICES,
            "map_enabled": settings.map_enabled,
            "map_load_error": MAP_LOAD_FAILED_MESSAGE,
        },
    )


@router.post("/login", response_class=HTMLResponse)
async def login(request: Request, pin: str = Form("")):
    gate = _gate(request)
    if not gate.login(pin):
        return templates.TemplateResponse(
            request,
            "login.html",
            {"error": gate.error},
            status_code=401,
        )

    response = RedirectResponse(url="/", status_code=303)
    response.set_cookie(get_settings().auth_cookie, gate.cookie_value, samesite="lax")
    return response


@router.post("/logout")
async def logout(request: Request):
    settings = get_settings()
    gate = _gate(request)
    gate.logout()
    request.app.state.sessions.discard(request.cookies.get(settings.session_cookie))

    response = RedirectResponse(url="/", status_code=303)
    response.delete_cookie(settings.auth_cookie)
    response.delete_cookie(settings.session_cookie)
    return response


@router.get("/health")
async def health():
    return {"status": "ok"}
