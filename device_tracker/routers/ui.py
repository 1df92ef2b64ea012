from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from ..core.jinja import get_templates

router = APIRouter()


@router.get("/", response_class=HTMLResponse)
def index_page(request: Request):
    settings = request.app.state.settings
    templates = get_templates(settings.templates_dir)
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "app_name": settings.APP_NAME,
            "logo_url": settings.LOGO_URL,
            "poll_interval_ms": settings.POLL_INTERVAL_SECONDS * 1000,
        },
    )
