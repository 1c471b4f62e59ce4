from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse

from portfolio.services.project_display import project_card

router = APIRouter(prefix="", tags=["pages"])


def _templates(request: Request):
    tpl = getattr(getattr(request.app, "state", None), "templates", None)
    if tpl:
        return tpl
    raise RuntimeError("Templates not configured")


@router.get("/")
def index():
    return RedirectResponse("/projects", status_code=302)


@router.get("/projects", response_class=HTMLResponse)
def projects_page(request: Request, category: str = "all", q: str = ""):
    svc = request.app.state.project_service
    projects = svc.list_projects(category, q)
    templates = _templates(request)
    context = {
        "cards": [project_card(p) for p in projects],
        "categories": ["all", *sorted(svc.repository.categories)],
        "category": category,
        "query": q,
        "load_failed": svc.repository.state.load_failed,
    }
    return templates.TemplateResponse(request, "projects.html", context)


# Silences Chrome devtools probes (avoids noisy 404s in logs)
@router.get("/.well-known/appspecific/com.chrome.devtools.json")
def chrome_devtools_wellknown():
    return PlainTextResponse("", status_code=204)
