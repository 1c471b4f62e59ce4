from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import Response

from portfolio.core.utils import format_date
from portfolio.repositories.errors import (
    DuplicateProjectError,
    ProjectParseError,
    ProjectValidationError,
)
from portfolio.services.project_service import ProjectService

router = APIRouter(prefix="/api/projects", tags=["projects"])


def _get_project_service(request: Request) -> ProjectService:
    svc = getattr(getattr(request.app, "state", None), "project_service", None)
    if not svc:
        raise RuntimeError("ProjectService not configured")
    return svc


@router.get("")
def list_projects(request: Request, category: str = "all", q: str = ""):
    return _get_project_service(request).list_projects(category, q)


@router.get("/stats")
def project_stats(request: Request):
    stats = _get_project_service(request).repository.stats()
    stats["last_update_display"] = format_date(stats["last_update"])
    return stats


@router.get("/storage")
def storage_usage(request: Request):
    return asdict(_get_project_service(request).storage_usage())


@router.post("/check-updates")
def check_updates(request: Request, force: bool = False):
    return asdict(_get_project_service(request).check_for_updates(force=force))


@router.get("/export")
def export_projects(request: Request):
    filename, body = _get_project_service(request).export_payload()
    return Response(
        content=body,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/import")
async def import_projects(request: Request):
    svc = _get_project_service(request)
    blob = await request.body()
    try:
        count = svc.repository.import_from(blob)
    except ProjectParseError as exc:
        raise HTTPException(400, str(exc))
    except ProjectValidationError as exc:
        raise HTTPException(422, {"errors": exc.messages})
    return {"ok": True, "imported": count}


@router.post("/reset")
def reset_projects(request: Request):
    _get_project_service(request).repository.reset()
    return {"ok": True}


@router.post("", status_code=201)
def create_project(request: Request, payload: dict):
    repo = _get_project_service(request).repository
    result = repo.validate(payload)
    if not result.valid:
        raise HTTPException(422, {"errors": result.errors})
    try:
        return repo.add(payload)
    except DuplicateProjectError as exc:
        raise HTTPException(409, str(exc))


@router.get("/{project_id}")
def get_project(request: Request, project_id: str):
    project = _get_project_service(request).repository.get_by_id(project_id)
    if not project:
        raise HTTPException(404, "Project not found")
    return project


@router.patch("/{project_id}")
def update_project(request: Request, project_id: str, payload: dict):
    project = _get_project_service(request).repository.update(project_id, payload)
    if not project:
        raise HTTPException(404, "Project not found")
    return project


@router.delete("/{project_id}")
def delete_project(request: Request, project_id: str):
    if not _get_project_service(request).repository.delete(project_id):
        raise HTTPException(404, "Project not found")
    return {"ok": True}
