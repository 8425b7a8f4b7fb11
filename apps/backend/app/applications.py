"""
Applications API: the signed-in user's tracked job postings.

Postings start in "Saved" and move through the fixed status pipeline.
"""
import logging
from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, field_validator

from app.db_config import db_config
from app.rate_limit import limiter, RATE_LIMIT_WRITE
from core.application_store import ApplicationStore, StoreError, STATUS_PIPELINE
from core.identity import Identity
from metrics import record_application_write
from security.user_session import user_required

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/applications", tags=["applications"])

REQUIRED_FIELDS_ERROR = "All fields are required!"


class ApplicationFields(BaseModel):
    title: str = ""
    company: str = ""
    location: str = ""
    deadline: Optional[date] = None
    link: Optional[str] = None

    @field_validator("title", "company", "location", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("deadline", "link", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v.strip() if isinstance(v, str) else v

    def require_complete(self):
        if not (self.title and self.company and self.location):
            raise HTTPException(status_code=400, detail=REQUIRED_FIELDS_ERROR)


class StatusUpdate(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def known_status(cls, v):
        if v not in STATUS_PIPELINE:
            raise ValueError(f"status must be one of {', '.join(STATUS_PIPELINE)}")
        return v


def get_application_store() -> ApplicationStore:
    """FastAPI dependency returning a store bound to the configured database."""
    conn_params = db_config.get_connection_params()
    if not conn_params:
        raise HTTPException(status_code=503, detail="Database not configured")
    return ApplicationStore(conn_params)


def _store_failure(action: str, e: Exception) -> HTTPException:
    logger.error(f"[applications] Failed to {action}: {e}")
    return HTTPException(status_code=500, detail=f"Failed to {action}")


@router.get("/statuses")
async def list_statuses():
    """The ordered status pipeline."""
    return {"statuses": list(STATUS_PIPELINE)}


@router.get("")
async def list_applications(
    user: Identity = Depends(user_required),
    store: ApplicationStore = Depends(get_application_store),
):
    """
    All postings owned by the user, newest first, plus per-status counts.

    Returns:
        {items: [...], counts: {status: int}}
    """
    try:
        items = store.list_for_owner(user.user_id)
    except StoreError as e:
        raise _store_failure("load applications", e)

    counts = {status: 0 for status in STATUS_PIPELINE}
    for item in items:
        if item.get("status") in counts:
            counts[item["status"]] += 1
    return {"items": items, "counts": counts}


@router.post("", status_code=201)
@limiter.limit(RATE_LIMIT_WRITE)
async def create_application(
    request: Request,
    body: ApplicationFields,
    user: Identity = Depends(user_required),
    store: ApplicationStore = Depends(get_application_store),
):
    body.require_complete()
    try:
        created = store.insert(user.user_id, body.model_dump())
    except StoreError as e:
        raise _store_failure("add job", e)
    record_application_write("insert")
    return created


@router.put("/{application_id}")
@limiter.limit(RATE_LIMIT_WRITE)
async def update_application(
    request: Request,
    application_id: UUID,
    body: ApplicationFields,
    user: Identity = Depends(user_required),
    store: ApplicationStore = Depends(get_application_store),
):
    body.require_complete()
    try:
        updated = store.update(user.user_id, str(application_id), body.model_dump())
    except StoreError as e:
        raise _store_failure("update job", e)
    if updated is None:
        raise HTTPException(status_code=404, detail="Application not found")
    record_application_write("update")
    return updated


@router.patch("/{application_id}/status")
@limiter.limit(RATE_LIMIT_WRITE)
async def update_application_status(
    request: Request,
    application_id: UUID,
    body: StatusUpdate,
    user: Identity = Depends(user_required),
    store: ApplicationStore = Depends(get_application_store),
):
    try:
        updated = store.update_status(user.user_id, str(application_id), body.status)
    except StoreError as e:
        raise _store_failure("update status", e)
    if updated is None:
        raise HTTPException(status_code=404, detail="Application not found")
    record_application_write("update_status")
    return updated


@router.delete("/{application_id}")
@limiter.limit(RATE_LIMIT_WRITE)
async def delete_application(
    request: Request,
    application_id: UUID,
    user: Identity = Depends(user_required),
    store: ApplicationStore = Depends(get_application_store),
):
    try:
        deleted = store.delete(user.user_id, str(application_id))
    except StoreError as e:
        raise _store_failure("delete job", e)
    if not deleted:
        raise HTTPException(status_code=404, detail="Application not found")
    record_application_write("delete")
    return {"deleted": True, "id": str(application_id)}
