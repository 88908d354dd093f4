from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from scoped_query.core.deps import get_current_principal
from scoped_query.db.session import get_db
from scoped_query.resources.registry import resolve_resource
from scoped_query.schemas.paging import PagedResult, WaitlistJoinPayload
from scoped_query.services.search import get_by_id, search
from scoped_query.services.waitlist import join_waitlist

router = APIRouter()


@router.post("/appointment-waitlists", status_code=201)
def create_waitlist_entry(
    payload: WaitlistJoinPayload,
    db: Session = Depends(get_db),
    principal: dict | None = Depends(get_current_principal),
):
    return join_waitlist(db, payload, principal)


@router.patch("/{resource_name}", response_model=PagedResult)
def search_resource(
    resource_name: str,
    body: dict[str, Any] | None = Body(default=None),
    db: Session = Depends(get_db),
    principal: dict | None = Depends(get_current_principal),
):
    binding = resolve_resource(resource_name)
    return search(db, binding.name, body, principal)


@router.get("/{resource_name}/{row_id}")
def get_resource_row(
    resource_name: str,
    row_id: str,
    db: Session = Depends(get_db),
    principal: dict | None = Depends(get_current_principal),
):
    binding = resolve_resource(resource_name)
    return get_by_id(db, binding.name, row_id, principal)
