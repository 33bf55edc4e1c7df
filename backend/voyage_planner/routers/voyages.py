"""Voyage router.

Endpoints:
    POST   /api/voyage/create          Create voyage (+ unit-type links)
    GET    /api/voyage/getAll          List with vessel and unit types
    DELETE /api/voyage/delete?id=…     Delete

Any other method on /create or /delete gets a plain-text 405 with an
``Allow`` header naming the one supported method.
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Query, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from voyage_planner.database import get_db
from voyage_planner.middleware.exceptions import ResourceNotFoundError
from voyage_planner.schemas.voyage import (
    VoyageListItem,
    VoyageRead,
    validate_voyage_draft,
)
from voyage_planner.services import voyages as voyage_service
from voyage_planner.utils.cache import cached, invalidate_cache

logger = logging.getLogger(__name__)

router = APIRouter()

_OTHER_METHODS = ["GET", "HEAD", "PUT", "PATCH", "DELETE", "POST", "OPTIONS"]


def _method_not_allowed(request: Request, allowed: str) -> PlainTextResponse:
    return PlainTextResponse(
        f"Method {request.method} not allowed",
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        headers={"Allow": allowed},
    )


# ── POST /api/voyage/create ──────────────────────────────────

@router.post("/create", response_model=VoyageRead, status_code=201)
async def create_voyage(
    payload: Any = Body(None),
    db: AsyncSession = Depends(get_db),
):
    """Create a voyage from a form draft.

    The draft is validated again here with the same rules as the form;
    violations come back as 400 with the field-keyed error map.
    A body that is not a JSON object counts as an empty draft.
    Persistence failures are logged and reported as an opaque 500.
    """
    body = validate_voyage_draft(payload)

    try:
        voyage = await voyage_service.create_voyage(db, body)
        await db.commit()
    except (ResourceNotFoundError, SQLAlchemyError):
        logger.exception("Error creating voyage")
        await db.rollback()
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"},
        )

    await invalidate_cache("voyages:*")
    return VoyageRead.model_validate(voyage)


@router.api_route(
    "/create",
    methods=[m for m in _OTHER_METHODS if m != "POST"],
    include_in_schema=False,
)
async def create_voyage_wrong_method(request: Request):
    return _method_not_allowed(request, "POST")


# ── GET /api/voyage/getAll ───────────────────────────────────

@router.get("/getAll", response_model=list[VoyageListItem])
@cached(prefix="voyages")
async def list_voyages(
    db: AsyncSession = Depends(get_db),
):
    """List voyages sorted by scheduled departure (cached until a write)."""
    voyages = await voyage_service.list_voyages(db)
    return [VoyageListItem.model_validate(v) for v in voyages]


# ── DELETE /api/voyage/delete ────────────────────────────────

@router.delete("/delete", status_code=204)
async def delete_voyage(
    id: str = Query(..., min_length=1),
    db: AsyncSession = Depends(get_db),
):
    """Delete a voyage by id (404 if unknown)."""
    await voyage_service.delete_voyage(db, id)
    await invalidate_cache("voyages:*")
    return Response(status_code=204)


@router.api_route(
    "/delete",
    methods=[m for m in _OTHER_METHODS if m != "DELETE"],
    include_in_schema=False,
)
async def delete_voyage_wrong_method(request: Request):
    return _method_not_allowed(request, "DELETE")
