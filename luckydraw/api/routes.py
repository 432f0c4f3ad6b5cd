"""
FastAPI routes for the lucky-draw entry service.
"""

from __future__ import annotations

import io
import logging
from http import HTTPStatus
from typing import Annotated, Any, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse
from pydantic import ValidationError

from luckydraw.clients import OAuthRefreshRejectedError
from luckydraw.dependencies import (
    SettingsDependency,
    get_customer_lookup_service,
    get_entry_export_service,
    get_entry_service,
)
from luckydraw.schemas import (
    CustomerProfile,
    EntryCount,
    EntryResponse,
    EntrySubmission,
)
from luckydraw.services import CustomerNotFoundError, DuplicateEntryError
from luckydraw.services.entry_export import XLSX_MEDIA_TYPE

router = APIRouter()
logger = logging.getLogger(__name__)

_INTERNAL_ERROR = "Internal server error."


def _internal_error(context: str, exc: Exception) -> HTTPException:
    if isinstance(exc, OAuthRefreshRejectedError):
        logger.critical("%s: Cafe24 credentials need re-authorization.", context)
    else:
        logger.exception("%s", context)
    return HTTPException(
        status_code=HTTPStatus.INTERNAL_SERVER_ERROR, detail=_INTERNAL_ERROR
    )


def _parse_submission(body: Any) -> Optional[EntrySubmission]:
    # Missing, non-object and mistyped bodies all count as a missing memberId.
    if not isinstance(body, dict):
        return None
    try:
        return EntrySubmission.model_validate(body)
    except ValidationError:
        return None


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck() -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok"}


@router.post("/entry", status_code=HTTPStatus.OK, response_model=EntryResponse)
async def submit_entry(
    entry_service: Annotated[Any, Depends(get_entry_service)],
    body: Any = Body(None),
) -> EntryResponse:
    """Record the member's lucky-draw entry; each member may enter once."""
    payload = _parse_submission(body)
    member_id = ((payload.member_id if payload else None) or "").strip()
    if payload is None or not member_id:
        raise HTTPException(
            status_code=HTTPStatus.BAD_REQUEST, detail="memberId is required."
        )

    try:
        entry = await entry_service.submit(member_id, cellphone=payload.cellphone)
    except DuplicateEntryError as exc:
        raise HTTPException(
            status_code=HTTPStatus.CONFLICT, detail="Member has already entered."
        ) from exc
    except CustomerNotFoundError as exc:
        raise HTTPException(
            status_code=HTTPStatus.NOT_FOUND, detail="Customer data not found."
        ) from exc
    except Exception as exc:
        raise _internal_error("Failed to record entry", exc) from exc

    return EntryResponse(message="Entry recorded.", entry=entry)


@router.get("/entry/count", status_code=HTTPStatus.OK, response_model=EntryCount)
async def count_entries(
    entry_service: Annotated[Any, Depends(get_entry_service)],
) -> EntryCount:
    try:
        count = await entry_service.count()
    except Exception as exc:
        raise _internal_error("Failed to count entries", exc) from exc
    return EntryCount(count=count)


@router.get("/lucky/download", status_code=HTTPStatus.OK)
async def download_entries(
    settings: SettingsDependency,
    export_service: Annotated[Any, Depends(get_entry_export_service)],
) -> StreamingResponse:
    """Stream every entry as an .xlsx attachment."""
    try:
        content = await export_service.build_workbook()
    except Exception as exc:
        raise _internal_error("Failed to export entries", exc) from exc

    filename = settings.event.export_filename
    return StreamingResponse(
        io.BytesIO(content),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.get("/customer", status_code=HTTPStatus.OK, response_model=CustomerProfile)
async def get_customer(
    customer_lookup: Annotated[Any, Depends(get_customer_lookup_service)],
    member_id: Optional[str] = Query(
        default=None, description="Cafe24 member ID to look up."
    ),
) -> CustomerProfile:
    """Proxy a Cafe24 customer profile lookup."""
    if not member_id or not member_id.strip():
        raise HTTPException(
            status_code=HTTPStatus.BAD_REQUEST,
            detail="member_id query parameter is required.",
        )

    try:
        profile = await customer_lookup.fetch_customer_by_member_id(member_id.strip())
    except Exception as exc:
        raise _internal_error("Failed to fetch customer data", exc) from exc

    if profile is None:
        raise HTTPException(
            status_code=HTTPStatus.NOT_FOUND, detail="Customer data not found."
        )
    return profile


__all__ = ["router"]
