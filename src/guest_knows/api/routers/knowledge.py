"""Knowledge retrieval and property context endpoints.

Every item leaving these endpoints has its raw payload redacted and
email addresses masked.
"""

import json
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from guest_knows.api.deps import get_orchestrator, require_ingest_token
from guest_knows.logging import get_logger
from guest_knows.orchestrator import IngestionOrchestrator

router = APIRouter(tags=["knowledge"], dependencies=[Depends(require_ingest_token)])

logger = get_logger(__name__)

Orchestrator = Annotated[IngestionOrchestrator, Depends(get_orchestrator)]


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.get("/threads/{thread_id}", response_model=None)
async def get_thread(thread_id: str, orchestrator: Orchestrator) -> dict[str, Any] | JSONResponse:
    try:
        return await orchestrator.get_thread(thread_id)
    except Exception as e:
        logger.error("thread_retrieval_failed", external_thread_id=thread_id, error=str(e))
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to retrieve thread")


@router.get("/bookings/{booking_id}", response_model=None)
async def get_booking(booking_id: str, orchestrator: Orchestrator) -> dict[str, Any] | JSONResponse:
    try:
        return await orchestrator.get_booking(booking_id)
    except Exception as e:
        logger.error("booking_retrieval_failed", booking_id=booking_id, error=str(e))
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to retrieve booking")


@router.get("/properties/{property_id}/knowledge", response_model=None)
async def get_property_knowledge(
    property_id: str,
    orchestrator: Orchestrator,
    limit: str | None = None,
) -> dict[str, Any] | JSONResponse:
    parsed_limit = None
    if limit:
        try:
            parsed_limit = int(limit)
        except ValueError:
            parsed_limit = 0
        if parsed_limit < 1:
            return _error(status.HTTP_400_BAD_REQUEST, "Invalid limit parameter")

    try:
        return await orchestrator.get_property_knowledge(property_id, parsed_limit)
    except Exception as e:
        logger.error("property_knowledge_retrieval_failed", property_id=property_id, error=str(e))
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to retrieve property knowledge"
        )


@router.post("/properties/{property_id}/context", response_model=None)
async def store_property_context(
    property_id: str,
    request: Request,
    orchestrator: Orchestrator,
) -> dict[str, Any] | JSONResponse:
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        body = None

    context = body.get("context") if isinstance(body, dict) else None
    if not context or not isinstance(context, str):
        return _error(status.HTTP_400_BAD_REQUEST, "Missing or invalid 'context' field")

    try:
        return await orchestrator.store_property_context(property_id, context)
    except Exception as e:
        logger.error("property_context_store_failed", property_id=property_id, error=str(e))
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to store property context")
