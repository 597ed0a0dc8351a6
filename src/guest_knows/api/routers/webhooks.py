"""Inbound email webhook endpoint."""

import json
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from guest_knows.api.deps import get_orchestrator, require_ingest_token
from guest_knows.errors import PayloadValidationError
from guest_knows.logging import get_logger
from guest_knows.orchestrator import IngestionOrchestrator

router = APIRouter(prefix="/webhooks", tags=["webhooks"])

logger = get_logger(__name__)


@router.post("/email", dependencies=[Depends(require_ingest_token)])
async def receive_email(
    request: Request,
    orchestrator: Annotated[IngestionOrchestrator, Depends(get_orchestrator)],
) -> JSONResponse:
    """Ingest a forwarded email thread."""
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        payload = None

    try:
        result = await orchestrator.ingest(payload)
    except PayloadValidationError as e:
        logger.warning("invalid_webhook_payload", error=str(e))
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Invalid payload", "details": str(e)},
        )
    except Exception as e:
        logger.error("webhook_processing_failed", error=str(e), exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to process request"},
        )

    return JSONResponse(content=result.to_response())
