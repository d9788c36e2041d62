"""
Voyado Router — Thin HTTP layer
===============================
Product-review webhook (creates a Dixa conversation) and the point-balance
webhook (log only).
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from app.config import ConfigurationError
from app.dependencies import get_review_orchestrator
from app.services.payload_service import (
    PayloadError,
    extract_point_balance_event,
    extract_review_event,
    read_json,
)
from app.services.review_orchestrator import ReviewOrchestrator
from app.utils.http_errors import upstream_detail, upstream_status

logger = logging.getLogger(__name__)

router = APIRouter()


async def handle_review(request: Request, orchestrator: ReviewOrchestrator) -> dict | JSONResponse:
    """Shared by the review webhook and its diagnostic twin."""
    try:
        event = extract_review_event(await read_json(request))
    except PayloadError as e:
        logger.warning("Rejected review webhook: %s", e)
        return JSONResponse(status_code=400, content={"error": str(e)})

    try:
        result = await orchestrator.process(event)
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e)
        return JSONResponse(status_code=400, content={"error": str(e)})
    except Exception as e:
        status_code = upstream_status(e)
        logger.exception("Error processing Voyado review webhook (responding %s)", status_code)
        return JSONResponse(
            status_code=status_code,
            content={
                "error": "Failed to process review",
                "message": str(e),
                "details": upstream_detail(e),
            },
        )

    return result.to_response()


@router.post("/webhook/voyado/review")
async def receive_review_webhook(
    request: Request,
    orchestrator: ReviewOrchestrator = Depends(get_review_orchestrator),
):
    """
    Voyado product-review webhook.
    Requires one of contactId / email / phone; dixaApiToken and
    dixaEmailIntegrationId override the configured Dixa credentials.
    """
    return await handle_review(request, orchestrator)


@router.post("/webhook/voyado/points")
async def receive_points_webhook(request: Request):
    """Voyado point.balance.updated webhook. Logged and acknowledged."""
    try:
        event = extract_point_balance_event(await read_json(request))
    except PayloadError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})

    logger.info("Voyado Points Balance Updated:")
    logger.info("   Account ID: %s", event.account_id)
    logger.info("   Contact ID: %s", event.contact_id)
    logger.info("   New Balance: %s", event.balance)
    logger.info("   Balance Expires: %s", event.balance_expires)
    logger.info("   Definition ID: %s", event.definition_id)
    logger.info("   Event ID: %s", event.event_id)

    return {
        "message": "Voyado points webhook processed successfully",
        "accountId": event.account_id,
        "balance": event.balance,
    }
