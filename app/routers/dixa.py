"""
Dixa Router — Thin HTTP layer
=============================
CSAT rating webhook and the latest-event query.
Delegates all business logic to CsatOrchestrator.
"""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.responses import JSONResponse

from app.dependencies import get_background_jobs, get_csat_orchestrator, get_event_sink
from app.services.background_service import BackgroundJobs
from app.services.csat_orchestrator import CsatOrchestrator
from app.services.event_sink import EventSink
from app.services.payload_service import PayloadError, extract_rating_event, read_json

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/webhook/dixa/csat")
async def receive_csat_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    orchestrator: CsatOrchestrator = Depends(get_csat_orchestrator),
    jobs: BackgroundJobs = Depends(get_background_jobs),
):
    """
    Dixa CONVERSATION_RATED webhook.
    Answers right away with the computed points; the Voyado award runs after
    the response has been sent.
    """
    try:
        event = extract_rating_event(await read_json(request))
    except PayloadError as e:
        logger.warning("Rejected CSAT webhook: %s", e)
        return JSONResponse(status_code=400, content={"error": str(e)})

    try:
        points = orchestrator.receive(event)
        jobs.schedule(
            background_tasks,
            f"csat-award:{event.event_id or event.requester_email}",
            orchestrator.award, event, points,
        )
    except Exception:
        logger.exception("Error processing Dixa CSAT webhook")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    return {
        "message": "CSAT webhook processed successfully",
        "score": event.score,
        "pointsAwarded": points,
        "contactEmail": event.requester_email,
    }


@router.get("/latest-csat")
async def get_latest_csat(events: EventSink = Depends(get_event_sink)):
    latest = events.latest()
    if latest is None:
        return JSONResponse(status_code=404, content={"message": "No CSAT events received yet"})

    return {
        "message": "Latest CSAT event",
        "receivedAt": latest.received_at,
        "event": latest.raw_body,
    }
