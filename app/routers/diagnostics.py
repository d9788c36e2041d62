"""
Diagnostics Router
==================
Manual test routes for each external call, plus the background-job error
channel. They mirror the webhook pipelines step by step.
"""

import logging
import time
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from app.config import Settings
from app.dependencies import (
    get_background_jobs,
    get_dixa_service,
    get_review_orchestrator,
    get_settings,
    get_voyado_service,
)
from app.routers.voyado import handle_review
from app.services.background_service import BackgroundJobs
from app.services.csat_orchestrator import build_interaction_payload
from app.services.dixa_service import DixaService
from app.services.payload_service import PayloadError, read_json
from app.services.review_orchestrator import ReviewOrchestrator
from app.services.voyado_service import VoyadoService
from app.utils.helpers import SUPPORT_CHANNELS, parse_int
from app.utils.http_errors import upstream_detail, upstream_status

logger = logging.getLogger(__name__)

router = APIRouter()


async def _json_object(request: Request) -> dict:
    body = await read_json(request)
    if not isinstance(body, dict):
        raise PayloadError("Request body must be a JSON object")
    return body


# --- VOYADO ---

@router.get("/test-lookup/{kind}/{identifier}")
async def lookup_contact(kind: str, identifier: str, voyado: VoyadoService = Depends(get_voyado_service)):
    if kind not in ("email", "phone"):
        return JSONResponse(status_code=400, content={"error": "Type must be 'email' or 'phone'"})

    logger.info("Testing contact lookup for %s: %s", kind, identifier)
    contact_id = await voyado.find_contact_id(identifier, kind)

    if not contact_id:
        return JSONResponse(
            status_code=404,
            content={"message": "Contact not found", "type": kind, "identifier": identifier},
        )
    return {"message": "Contact found", "type": kind, "identifier": identifier, "contactId": contact_id}


@router.post("/test-add-points")
async def add_points(request: Request, voyado: VoyadoService = Depends(get_voyado_service)):
    try:
        body = await _json_object(request)
    except PayloadError as e:
        return JSONResponse(status_code=400, content={"success": False, "error": str(e)})

    contact_id = body.get("contactId")
    points = parse_int(body.get("points"))
    if not contact_id or not points:
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": "Missing required fields: contactId and points"},
        )

    logger.info("Testing add points: %s points to contact %s", points, contact_id)
    account_id = await voyado.find_point_account(contact_id)
    if not account_id:
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "error": f"No point account found for contact: {contact_id}. "
                         f"Points cannot be added without an existing point account.",
            },
        )

    try:
        result = await voyado.post_point_transaction(account_id, points, body.get("description") or "Test points")
    except Exception as e:
        logger.error("Failed to add points: %s", e)
        return JSONResponse(status_code=500, content={"success": False, "error": str(e)})

    return {
        "success": True,
        "message": f"Successfully added {points} points using point account {account_id}",
        "result": result,
    }


@router.post("/test-interaction")
async def create_interaction(
    request: Request,
    voyado: VoyadoService = Depends(get_voyado_service),
    settings: Settings = Depends(get_settings),
):
    try:
        body = await _json_object(request)
    except PayloadError as e:
        return JSONResponse(status_code=400, content={"success": False, "error": str(e)})

    contact_id = body.get("contactId")
    score = parse_int(body.get("score"))
    channel = body.get("supportChannel") or "Other"

    if not contact_id or score is None:
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": "Missing required fields: contactId and score"},
        )
    if not 1 <= score <= 5:
        return JSONResponse(status_code=400, content={"success": False, "error": "score must be between 1 and 5"})
    if channel not in SUPPORT_CHANNELS:
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": f"supportChannel must be one of: {', '.join(SUPPORT_CHANNELS)}"},
        )

    raw_conversation_id = body.get("conversationId")
    conversation_id = parse_int(raw_conversation_id)
    if conversation_id is None:
        conversation_id = raw_conversation_id or int(time.time() * 1000)

    payload = build_interaction_payload(score, conversation_id, channel)
    schema_id = body.get("schemaId") or settings.voyado_csat_schema_id

    try:
        result = await voyado.post_interaction(contact_id, schema_id, payload)
    except Exception as e:
        status_code = upstream_status(e)
        logger.error("Failed to create interaction: %s", e)
        return JSONResponse(
            status_code=status_code,
            content={"success": False, "error": str(e), "details": upstream_detail(e)},
        )

    return {"success": True, "interaction": {"schemaId": schema_id, "payload": payload}, "result": result}


@router.post("/test-voyado-review")
async def run_review(
    request: Request,
    orchestrator: ReviewOrchestrator = Depends(get_review_orchestrator),
):
    response = await handle_review(request, orchestrator)
    if isinstance(response, dict):
        return {**response, "test": True}
    return response


# --- DIXA ---

def _dixa_token(override: Optional[str], settings: Settings) -> Optional[str]:
    return override or settings.dixa_api_token


@router.get("/test-dixa-enduser-lookup")
async def lookup_end_user(
    email: Optional[str] = None,
    phone: Optional[str] = None,
    contactId: Optional[str] = None,
    dixaApiToken: Optional[str] = None,
    dixa: DixaService = Depends(get_dixa_service),
    settings: Settings = Depends(get_settings),
):
    if not (email or phone or contactId):
        return JSONResponse(status_code=400, content={"error": "Provide email, phone or contactId"})

    token = _dixa_token(dixaApiToken, settings)
    if not token:
        return JSONResponse(status_code=400, content={"error": "Dixa API token is not configured"})

    contact = {"email": email, "phone": phone, "externalId": contactId}
    end_user_id = await dixa.find_end_user(contact, token)
    if not end_user_id:
        return JSONResponse(status_code=404, content={"message": "End user not found", "contact": contact})
    return {"message": "End user found", "endUserId": end_user_id, "contact": contact}


@router.post("/test-dixa-enduser-create")
async def create_end_user(
    request: Request,
    dixa: DixaService = Depends(get_dixa_service),
    settings: Settings = Depends(get_settings),
):
    try:
        body = await _json_object(request)
    except PayloadError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})

    if not (body.get("email") or body.get("phone") or body.get("contactId")):
        return JSONResponse(status_code=400, content={"error": "Provide email, phone or contactId"})

    token = _dixa_token(body.get("dixaApiToken"), settings)
    if not token:
        return JSONResponse(status_code=400, content={"error": "Dixa API token is not configured"})

    contact = {
        "email": body.get("email"),
        "phone": body.get("phone"),
        "externalId": body.get("contactId"),
        "displayName": body.get("displayName"),
    }
    try:
        end_user_id = await dixa.create_end_user(contact, token)
    except Exception as e:
        status_code = upstream_status(e)
        logger.error("Failed to create Dixa end user: %s", e)
        return JSONResponse(status_code=status_code, content={"error": str(e), "details": upstream_detail(e)})

    return {"message": "End user created", "endUserId": end_user_id}


# --- BACKGROUND JOBS ---

@router.get("/background-failures")
async def get_background_failures(jobs: BackgroundJobs = Depends(get_background_jobs)):
    failures = jobs.failures
    return {"count": len(failures), "failures": [f.to_dict() for f in failures]}
