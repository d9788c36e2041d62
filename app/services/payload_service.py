"""
PayloadService: Extracts and validates data from incoming webhook payloads.
Dixa CSAT ratings, Voyado product reviews and Voyado point-balance updates.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Dict, Any

from app.utils.helpers import get_nested_value, utc_now_iso

logger = logging.getLogger(__name__)

CONVERSATION_RATED = "CONVERSATION_RATED"
POINT_BALANCE_UPDATED = "point.balance.updated"

MISSING_IDENTIFIER_MESSAGE = "Missing contact identifier: one of contactId, email or phone is required"


class PayloadError(ValueError):
    """Inbound webhook body is malformed or incomplete (HTTP 400)."""


# --- DIXA CSAT ---

@dataclass
class RatingEvent:
    """Normalized data extracted from a Dixa CONVERSATION_RATED webhook."""
    score: int
    requester_email: str
    comment: str = ""
    requester_name: str = ""
    event_id: str = ""
    conversation_id: Optional[Any] = None
    channel: str = ""
    received_at: str = field(default_factory=utc_now_iso)

    # Raw payload (returned by /latest-csat)
    raw_body: Dict[str, Any] = field(default_factory=dict)


def extract_rating_event(raw_body: Any) -> RatingEvent:
    if not isinstance(raw_body, dict) or raw_body.get('event_fqn') != CONVERSATION_RATED:
        raise PayloadError("Invalid event type")

    score = get_nested_value(raw_body, ['data', 'score'])
    if isinstance(score, bool) or not isinstance(score, int):
        raise PayloadError("Missing or invalid field: data.score")
    if not 1 <= score <= 5:
        raise PayloadError("Invalid field: data.score must be between 1 and 5")

    email = get_nested_value(raw_body, ['data', 'conversation', 'requester', 'email'])
    if not email or not isinstance(email, str):
        raise PayloadError("Missing field: data.conversation.requester.email")

    event = RatingEvent(
        score=score,
        requester_email=email,
        comment=get_nested_value(raw_body, ['data', 'comment']) or "",
        requester_name=get_nested_value(raw_body, ['data', 'conversation', 'requester', 'name']) or "",
        event_id=raw_body.get('event_id') or "",
        conversation_id=(
            get_nested_value(raw_body, ['data', 'conversation', 'csid'])
            or get_nested_value(raw_body, ['data', 'conversation', 'id'])
        ),
        channel=get_nested_value(raw_body, ['data', 'conversation', 'channel']) or "",
        raw_body=raw_body,
    )

    logger.info("CSAT Rating: %s/5 - \"%s\" from %s (%s)",
                event.score, event.comment, event.requester_name, event.requester_email)
    return event


# --- VOYADO REVIEW ---

@dataclass
class ReviewEvent:
    """Normalized data extracted from a Voyado product-review webhook."""
    contact_id: str = ""
    email: str = ""
    phone: str = ""
    rating: Optional[Any] = None
    schema_id: str = ""
    interaction_id: str = ""

    # Per-request credential overrides
    dixa_api_token: str = ""
    dixa_email_integration_id: str = ""

    @property
    def contact_data(self) -> dict:
        return {"contactId": self.contact_id or None, "email": self.email or None, "phone": self.phone or None}


def extract_review_event(raw_body: Any) -> ReviewEvent:
    if not isinstance(raw_body, dict):
        raise PayloadError("Request body must be a JSON object")

    event = ReviewEvent(
        contact_id=str(raw_body.get('contactId') or '').strip(),
        email=str(raw_body.get('email') or '').strip(),
        phone=str(raw_body.get('phone') or '').strip(),
        rating=raw_body.get('rating'),
        schema_id=raw_body.get('schemaId') or '',
        interaction_id=str(raw_body.get('interactionId') or ''),
        dixa_api_token=raw_body.get('dixaApiToken') or '',
        dixa_email_integration_id=raw_body.get('dixaEmailIntegrationId') or '',
    )

    if not (event.contact_id or event.email or event.phone):
        logger.warning("Review webhook without contactId, email or phone")
        raise PayloadError(MISSING_IDENTIFIER_MESSAGE)

    return event


# --- VOYADO POINT BALANCE ---

@dataclass
class PointBalanceEvent:
    event_id: str = ""
    account_id: Optional[Any] = None
    contact_id: str = ""
    balance: Optional[float] = None
    balance_expires: str = ""
    definition_id: Optional[Any] = None


def extract_point_balance_event(raw_body: Any) -> PointBalanceEvent:
    if not isinstance(raw_body, dict) or raw_body.get('eventType') != POINT_BALANCE_UPDATED:
        raise PayloadError("Invalid event type")

    payload = raw_body.get('payload') or {}
    if not isinstance(payload, dict):
        raise PayloadError("Invalid field: payload")

    return PointBalanceEvent(
        event_id=raw_body.get('eventId') or "",
        account_id=payload.get('accountId'),
        contact_id=payload.get('contactId') or "",
        balance=payload.get('balance'),
        balance_expires=payload.get('balanceExpires') or "",
        definition_id=payload.get('definitionId'),
    )


async def read_json(request) -> Any:
    """Parsed JSON body of a request; PayloadError when it is not valid JSON."""
    try:
        return await request.json()
    except ValueError:
        raise PayloadError("Request body must be valid JSON")
