"""
CsatOrchestrator: Dixa CSAT rating -> Voyado points + interaction.

The webhook only validates, records the event and computes the award; the
Voyado calls run afterwards as a background job (see award()).
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Optional

from app.services.event_sink import EventSink
from app.services.payload_service import RatingEvent
from app.services.points_policy import calculate_points
from app.services.voyado_service import VoyadoService
from app.utils.helpers import detect_support_channel, parse_int

logger = logging.getLogger(__name__)

# Award outcomes
AWARDED = "awarded"
CONTACT_NOT_FOUND = "contact_not_found"
ACCOUNT_NOT_FOUND = "account_not_found"


@dataclass
class AwardResult:
    status: str
    points: int
    contact_id: Optional[str] = None
    account_id: Optional[str] = None
    transaction: Any = None
    interaction: Any = None
    interaction_payload: dict = field(default_factory=dict)


def resolve_conversation_id(event: RatingEvent) -> Any:
    """Dixa conversation id as int when possible, else the event id, else epoch millis."""
    conversation_id = parse_int(event.conversation_id)
    if conversation_id is not None:
        return conversation_id
    if event.event_id:
        return event.event_id
    return int(time.time() * 1000)


def build_interaction_payload(score: int, conversation_id: Any, channel: Optional[str]) -> dict:
    return {
        "csatScore": score,
        "conversationId": conversation_id,
        "supportChannel": detect_support_channel(channel),
    }


class CsatOrchestrator:
    """Orchestrates the CSAT pipeline, decoupled from HTTP."""

    def __init__(self, voyado_service: VoyadoService, event_sink: EventSink, csat_schema_id: str):
        self.voyado = voyado_service
        self.events = event_sink
        self.csat_schema_id = csat_schema_id

    def receive(self, event: RatingEvent) -> int:
        """Records the event as the latest one and returns the points to award."""
        self.events.publish(event)
        points = calculate_points(event.score)
        logger.info("Points to award: %s", points)
        return points

    async def award(self, event: RatingEvent, points: int) -> AwardResult:
        """
        Contact lookup -> point account lookup -> transaction -> interaction.
        A missing contact or account ends the pipeline without error.
        Write failures propagate.
        """
        # --- STEP 1: CONTACT ---
        contact_id = await self.voyado.find_contact_id(event.requester_email, "email")
        if not contact_id:
            logger.warning("No Voyado contact found for email: %s", event.requester_email)
            return AwardResult(status=CONTACT_NOT_FOUND, points=points)

        # --- STEP 2: POINT ACCOUNT ---
        # No fallback to the contact id: awards need an existing account.
        account_id = await self.voyado.find_point_account(contact_id)
        if not account_id:
            logger.warning("No point account found for contact %s - points cannot be awarded", contact_id)
            return AwardResult(status=ACCOUNT_NOT_FOUND, points=points, contact_id=contact_id)

        interaction_payload = build_interaction_payload(
            event.score, resolve_conversation_id(event), event.channel
        )

        # --- STEP 3: TRANSACTION ---
        description = f"CSAT feedback - Score: {event.score}/5 - {event.comment}"
        transaction = await self.voyado.post_point_transaction(account_id, points, description)

        # --- STEP 4: INTERACTION ---
        interaction = await self.voyado.post_interaction(contact_id, self.csat_schema_id, interaction_payload)

        logger.info("CSAT award complete: %s points for contact %s", points, contact_id)
        return AwardResult(
            status=AWARDED,
            points=points,
            contact_id=contact_id,
            account_id=account_id,
            transaction=transaction,
            interaction=interaction,
            interaction_payload=interaction_payload,
        )
