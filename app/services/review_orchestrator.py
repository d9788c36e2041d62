"""
ReviewOrchestrator: Voyado product review -> Dixa conversation.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from app.config import ConfigurationError, Settings
from app.models.voyado_models import InteractionDetail
from app.services.dixa_service import DixaService
from app.services.payload_service import ReviewEvent
from app.services.voyado_service import VoyadoService

logger = logging.getLogger(__name__)


@dataclass
class ReviewResult:
    conversation_id: Any
    end_user_id: str
    contact_data: dict
    interaction_data: dict = field(default_factory=dict)

    def to_response(self) -> dict:
        return {
            "message": "Review processed and Dixa conversation created",
            "conversationId": self.conversation_id,
            "endUserId": self.end_user_id,
            "contactData": self.contact_data,
            "interactionData": self.interaction_data,
        }


@dataclass
class DixaCredentials:
    api_token: str
    email_integration_id: Optional[str]
    source: str  # "request" or "environment"


class ReviewOrchestrator:

    def __init__(self, voyado_service: VoyadoService, dixa_service: DixaService, settings: Settings):
        self.voyado = voyado_service
        self.dixa = dixa_service
        self.settings = settings

    def resolve_credentials(self, event: ReviewEvent) -> DixaCredentials:
        """Request overrides win over process configuration."""
        token = event.dixa_api_token or self.settings.dixa_api_token
        if not token:
            raise ConfigurationError("Dixa API token is not configured (set DIXA_API_TOKEN or send dixaApiToken)")

        return DixaCredentials(
            api_token=token,
            email_integration_id=event.dixa_email_integration_id or self.settings.dixa_email_integration_id,
            source="request" if event.dixa_api_token else "environment",
        )

    async def process(self, event: ReviewEvent) -> ReviewResult:
        # --- STEP 1: CREDENTIALS ---
        credentials = self.resolve_credentials(event)
        logger.info("Processing review (rating=%s) for %s using %s Dixa credentials",
                    event.rating, event.contact_data, credentials.source)

        # --- STEP 2: ENRICHMENT ---
        interaction_data = {"rating": event.rating}
        if event.contact_id:
            detail = await self._latest_interaction(event)
            if detail:
                payload = detail.payload or {}
                interaction_data = {
                    "interactionId": detail.id,
                    **payload,
                    "rating": event.rating if event.rating is not None else payload.get("rating"),
                }

        # --- STEP 3: END USER ---
        contact = {"email": event.email, "phone": event.phone, "externalId": event.contact_id}
        end_user_id = await self.dixa.get_or_create_end_user(contact, credentials.api_token)

        # --- STEP 4: CONVERSATION ---
        conversation = await self.dixa.create_conversation(
            end_user_id, interaction_data, credentials.api_token, credentials.email_integration_id
        )

        return ReviewResult(
            conversation_id=conversation.id,
            end_user_id=end_user_id,
            contact_data=event.contact_data,
            interaction_data=interaction_data,
        )

    async def _latest_interaction(self, event: ReviewEvent) -> Optional[InteractionDetail]:
        """The interaction named in the event, or the most recent one of the review schema."""
        if event.interaction_id:
            return await self.voyado.get_interaction(event.interaction_id)

        schema_id = event.schema_id or self.settings.voyado_review_schema_id
        interactions = await self.voyado.find_interactions(event.contact_id, schema_id)
        if not interactions:
            logger.info("No '%s' interactions for contact %s - continuing with rating only",
                        schema_id, event.contact_id)
            return None

        return await self.voyado.get_interaction(interactions[0].id)
