import logging
from typing import Any, Dict, Optional

import httpx

from app.config import DIXA_API_BASE_URL
from app.models.dixa_models import Conversation, decode_conversation, decode_end_user, decode_end_users

logger = logging.getLogger(__name__)

DEFAULT_DISPLAY_NAME = "Voyado Customer"


def _contact_fields(contact: dict) -> Dict[str, str]:
    """email / phone / externalId of a contact, only the ones with a value."""
    fields = {
        "email": contact.get("email"),
        "phone": contact.get("phone"),
        "externalId": contact.get("externalId") or contact.get("contactId"),
    }
    return {key: value for key, value in fields.items() if value}


def format_enrichment(enrichment: dict) -> str:
    """Plain-text summary of the review data for the conversation body."""
    lines = ["A new product review was submitted in Voyado."]
    rating = enrichment.get("rating")
    if rating is not None:
        lines.append(f"Rating: {rating}/5")
    for key, value in enrichment.items():
        if key == "rating" or value in (None, ""):
            continue
        lines.append(f"{key}: {value}")
    return "\n".join(lines)


class DixaService:
    """
    Dixa (support inbox) client.
    The API token is passed per call so a webhook can override the default one.
    """

    def __init__(self, base_url: str = DIXA_API_BASE_URL, timeout: float = 10.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self):
        await self.client.aclose()

    def _headers(self, api_token: str) -> dict:
        return {"Authorization": f"Bearer {api_token}"}

    async def find_end_user(self, contact: dict, api_token: str) -> Optional[str]:
        """
        Looks up an end user by whichever of email / phone / externalId are present.
        Returns the first match's id, or None when nothing matches or the call fails.
        """
        params = _contact_fields(contact)
        if not params:
            return None

        try:
            logger.info("Looking up Dixa end user: %s", params)
            response = await self.client.get("/endusers", params=params, headers=self._headers(api_token))
            response.raise_for_status()
            end_users = decode_end_users(response.json())
        except httpx.HTTPStatusError as e:
            logger.error("Error looking up Dixa end user: %s", e)
            logger.error("Response status: %s", e.response.status_code)
            return None
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Error looking up Dixa end user: %s", e)
            return None

        if not end_users:
            logger.info("No Dixa end user found for %s", params)
            return None

        logger.info("Found Dixa end user: %s", end_users[0].id)
        return end_users[0].id

    async def create_end_user(self, contact: dict, api_token: str) -> str:
        """Creates an end user from the contact's present fields. Raises on failure."""
        fields = _contact_fields(contact)
        payload = {
            "displayName": contact.get("displayName") or fields.get("email") or fields.get("phone") or DEFAULT_DISPLAY_NAME,
        }
        if fields.get("email"):
            payload["email"] = fields["email"]
        if fields.get("phone"):
            payload["phoneNumber"] = fields["phone"]
        if fields.get("externalId"):
            payload["externalId"] = fields["externalId"]

        try:
            logger.info("Creating Dixa end user '%s'...", payload["displayName"])
            response = await self.client.post("/endusers", json=payload, headers=self._headers(api_token))
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error("Error creating Dixa end user: %s", e)
            logger.error("Detail: %s", e.response.text)
            raise
        except httpx.HTTPError as e:
            logger.error("Error creating Dixa end user: %s", e)
            raise

        end_user = decode_end_user(response.json())
        logger.info("Dixa end user created: %s", end_user.id)
        return end_user.id

    async def get_or_create_end_user(self, contact: dict, api_token: str) -> str:
        # Not atomic: two concurrent calls for the same contact may both create.
        end_user_id = await self.find_end_user(contact, api_token)
        if end_user_id:
            return end_user_id
        return await self.create_end_user(contact, api_token)

    async def create_conversation(self, end_user_id: str, enrichment: dict, api_token: str,
                                  email_integration_id: Optional[str] = None) -> Conversation:
        """Opens an inbound email conversation for the end user. Raises on failure."""
        rating = enrichment.get("rating")
        subject = f"Product review ({rating}/5)" if rating is not None else "Product review"

        payload: Dict[str, Any] = {
            "requesterId": end_user_id,
            "subject": subject,
            "message": {
                "content": {
                    "value": format_enrichment(enrichment),
                    "_type": "Text",
                },
                "_type": "Inbound",
            },
            "_type": "Email",
        }
        if email_integration_id:
            payload["emailIntegrationId"] = email_integration_id

        try:
            logger.info("Creating Dixa conversation for end user %s...", end_user_id)
            response = await self.client.post("/conversations", json=payload, headers=self._headers(api_token))
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error("Error creating Dixa conversation: %s", e)
            logger.error("Detail: %s", e.response.text)
            raise
        except httpx.HTTPError as e:
            logger.error("Error creating Dixa conversation: %s", e)
            raise

        conversation = decode_conversation(response.json())
        logger.info("Dixa conversation created: %s", conversation.id)
        return conversation
