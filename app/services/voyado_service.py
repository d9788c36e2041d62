import logging
import uuid
from typing import Any, List, Optional

import httpx

from app.models.voyado_models import (
    InteractionDetail,
    InteractionSummary,
    decode_contact_id,
    decode_interaction_detail,
    decode_interactions,
    decode_point_accounts,
)
from app.utils.helpers import utc_now_iso

logger = logging.getLogger(__name__)

USER_AGENT = "DixaVoyadoService/1.0"


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


class VoyadoService:
    """
    Voyado (loyalty/CRM) client.

    Lookups never raise: any network, HTTP or decode failure is logged and
    reported as not-found (None / []). Writes log and re-raise so the caller
    can abort its pipeline step.
    """

    def __init__(self, base_url: str, api_key: Optional[str], timeout: float = 10.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = (base_url or "").rstrip("/")
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "apikey": api_key or "",
                "Content-Type": "application/json",
                "User-Agent": USER_AGENT,
            },
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self):
        await self.client.aclose()

    # --- Contacts ---

    async def find_contact_id(self, identifier: str, kind: str = "email") -> Optional[str]:
        """Contact id for an email address or mobile phone number, or None."""
        query_param = "mobilePhone" if kind == "phone" else "email"

        try:
            logger.info("Looking up contact with %s: %s", kind, identifier)
            response = await self.client.get("/contacts/id", params={query_param: identifier})
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error("Error looking up contact: %s", e)
            logger.error("Response status: %s", e.response.status_code)
            return None
        except httpx.HTTPError as e:
            logger.error("Error looking up contact: %s", e)
            return None

        contact_id = decode_contact_id(_response_body(response))
        if contact_id:
            logger.info("Found contact ID: %s", contact_id)
        else:
            logger.info("No contact found for %s: %s", kind, identifier)
        return contact_id

    # --- Point accounts ---

    async def find_point_account(self, contact_id: str) -> Optional[str]:
        """Id of the first point account of a contact, or None."""
        try:
            logger.info("Getting point account for contact: %s", contact_id)
            response = await self.client.get("/point-accounts", params={"contactId": contact_id})
            response.raise_for_status()
            accounts = decode_point_accounts(response.json())
        except httpx.HTTPStatusError as e:
            logger.error("Error getting point account: %s", e)
            logger.error("Response status: %s", e.response.status_code)
            return None
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Error getting point account: %s", e)
            return None

        if not accounts:
            logger.info("No point account found for contact: %s", contact_id)
            return None

        account_id = str(accounts[0].id)
        logger.info("Found point account: %s", account_id)
        return account_id

    async def post_point_transaction(self, account_id: str, amount: int, description: str) -> Any:
        """Adds `amount` points to a point account. Raises on failure."""
        now = utc_now_iso()
        payload = {
            "accountId": account_id,
            "transactionId": str(uuid.uuid4()),
            "transactionType": "Addition",
            "amount": amount,
            "description": description,
            "source": "Automation",
            "transactionDate": now,
            "validFrom": now,
            "validTo": None,
        }

        try:
            logger.info("Adding %s points to point account %s (transaction %s)",
                        amount, account_id, payload["transactionId"])
            response = await self.client.post("/point-transactions", json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error("Error adding points to Voyado: %s", e)
            logger.error("Detail: %s", e.response.text)
            raise
        except httpx.HTTPError as e:
            logger.error("Error adding points to Voyado: %s", e)
            raise

        logger.info("Successfully added %s points to point account %s", amount, account_id)
        return _response_body(response)

    # --- Interactions ---

    async def post_interaction(self, contact_id: str, schema_id: str, payload: dict) -> Any:
        """Creates an interaction record for a contact. Raises on failure."""
        body = {
            "contactId": contact_id,
            "schemaId": schema_id,
            "createdDate": utc_now_iso(),
            "payload": payload,
        }

        try:
            logger.info("Creating '%s' interaction for contact %s", schema_id, contact_id)
            response = await self.client.post("/interactions", json=body)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error("Error creating interaction: %s", e)
            logger.error("Detail: %s", e.response.text)
            raise
        except httpx.HTTPError as e:
            logger.error("Error creating interaction: %s", e)
            raise

        logger.info("Interaction created for contact %s", contact_id)
        return _response_body(response)

    async def find_interactions(self, contact_id: str, schema_id: str) -> List[InteractionSummary]:
        """Interactions of a contact for one schema, most recent first."""
        try:
            response = await self.client.get(
                "/interactions", params={"contactId": contact_id, "schemaId": schema_id}
            )
            response.raise_for_status()
            interactions = decode_interactions(response.json())
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Error listing '%s' interactions for %s: %s", schema_id, contact_id, e)
            return []

        logger.info("Found %s '%s' interaction(s) for contact %s", len(interactions), schema_id, contact_id)
        return interactions

    async def get_interaction(self, interaction_id: str) -> Optional[InteractionDetail]:
        try:
            response = await self.client.get(f"/interactions/{interaction_id}")
            response.raise_for_status()
            return decode_interaction_detail(response.json())
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Error getting interaction %s: %s", interaction_id, e)
            return None
