"""
Process-wide configuration read from the environment (.env supported).
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

DIXA_API_BASE_URL = "https://dev.dixa.io/v1"
DEFAULT_CSAT_SCHEMA_ID = "csatRating"
DEFAULT_REVIEW_SCHEMA_ID = "completedProductRating"
SERVICE_NAME = "Dixa-Voyado Webhook Service"


class ConfigurationError(Exception):
    """A required credential or setting is missing for the current request."""


@dataclass
class Settings:
    voyado_base_url: str = ""
    voyado_api_key: Optional[str] = None
    voyado_csat_schema_id: str = DEFAULT_CSAT_SCHEMA_ID
    voyado_review_schema_id: str = DEFAULT_REVIEW_SCHEMA_ID
    dixa_base_url: str = DIXA_API_BASE_URL
    dixa_api_token: Optional[str] = None
    dixa_email_integration_id: Optional[str] = None
    http_timeout: float = 10.0
    port: int = 3000

    @classmethod
    def from_env(cls) -> "Settings":
        settings = cls(
            voyado_base_url=(os.getenv("VOYADO_API_BASE_URL") or "").rstrip("/"),
            voyado_api_key=os.getenv("VOYADO_API_KEY"),
            voyado_csat_schema_id=os.getenv("VOYADO_CSAT_SCHEMA_ID") or DEFAULT_CSAT_SCHEMA_ID,
            voyado_review_schema_id=os.getenv("VOYADO_REVIEW_SCHEMA_ID") or DEFAULT_REVIEW_SCHEMA_ID,
            dixa_api_token=os.getenv("DIXA_API_TOKEN"),
            dixa_email_integration_id=os.getenv("DIXA_EMAIL_INTEGRATION_ID"),
            http_timeout=float(os.getenv("HTTP_TIMEOUT_SECONDS") or "10"),
            port=int(os.getenv("PORT") or "3000"),
        )

        if not settings.voyado_base_url:
            logger.warning("VOYADO_API_BASE_URL not found in env")
        if not settings.voyado_api_key:
            logger.warning("VOYADO_API_KEY not found in env")
        if not settings.dixa_api_token:
            logger.warning("DIXA_API_TOKEN not found in env (requests must supply dixaApiToken)")

        return settings
