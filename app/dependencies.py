from app.config import Settings
from app.services.background_service import BackgroundJobs
from app.services.csat_orchestrator import CsatOrchestrator
from app.services.dixa_service import DixaService
from app.services.event_sink import EventSink
from app.services.review_orchestrator import ReviewOrchestrator
from app.services.voyado_service import VoyadoService

# Initialize Singletons
settings = Settings.from_env()
voyado_service = VoyadoService(settings.voyado_base_url, settings.voyado_api_key, timeout=settings.http_timeout)
dixa_service = DixaService(settings.dixa_base_url, timeout=settings.http_timeout)
latest_csat_events = EventSink(capacity=1)
background_jobs = BackgroundJobs()

# Orchestrators
csat_orchestrator = CsatOrchestrator(
    voyado_service=voyado_service,
    event_sink=latest_csat_events,
    csat_schema_id=settings.voyado_csat_schema_id,
)
review_orchestrator = ReviewOrchestrator(
    voyado_service=voyado_service,
    dixa_service=dixa_service,
    settings=settings,
)


# FastAPI dependency providers (overridable in tests)

def get_settings() -> Settings:
    return settings


def get_voyado_service() -> VoyadoService:
    return voyado_service


def get_dixa_service() -> DixaService:
    return dixa_service


def get_event_sink() -> EventSink:
    return latest_csat_events


def get_background_jobs() -> BackgroundJobs:
    return background_jobs


def get_csat_orchestrator() -> CsatOrchestrator:
    return csat_orchestrator


def get_review_orchestrator() -> ReviewOrchestrator:
    return review_orchestrator


async def close_clients():
    await voyado_service.aclose()
    await dixa_service.aclose()
