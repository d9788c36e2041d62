import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import uvicorn
from fastapi import FastAPI

from app.config import SERVICE_NAME
from app.logging_config import setup_logging
from app.dependencies import close_clients, settings
from app.routers import dixa, voyado, diagnostics

setup_logging()

logger = logging.getLogger("app.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Dixa CSAT webhook endpoint: /webhook/dixa/csat")
    logger.info("Voyado review webhook endpoint: /webhook/voyado/review")
    logger.info("Voyado points webhook endpoint: /webhook/voyado/points")
    yield
    # In-flight background awards are not awaited here.
    logger.info("Shutting down, closing HTTP clients")
    await close_clients()


app = FastAPI(title=SERVICE_NAME, lifespan=lifespan)

# Include Routers
app.include_router(dixa.router)
app.include_router(voyado.router)
app.include_router(diagnostics.router)


@app.get("/")
def read_root():
    return {"message": "Dixa x Voyado webhook service is ready"}


@app.get("/health")
def health():
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": SERVICE_NAME,
    }


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
