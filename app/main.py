"""
Irrigation Planner API application.
"""
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI

from app.core.config import settings
from app.database import init_db
from app.routers import irrigation

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    init_db()
    logger.info("Irrigation planner ready")
    yield


app = FastAPI(title="Irrigation Planner", lifespan=lifespan)
app.include_router(irrigation.router)


@app.get("/health")
async def health():
    return {"status": "ok"}
