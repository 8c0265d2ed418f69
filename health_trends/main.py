import logging
import secrets
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Annotated, List, Optional

import httpx
import sqlalchemy
import uvicorn
from databases import Database
from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse

from . import config
from .models import TrendPreview, metadata
from .pipeline import build_http_client, run_pipeline
from .store import TrendStore

logger = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO)


@lru_cache
def get_settings() -> config.Settings:
    return config.Settings()  # type: ignore


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logging.getLogger().setLevel(settings.LOG_LEVEL)

    db = Database(settings.DB_URL)
    app.state.db = db
    await db.connect()
    engine = sqlalchemy.create_engine(settings.DB_URL)
    metadata.create_all(engine)

    app.state.http = build_http_client(settings)

    yield

    await app.state.http.aclose()
    await db.disconnect()


async def get_db(request: Request) -> Database:
    return request.app.state.db


async def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http


def is_authorized(provided: Optional[str], expected: Optional[str]) -> bool:
    if not expected or provided is None:
        return False
    return secrets.compare_digest(provided.encode(), expected.encode())


app = FastAPI(title="Health Trends", lifespan=lifespan)


@app.get("/daily-health-scraper")
async def daily_health_scraper(
    db: Annotated[Database, Depends(get_db)],
    client: Annotated[httpx.AsyncClient, Depends(get_http_client)],
    settings: Annotated[config.Settings, Depends(get_settings)],
    secret: Optional[str] = None,
):
    if not is_authorized(secret, settings.CRON_SECRET):
        return JSONResponse({"error": "Unauthorized"}, status_code=401)

    try:
        result = await run_pipeline(settings, db, client)
    except Exception as e:
        logger.exception("Health trends run failed: %s", e)
        return JSONResponse({"error": str(e)}, status_code=500)

    return JSONResponse({"message": result.message}, status_code=200)


@app.get("/trends", response_model=List[TrendPreview])
async def trends(
    db: Annotated[Database, Depends(get_db)],
    limit: Annotated[int, Query(ge=1, le=60)] = 3,
):
    return await TrendStore(db).random_published(limit)


@app.get("/health")
async def health():
    return {"status": "ok"}


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
