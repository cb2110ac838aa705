import logging

from fastapi import FastAPI

from bodylog.core.config import settings
from bodylog.core.db import Base, engine
from bodylog.api.v1.health import router as health_router
from bodylog.api.v1.bodyfat import router as bodyfat_router
from bodylog.api.v1.entries import router as entries_router
from bodylog.api.v1.photos import router as photos_router
from bodylog.api.v1.trends import router as trends_router
import bodylog.models  # noqa: F401  (registers tables on Base.metadata)

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="bodylog", version="1.0.0")

if engine:
    Base.metadata.create_all(bind=engine)

app.include_router(health_router, prefix="/v1")
app.include_router(bodyfat_router, prefix="/v1")
app.include_router(entries_router, prefix="/v1")
app.include_router(photos_router, prefix="/v1")
app.include_router(trends_router, prefix="/v1")
