from fastapi import APIRouter
from bodylog.core.config import settings
from bodylog.core.db import engine

router = APIRouter(tags=["health"])


@router.get("/health")
def health():
    return {
        "status": "ok",
        "environment": settings.ENVIRONMENT,
        "db": engine is not None,
        "storage": bool(settings.STORAGE_URL and settings.STORAGE_KEY),
    }
