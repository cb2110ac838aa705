# bodylog/api/v1/photos.py

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from bodylog.api.v1.entries import fetch_entry, persist_entry, parse_date_param
from bodylog.core.config import settings
from bodylog.core.db import get_db
from bodylog.core.photos import PhotoSlot, photo_path, sign_photo_urls

router = APIRouter(prefix="/users/{user_id}/entries/{date_str}/photos", tags=["photos"])


class PhotoRefIn(BaseModel):
    # Storage path of an already-uploaded photo; defaults to {user}/{date}/{slot}.jpg
    path: str | None = None


@router.get("")
def get_photo_urls(user_id: str, date_str: str, db: Session = Depends(get_db)):
    """
    Signed, time-limited URLs for the entry's photos (null where a slot is
    empty or signing failed).
    """
    d = parse_date_param(date_str)
    entry, _ = fetch_entry(db, user_id, d)
    return {
        "status": "ok",
        "date": d.isoformat(),
        "expires_in": settings.SIGNED_URL_TTL_SECONDS,
        "urls": sign_photo_urls(entry.photo_paths),
    }


@router.put("/{slot}")
def set_photo(
    user_id: str,
    date_str: str,
    slot: PhotoSlot,
    payload: PhotoRefIn | None = None,
    db: Session = Depends(get_db),
):
    """
    Record the storage reference for one photo slot of an entry.
    """
    d = parse_date_param(date_str)
    path = (payload.path if payload else None) or photo_path(user_id, d, slot)

    entry, _ = fetch_entry(db, user_id, d)
    entry.set_photo(slot, path)
    persist_entry(db, user_id, entry)
    return {"status": "ok", "date": d.isoformat(), "slot": slot.value, "path": path}


@router.delete("/{slot}")
def clear_photo(user_id: str, date_str: str, slot: PhotoSlot, db: Session = Depends(get_db)):
    d = parse_date_param(date_str)
    entry, _ = fetch_entry(db, user_id, d)
    entry.set_photo(slot, None)
    persist_entry(db, user_id, entry)
    return {"status": "ok", "date": d.isoformat(), "slot": slot.value, "photo_paths": entry.photo_paths}
