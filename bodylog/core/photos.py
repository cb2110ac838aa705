"""
Progress-photo references.

An entry keeps one opaque storage path per slot. Paths are persisted as a
single JSON text blob and are only turned into viewable URLs on demand, by
asking object storage for a time-limited signed URL.
"""

import json
import logging
from datetime import date as DateType
from enum import Enum
from typing import Mapping
from urllib.parse import quote

import httpx

from bodylog.core.config import settings

log = logging.getLogger(__name__)


class PhotoSlot(str, Enum):
    FRONT = "front"
    SIDE = "side"
    BACK = "back"


PHOTO_SLOTS = tuple(s.value for s in PhotoSlot)


def photo_path(user_id: str, d: DateType, slot: str) -> str:
    """Storage path for a slot; stable so a re-upload overwrites the old photo."""
    slot = getattr(slot, "value", slot)
    if slot not in PHOTO_SLOTS:
        raise ValueError(f"Unknown photo slot: {slot}")
    return f"{user_id}/{d.isoformat()}/{slot}.jpg"


def clean_photo_paths(paths) -> dict[str, str]:
    if not isinstance(paths, Mapping):
        return {}
    return {
        slot: paths[slot]
        for slot in PHOTO_SLOTS
        if isinstance(paths.get(slot), str) and paths[slot]
    }


def encode_photo_paths(paths: Mapping[str, str] | None) -> str | None:
    cleaned = clean_photo_paths(paths)
    if not cleaned:
        return None
    return json.dumps(cleaned)


def decode_photo_paths(text: str | None) -> dict[str, str]:
    """Decode the stored JSON blob; anything unreadable means no photos."""
    if not text or not isinstance(text, str):
        return {}
    try:
        obj = json.loads(text)
    except (ValueError, RecursionError):
        log.warning("Ignoring malformed photo JSON: %.80r", text)
        return {}
    return clean_photo_paths(obj)


def sign_photo_url(
    path: str,
    expires_in: int | None = None,
    client: httpx.Client | None = None,
) -> str | None:
    """
    Ask object storage for a signed URL for `path`, valid for `expires_in` seconds.

    Returns None if storage is not configured or the request fails.
    """
    if not settings.STORAGE_URL or not settings.STORAGE_KEY:
        log.debug("Storage not configured; cannot sign %s", path)
        return None

    base = settings.STORAGE_URL.rstrip("/") + "/storage/v1"
    expires_in = expires_in or settings.SIGNED_URL_TTL_SECONDS
    headers = {
        "Authorization": f"Bearer {settings.STORAGE_KEY}",
        "apikey": settings.STORAGE_KEY,
    }

    own_client = client is None
    if own_client:
        client = httpx.Client(timeout=10.0)

    try:
        resp = client.post(
            f"{base}/object/sign/{settings.PHOTO_BUCKET}/{quote(path)}",
            json={"expiresIn": expires_in},
            headers=headers,
        )
        resp.raise_for_status()
        data = resp.json()
    except (httpx.HTTPError, ValueError) as e:
        log.warning("Signing photo %s failed: %s", path, e)
        return None
    finally:
        if own_client:
            client.close()

    signed = data.get("signedURL") if isinstance(data, dict) else None
    if not signed:
        return None
    return base + signed


def sign_photo_urls(
    paths: Mapping[str, str],
    expires_in: int | None = None,
    client: httpx.Client | None = None,
) -> dict[str, str | None]:
    urls: dict[str, str | None] = {slot: None for slot in PHOTO_SLOTS}
    for slot, path in clean_photo_paths(paths).items():
        urls[slot] = sign_photo_url(path, expires_in=expires_in, client=client)
    return urls
