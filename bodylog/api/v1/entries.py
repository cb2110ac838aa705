# bodylog/api/v1/entries.py

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.orm import Session

from bodylog.core.db import get_db
from bodylog.core.entry import MEASUREMENT_FIELDS, BodyFatMode, Entry, Sex, parse_date_key
from bodylog.core.photos import PHOTO_SLOTS
from bodylog.core.store import StorageError, list_entry_dates, load_entry, save_entry
from bodylog.core.units import inches_to_cm, lb_to_kg

router = APIRouter(prefix="/users/{user_id}/entries", tags=["entries"])


# ---------- Pydantic schemas ----------

class MeasurementsIn(BaseModel):
    """Circumferences and height, in inches."""

    neck: float | None = None
    waist: float | None = None
    hips: float | None = None
    height: float | None = None
    chest: float | None = None
    shoulders: float | None = None
    biceps: float | None = None
    forearms: float | None = None
    wrist: float | None = None
    upper_thigh: float | None = None
    lower_thigh: float | None = None
    calves: float | None = None


def _check_slots(paths: dict[str, str] | None) -> dict[str, str] | None:
    if paths:
        unknown = set(paths) - set(PHOTO_SLOTS)
        if unknown:
            raise ValueError(f"unknown photo slots: {sorted(unknown)}")
    return paths


class EntryIn(BaseModel):
    notes: str | None = None
    weight_lb: float | None = None
    sex: Sex = Sex.MALE
    measurements: MeasurementsIn = Field(default_factory=MeasurementsIn)
    body_fat_mode: BodyFatMode = BodyFatMode.MANUAL
    body_fat_percent: float | None = None
    photo_paths: dict[str, str] = Field(default_factory=dict)

    @field_validator("photo_paths")
    @classmethod
    def validate_photo_slots(cls, v):
        return _check_slots(v)


class EntryPatch(BaseModel):
    # Field order is the order edits are applied in: mode before value, so a
    # switch to manual followed by a typed value keeps the typed value.
    notes: str | None = None
    weight_lb: float | None = None
    sex: Sex | None = None
    measurements: MeasurementsIn | None = None
    body_fat_mode: BodyFatMode | None = None
    body_fat_percent: float | None = None
    photo_paths: dict[str, str | None] | None = None

    @field_validator("photo_paths")
    @classmethod
    def validate_photo_slots(cls, v):
        return _check_slots(v)


class EntryOut(BaseModel):
    date: str
    found: bool
    notes: str | None
    weight_lb: float | None
    weight_kg: float | None
    sex: Sex
    body_fat_percent: float | None
    body_fat_mode: BodyFatMode
    body_fat_estimate: float | None
    measurements: dict[str, float | None]
    measurements_cm: dict[str, float | None]
    photo_paths: dict[str, str]


def entry_out(entry: Entry, found: bool) -> EntryOut:
    estimate = entry.estimate()
    return EntryOut(
        date=entry.date.isoformat(),
        found=found,
        notes=entry.notes,
        weight_lb=entry.weight_lb,
        weight_kg=lb_to_kg(entry.weight_lb),
        sex=entry.sex,
        body_fat_percent=entry.body_fat_percent,
        body_fat_mode=entry.body_fat_mode,
        body_fat_estimate=round(estimate, 1) if estimate is not None else None,
        measurements=dict(entry.measurements),
        measurements_cm={
            name: inches_to_cm(entry.measurements.get(name)) for name in MEASUREMENT_FIELDS
        },
        photo_paths=dict(entry.photo_paths),
    )


def parse_date_param(date_str: str):
    d = parse_date_key(date_str)
    if d is None:
        raise HTTPException(status_code=400, detail="Invalid date format, expected YYYY-MM-DD")
    return d


def persist_entry(db: Session, user_id: str, entry: Entry) -> None:
    try:
        save_entry(db, user_id, entry)
    except StorageError as e:
        raise HTTPException(status_code=500, detail=f"Save failed: {e}")


def fetch_entry(db: Session, user_id: str, d) -> tuple[Entry, bool]:
    try:
        return load_entry(db, user_id, d)
    except StorageError as e:
        raise HTTPException(status_code=500, detail=f"Load failed: {e}")


# ---------- Endpoints ----------

@router.get("")
def list_entries(user_id: str, db: Session = Depends(get_db)):
    """
    Return all dates (YYYY-MM-DD) where the user has an entry.
    """
    try:
        dates = list_entry_dates(db, user_id)
    except StorageError as e:
        raise HTTPException(status_code=500, detail=f"Load failed: {e}")
    return {"status": "ok", "dates": [d.isoformat() for d in dates]}


@router.get("/{date_str}", response_model=EntryOut)
def get_entry(user_id: str, date_str: str, db: Session = Depends(get_db)):
    """
    Return the entry for a date, or a blank default entry (found=false).
    """
    d = parse_date_param(date_str)
    entry, found = fetch_entry(db, user_id, d)
    return entry_out(entry, found)


@router.put("/{date_str}", response_model=EntryOut)
def put_entry(user_id: str, date_str: str, payload: EntryIn, db: Session = Depends(get_db)):
    """
    Save a complete entry, replacing anything stored for that date.
    Body fat is resolved (auto estimate or manual value) before saving.
    """
    d = parse_date_param(date_str)
    entry = Entry.from_form(d, **payload.model_dump())
    persist_entry(db, user_id, entry)
    return entry_out(entry, True)


@router.patch("/{date_str}", response_model=EntryOut)
def patch_entry(user_id: str, date_str: str, payload: EntryPatch, db: Session = Depends(get_db)):
    """
    Apply individual field edits to the stored (or blank) entry and save it.
    """
    d = parse_date_param(date_str)
    entry, _ = fetch_entry(db, user_id, d)
    try:
        entry.apply(payload.model_dump(exclude_unset=True))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    persist_entry(db, user_id, entry)
    return entry_out(entry, True)
