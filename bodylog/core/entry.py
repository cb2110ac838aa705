"""
Single-date progress entry.

An entry is edited field by field. Body fat is either typed in by the user
(manual mode) or derived from neck/waist/hips/height via the Navy estimate
(auto mode). The mode switch is modelled as a small state machine:

- manual with no value: the first available estimate is adopted and the
  entry flips to auto (one-time promotion)
- manual with a value: measurement changes never touch it
- auto: every recompute overwrites the value with the current estimate,
  clearing it when there is no estimate
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date as DateType, datetime
from enum import Enum
from typing import Any, Mapping

from bodylog.core.bodyfat import estimate_body_fat
from bodylog.core.photos import PHOTO_SLOTS, clean_photo_paths, decode_photo_paths, encode_photo_paths
from bodylog.core.units import cm_to_inches, inches_to_cm, to_number

log = logging.getLogger(__name__)

MEASUREMENT_FIELDS = (
    "neck",
    "waist",
    "hips",
    "height",
    "chest",
    "shoulders",
    "biceps",
    "forearms",
    "wrist",
    "upper_thigh",
    "lower_thigh",
    "calves",
)

# changes to any of these (or to sex) re-run the estimate
FORMULA_FIELDS = ("neck", "waist", "hips", "height")


class Sex(str, Enum):
    MALE = "male"
    FEMALE = "female"


class BodyFatMode(str, Enum):
    AUTO = "auto"
    MANUAL = "manual"


def date_key(d: DateType) -> str:
    return d.isoformat()


def parse_date_key(value) -> DateType | None:
    """Accept YYYY-MM-DD or a full ISO-8601 timestamp; None if unparseable."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, DateType):
        return value
    if not value or not isinstance(value, str):
        return None

    text = value.strip()
    try:
        return DateType.fromisoformat(text)
    except ValueError:
        pass

    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        return None


# ---------- body-fat mode state machine ----------

@dataclass(frozen=True)
class BodyFatState:
    mode: BodyFatMode = BodyFatMode.MANUAL
    value: float | None = None


@dataclass(frozen=True)
class InputsChanged:
    estimate: float | None


@dataclass(frozen=True)
class ModeSelected:
    mode: BodyFatMode
    estimate: float | None


@dataclass(frozen=True)
class ValueEdited:
    value: float | None
    estimate: float | None


def _settle(state: BodyFatState, estimate: float | None) -> BodyFatState:
    if estimate is not None:
        estimate = round(estimate, 1)

    if state.mode is BodyFatMode.AUTO:
        return BodyFatState(BodyFatMode.AUTO, estimate)

    if state.value is None and estimate is not None:
        return BodyFatState(BodyFatMode.AUTO, estimate)

    return state


def transition(state: BodyFatState, event) -> BodyFatState:
    """Pure transition: (current state, event) -> new state."""
    if isinstance(event, ModeSelected):
        state = BodyFatState(BodyFatMode(event.mode), state.value)
    elif isinstance(event, ValueEdited):
        if state.mode is BodyFatMode.AUTO:
            # the estimator owns the value in auto mode
            log.debug("Ignoring body-fat edit %r while in auto mode", event.value)
        else:
            state = BodyFatState(BodyFatMode.MANUAL, event.value)
    elif not isinstance(event, InputsChanged):
        raise TypeError(f"Unknown body-fat event: {event!r}")

    return _settle(state, event.estimate)


# ---------- entry ----------

def _measurement(value) -> float | None:
    n = to_number(value)
    if n is not None and n < 0:
        log.debug("Dropping negative measurement %r", value)
        return None
    return n


def _body_fat(value) -> float | None:
    n = to_number(value)
    if n is not None and not 0 < n < 100:
        log.debug("Dropping out-of-range body fat %r", value)
        return None
    return n


def _weight(value) -> float | None:
    n = to_number(value)
    if n is not None and n <= 0:
        log.debug("Dropping non-positive weight %r", value)
        return None
    return n


def _stored_enum(enum_cls, value, default):
    if not value:
        return default
    try:
        return enum_cls(value)
    except ValueError:
        log.warning("Ignoring stored %s %r; using %s", enum_cls.__name__, value, default.value)
        return default


def _blank_measurements() -> dict[str, float | None]:
    return dict.fromkeys(MEASUREMENT_FIELDS)


@dataclass
class Entry:
    """One user's measurements, photos and notes for a calendar date.

    Measurements are held in inches (the editing unit); `to_record` converts
    them to centimetres for storage.
    """

    date: DateType
    notes: str | None = None
    weight_lb: float | None = None
    sex: Sex = Sex.MALE
    measurements: dict[str, float | None] = field(default_factory=_blank_measurements)
    photo_paths: dict[str, str] = field(default_factory=dict)
    body_fat: BodyFatState = field(default_factory=BodyFatState)

    @classmethod
    def blank(cls, d: DateType) -> "Entry":
        return cls(date=d)

    @property
    def body_fat_percent(self) -> float | None:
        return self.body_fat.value

    @property
    def body_fat_mode(self) -> BodyFatMode:
        return self.body_fat.mode

    def estimate(self) -> float | None:
        m = self.measurements
        return estimate_body_fat(
            self.sex,
            neck=m.get("neck"),
            waist=m.get("waist"),
            height=m.get("height"),
            hips=m.get("hips"),
        )

    def recompute(self) -> BodyFatState:
        self.body_fat = transition(self.body_fat, InputsChanged(self.estimate()))
        return self.body_fat

    # field edits

    def set_notes(self, notes: str | None) -> None:
        self.notes = notes or None

    def set_weight(self, value) -> None:
        self.weight_lb = _weight(value)

    def set_sex(self, sex) -> None:
        self.sex = Sex(sex)
        self.recompute()

    def set_measurement(self, name: str, inches) -> None:
        if name not in MEASUREMENT_FIELDS:
            raise ValueError(f"Unknown measurement: {name}")
        self.measurements[name] = _measurement(inches)
        if name in FORMULA_FIELDS:
            self.recompute()

    def set_body_fat_percent(self, value) -> None:
        self.body_fat = transition(self.body_fat, ValueEdited(_body_fat(value), self.estimate()))

    def select_body_fat_mode(self, mode) -> None:
        self.body_fat = transition(self.body_fat, ModeSelected(BodyFatMode(mode), self.estimate()))

    def set_photo(self, slot: str, path: str | None) -> None:
        slot = getattr(slot, "value", slot)
        if slot not in PHOTO_SLOTS:
            raise ValueError(f"Unknown photo slot: {slot}")
        if path:
            self.photo_paths[slot] = path
        else:
            self.photo_paths.pop(slot, None)

    def apply(self, changes: Mapping[str, Any]) -> None:
        """Apply a mapping of edits in order, as if typed one at a time."""
        for key, value in changes.items():
            if key == "notes":
                self.set_notes(value)
            elif key == "weight_lb":
                self.set_weight(value)
            elif key == "sex":
                self.set_sex(value)
            elif key == "measurements":
                for name, inches in (value or {}).items():
                    self.set_measurement(name, inches)
            elif key == "body_fat_mode":
                self.select_body_fat_mode(value)
            elif key == "body_fat_percent":
                self.set_body_fat_percent(value)
            elif key == "photo_paths":
                for slot, path in (value or {}).items():
                    self.set_photo(slot, path)
            else:
                raise ValueError(f"Unknown entry field: {key}")

    # storage

    def to_record(self) -> dict[str, Any]:
        """
        Normalized save payload: lengths in cm, body fat resolved, photos as JSON.

        Recomputes the derived body-fat value first so an entry built directly
        (rather than through the setters) is never saved stale.
        """
        self.recompute()
        record: dict[str, Any] = {
            "entry_date": self.date,
            "notes": self.notes,
            "weight_lb": self.weight_lb,
            "sex": self.sex.value,
            "body_fat_percent": self.body_fat.value,
            "body_fat_mode": self.body_fat.mode.value,
            "photos": encode_photo_paths(self.photo_paths),
        }
        for name in MEASUREMENT_FIELDS:
            record[f"{name}_cm"] = inches_to_cm(self.measurements.get(name))
        return record

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Entry":
        d = parse_date_key(record.get("entry_date"))
        if d is None:
            raise ValueError(f"Record has no valid entry_date: {record.get('entry_date')!r}")

        measurements = _blank_measurements()
        for name in MEASUREMENT_FIELDS:
            measurements[name] = _measurement(cm_to_inches(record.get(f"{name}_cm")))

        return cls(
            date=d,
            notes=record.get("notes") or None,
            weight_lb=_weight(record.get("weight_lb")),
            sex=_stored_enum(Sex, record.get("sex"), Sex.MALE),
            measurements=measurements,
            photo_paths=decode_photo_paths(record.get("photos")),
            body_fat=BodyFatState(
                _stored_enum(BodyFatMode, record.get("body_fat_mode"), BodyFatMode.MANUAL),
                _body_fat(record.get("body_fat_percent")),
            ),
        )

    @classmethod
    def from_form(
        cls,
        d: DateType,
        *,
        notes: str | None = None,
        weight_lb=None,
        sex=Sex.MALE,
        measurements: Mapping[str, Any] | None = None,
        body_fat_mode=BodyFatMode.MANUAL,
        body_fat_percent=None,
        photo_paths: Mapping[str, str] | None = None,
    ) -> "Entry":
        """Build an entry from a complete form submission and resolve body fat."""
        values = _blank_measurements()
        for name, inches in (measurements or {}).items():
            if name not in MEASUREMENT_FIELDS:
                raise ValueError(f"Unknown measurement: {name}")
            values[name] = _measurement(inches)

        entry = cls(
            date=d,
            notes=notes or None,
            weight_lb=_weight(weight_lb),
            sex=Sex(sex),
            measurements=values,
            photo_paths=clean_photo_paths(photo_paths),
            body_fat=BodyFatState(BodyFatMode(body_fat_mode), _body_fat(body_fat_percent)),
        )
        entry.recompute()
        return entry
