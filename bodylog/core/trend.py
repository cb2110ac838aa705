"""
Trend aggregation over an entry history.

Given the history and a named range, produce per-metric chart points plus
the latest/previous comparison used by the progress cards. Entries that lack
a metric are skipped for that metric only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date as DateType, datetime, time, timedelta
from enum import Enum
from typing import Iterable


class RangeKey(str, Enum):
    THIS_WEEK = "thisWeek"
    THIS_MONTH = "thisMonth"
    THIS_YEAR = "thisYear"
    LAST_7 = "last7"
    LAST_28 = "last28"
    LAST_365 = "last365"
    ALL = "all"
    # placeholder until there is a date-range picker; same as ALL
    CUSTOM = "custom"


RANGE_LABELS = {
    RangeKey.THIS_WEEK: "This Week",
    RangeKey.THIS_MONTH: "This Month",
    RangeKey.THIS_YEAR: "This Year",
    RangeKey.LAST_7: "Last 7 Days",
    RangeKey.LAST_28: "Last 28 Days",
    RangeKey.LAST_365: "Last 365 Days",
    RangeKey.ALL: "All Time",
    RangeKey.CUSTOM: "Custom",
}

_ROLLING_DAYS = {
    RangeKey.LAST_7: 7,
    RangeKey.LAST_28: 28,
    RangeKey.LAST_365: 365,
}


class Metric(str, Enum):
    WEIGHT = "weight"
    BODY_FAT = "body_fat"
    WATER_PERCENT = "water_percent"


# A decrease is the good direction for these; water has no fixed preference.
LOWER_IS_BETTER = {Metric.WEIGHT, Metric.BODY_FAT}


@dataclass(frozen=True)
class TrendEntry:
    date: DateType
    weight: float | None = None
    body_fat: float | None = None
    water_percent: float | None = None

    def value(self, metric: Metric) -> float | None:
        return getattr(self, Metric(metric).value)


@dataclass(frozen=True)
class TrendPoint:
    date: DateType
    value: float

    @property
    def label(self) -> str:
        return f"{self.date.month}/{self.date.day}"


@dataclass
class TrendSeries:
    metric: Metric
    range: RangeKey
    points: list[TrendPoint] = field(default_factory=list)
    latest: TrendPoint | None = None
    previous: TrendPoint | None = None
    delta: float | None = None

    @property
    def chartable(self) -> bool:
        return len(self.points) >= 2

    @property
    def direction(self) -> str | None:
        if self.delta is None:
            return None
        if self.delta < 0:
            return "down"
        if self.delta > 0:
            return "up"
        return "flat"

    @property
    def favorable(self) -> bool | None:
        if self.delta is None or self.metric not in LOWER_IS_BETTER:
            return None
        return self.delta < 0


def _as_datetime(now) -> datetime:
    if isinstance(now, datetime):
        return now
    return datetime.combine(now, time.min)


def range_start(range_key: RangeKey, now) -> datetime | None:
    """Lower bound (inclusive) for a range, or None for the whole history."""
    range_key = RangeKey(range_key)
    now = _as_datetime(now)
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)

    if range_key is RangeKey.THIS_WEEK:
        # weekday(): Monday == 0, so Sunday is 6
        days_since_sunday = (now.weekday() + 1) % 7
        return midnight - timedelta(days=days_since_sunday)
    if range_key is RangeKey.THIS_MONTH:
        return midnight.replace(day=1)
    if range_key is RangeKey.THIS_YEAR:
        return midnight.replace(month=1, day=1)
    if range_key in _ROLLING_DAYS:
        return now - timedelta(days=_ROLLING_DAYS[range_key])
    return None


def filter_range(history: Iterable[TrendEntry], range_key: RangeKey, now) -> list[TrendEntry]:
    entries = sorted(history, key=lambda e: e.date)
    start = range_start(range_key, now)
    if start is None:
        return entries
    return [
        e for e in entries
        if datetime.combine(e.date, time.min, tzinfo=start.tzinfo) >= start
    ]


def _delta(latest: TrendPoint | None, previous: TrendPoint | None) -> float | None:
    if latest is None or previous is None:
        return None
    return round(latest.value - previous.value, 1)


def _points(entries: list[TrendEntry], metric: Metric) -> list[TrendPoint]:
    points = []
    for e in entries:
        v = e.value(metric)
        if v is not None:
            points.append(TrendPoint(e.date, v))
    return points


def compute_trend(
    history: Iterable[TrendEntry],
    range_key: RangeKey,
    now,
    metric: Metric,
) -> TrendSeries:
    """
    Build the series for one metric.

    `latest` is the newest in-range value; when the range holds none, the
    newest value anywhere in the history is used instead. `previous` is the
    value just before `latest`, taken from the range when possible and from
    the full history otherwise.
    """
    range_key = RangeKey(range_key)
    metric = Metric(metric)

    entries = sorted(history, key=lambda e: e.date)
    in_range = filter_range(entries, range_key, now)

    points = _points(in_range, metric)
    everything = _points(entries, metric)

    latest = previous = None
    if points:
        latest = points[-1]
        if len(points) >= 2:
            previous = points[-2]
        else:
            earlier = [p for p in everything if p.date < latest.date]
            previous = earlier[-1] if earlier else None
    elif everything:
        latest = everything[-1]
        previous = everything[-2] if len(everything) >= 2 else None

    return TrendSeries(
        metric=metric,
        range=range_key,
        points=points,
        latest=latest,
        previous=previous,
        delta=_delta(latest, previous),
    )


def compute_trends(history: Iterable[TrendEntry], range_key: RangeKey, now) -> dict[Metric, TrendSeries]:
    entries = list(history)
    return {metric: compute_trend(entries, range_key, now, metric) for metric in Metric}
