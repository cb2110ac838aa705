# bodylog/api/v1/trends.py

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from bodylog.core.db import get_db
from bodylog.core.store import StorageError, load_history
from bodylog.core.trend import RANGE_LABELS, RangeKey, TrendSeries, compute_trends, range_start

router = APIRouter(prefix="/users/{user_id}/trends", tags=["trends"])


class PointOut(BaseModel):
    date: str
    label: str
    value: float


class SeriesOut(BaseModel):
    metric: str
    latest: float | None
    latest_date: str | None
    previous: float | None
    previous_date: str | None
    delta: float | None
    direction: str | None
    favorable: bool | None
    chartable: bool
    points: list[PointOut]


class TrendsOut(BaseModel):
    range: RangeKey
    range_label: str
    start: str | None
    metrics: dict[str, SeriesOut]


def series_out(series: TrendSeries) -> SeriesOut:
    latest, previous = series.latest, series.previous
    return SeriesOut(
        metric=series.metric.value,
        latest=latest.value if latest else None,
        latest_date=latest.date.isoformat() if latest else None,
        previous=previous.value if previous else None,
        previous_date=previous.date.isoformat() if previous else None,
        delta=series.delta,
        direction=series.direction,
        favorable=series.favorable,
        chartable=series.chartable,
        points=[
            PointOut(date=p.date.isoformat(), label=p.label, value=p.value)
            for p in series.points
        ],
    )


@router.get("", response_model=TrendsOut)
def get_trends(
    user_id: str,
    range: RangeKey = RangeKey.THIS_WEEK,
    now: datetime | None = None,
    db: Session = Depends(get_db),
):
    """
    Weight, body-fat and water series for the selected range.
    `now` defaults to the server's current local time.
    """
    now = now or datetime.now()

    try:
        history = load_history(db, user_id)
    except StorageError as e:
        raise HTTPException(status_code=500, detail=f"Load failed: {e}")

    start = range_start(range, now)
    trends = compute_trends(history, range, now)
    return TrendsOut(
        range=range,
        range_label=RANGE_LABELS[range],
        start=start.isoformat() if start else None,
        metrics={metric.value: series_out(s) for metric, s in trends.items()},
    )
