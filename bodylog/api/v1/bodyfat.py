from fastapi import APIRouter
from pydantic import BaseModel, Field

from bodylog.core.bodyfat import estimate_body_fat
from bodylog.core.entry import Sex

router = APIRouter(prefix="/body-fat", tags=["body-fat"])


class EstimateIn(BaseModel):
    sex: Sex
    neck: float | None = Field(None, description="inches")
    waist: float | None = Field(None, description="inches")
    height: float | None = Field(None, description="inches")
    hips: float | None = Field(None, description="inches; required for female")


class EstimateOut(BaseModel):
    body_fat_percent: float | None
    sufficient: bool


@router.post("/estimate", response_model=EstimateOut)
def estimate(payload: EstimateIn):
    """
    Navy-method estimate without touching any stored entry.
    `sufficient` is false when the measurements cannot produce a plausible value.
    """
    bf = estimate_body_fat(
        payload.sex,
        neck=payload.neck,
        waist=payload.waist,
        height=payload.height,
        hips=payload.hips,
    )
    return EstimateOut(
        body_fat_percent=round(bf, 1) if bf is not None else None,
        sufficient=bf is not None,
    )
