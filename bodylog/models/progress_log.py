# bodylog/models/progress_log.py

from datetime import datetime

from sqlalchemy import Column, Date, DateTime, Float, Integer, String, Text, UniqueConstraint

from bodylog.core.db import Base


class ProgressLog(Base):
    """
    One user's body-composition entry for a calendar date.
    Lengths are stored in centimetres; photos as a JSON blob of storage paths.
    """

    __tablename__ = "progress_logs"
    __table_args__ = (UniqueConstraint("user_id", "entry_date", name="uq_progress_user_date"),)

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(String(64), nullable=False, index=True)
    entry_date = Column(Date, nullable=False, index=True)

    notes = Column(Text)

    weight_lb = Column(Float)
    body_fat_percent = Column(Float)
    body_fat_mode = Column(String(16), nullable=False, default="manual")
    sex = Column(String(16), nullable=False, default="male")

    # Circumferences / lengths
    neck_cm = Column(Float)
    waist_cm = Column(Float)
    hips_cm = Column(Float)
    height_cm = Column(Float)
    chest_cm = Column(Float)
    shoulders_cm = Column(Float)
    biceps_cm = Column(Float)
    forearms_cm = Column(Float)
    wrist_cm = Column(Float)
    upper_thigh_cm = Column(Float)
    lower_thigh_cm = Column(Float)
    calves_cm = Column(Float)

    # {"front": path, "side": path, "back": path}
    photos = Column(Text)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
