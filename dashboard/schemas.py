from datetime import date
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class HealthCheck(BaseModel):
    status: str
    service: str
    version: str
    timestamp: float


class SeriesPointOut(BaseModel):
    start: date
    name: str
    days: int = Field(..., ge=0)
    value: float
    meta: str


class HabitSeriesOut(BaseModel):
    habit_id: str
    habit_name: str
    type: str
    period: str
    granularity: str
    start: date
    end: date
    y_max: Optional[int] = None
    tick_interval: int = 0
    points: List[SeriesPointOut] = []


class YearGoalOut(BaseModel):
    habit_id: str
    habit_name: str
    done: float
    goal: int
    ratio: float = Field(..., ge=0, le=1)
    percent: int


class RangeScoreOut(BaseModel):
    done: int
    total: int
    ratio: float


class SummaryOut(BaseModel):
    start: date
    end: date
    score: Optional[RangeScoreOut] = None
    nutrition: Dict[str, float]


class NoteOut(BaseModel):
    date: date
    gratitude: str = ""
    improve: str = ""
