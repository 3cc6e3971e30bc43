from datetime import date
from typing import Optional
from pydantic import BaseModel

class PeriodKPI(BaseModel):
    current_period: Optional[float] = None
    current_period_progress: Optional[float] = None
    previous_period: Optional[float] = None
    is_last_period: Optional[bool] = None
    trend: Optional[float] = None

class ChartPoint(BaseModel):
    time: str
    value: float

class TotalSnapshot(BaseModel):
    amount: float
    day: date

class MetricSummary(BaseModel):
    metric: str
    weekly: PeriodKPI
    total: Optional[TotalSnapshot] = None

class AccountSummary(BaseModel):
    account_id: str
    timezone: str
    day: date
    metrics: list[MetricSummary]
