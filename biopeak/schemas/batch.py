"""
批处理接口的请求和响应模式
"""

import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from .common import coerce_id, coerce_reference_date


class BatchError(BaseModel):
    user_id: str
    error: str


class OvertrainingBatchRequest(BaseModel):
    batch_size: Optional[int] = Field(None, ge=1, le=200, description="每个窗口并发的用户数")
    days_active_threshold: Optional[int] = Field(None, ge=1, le=365, description="最近 N 天有活动的用户")
    days_to_analyze: int = Field(30, ge=14, le=365)
    today: Optional[datetime.date] = None

    @field_validator("today", mode="before")
    @classmethod
    def _coerce_today(cls, v):
        return coerce_reference_date(v)


class GasBackfillRequest(BaseModel):
    limit: int = Field(100, ge=1, le=5000)
    offset: int = Field(0, ge=0)
    user_id: Optional[str] = None
    date: Optional[datetime.date] = None
    concurrency: int = Field(3, ge=1, le=50)
    only_missing_today: bool = True

    @field_validator("user_id", mode="before")
    @classmethod
    def _coerce_user(cls, v):
        return coerce_id(v)

    @field_validator("date", mode="before")
    @classmethod
    def _coerce_date(cls, v):
        return coerce_reference_date(v)


class BatchResponse(BaseModel):
    log_id: Optional[int] = None
    job_name: str
    status: str
    date: datetime.date
    users_scanned: int = 0
    users_to_process: int = 0
    successful_calculations: int = 0
    failed_calculations: int = 0
    execution_time_seconds: float = 0.0
    errors: List[BatchError] = Field(default_factory=list)
