"""
GAS（Fitness-Fatigue）模型接口的请求和响应模式
"""

import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from .common import coerce_id, coerce_reference_date


class GasModelRequest(BaseModel):
    user_id: str = Field(..., min_length=1, description="用户ID（需与令牌一致）")
    today: Optional[datetime.date] = Field(None, description="参考日期，默认今天")
    persist: bool = Field(False, description="是否写入 users_gas_model")

    @field_validator("user_id", mode="before")
    @classmethod
    def _coerce_user(cls, v):
        return coerce_id(v)

    @field_validator("today", mode="before")
    @classmethod
    def _coerce_today(cls, v):
        return coerce_reference_date(v)


class GasModelResponse(BaseModel):
    user_id: str
    fitness: float = Field(..., description="健康度（保留两位小数）")
    fatigue: float = Field(..., description="疲劳度（保留两位小数）")
    performance: float = Field(..., description="表现 = fitness - fatigue")
    date: datetime.date
    activities_used: int
    activities_skipped: int
    persisted: bool = False
