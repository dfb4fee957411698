"""
过度训练风险接口的请求和响应模式
"""

import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from .common import coerce_id, coerce_reference_date


class OvertrainingRequest(BaseModel):
    user_id: str = Field(..., min_length=1, description="用户ID（需与令牌一致）")
    today: Optional[datetime.date] = Field(None, description="参考日期，默认今天")
    days_to_analyze: int = Field(30, ge=14, le=365, description="读取最近多少天的活动")
    persist: bool = Field(True, description="是否保存评分快照")

    @field_validator("user_id", mode="before")
    @classmethod
    def _coerce_user(cls, v):
        return coerce_id(v)

    @field_validator("today", mode="before")
    @classmethod
    def _coerce_today(cls, v):
        return coerce_reference_date(v)


class OvertrainingRiskOut(BaseModel):
    score: int = Field(..., ge=0, le=100, description="风险分数 0~100")
    level: str = Field(..., description="baixo / medio / alto")
    factors: List[str] = Field(..., description="触发的风险因素")
    recommendation: str
    training_load_score: int
    frequency_score: int
    intensity_score: int
    volume_trend_score: int
    consecutive_days: int = Field(..., description="最近 7 天内最长连续训练天数")
    weekly_sessions: int = Field(..., description="最近 7 天训练次数")
    current_week_load: float
    previous_week_load: float
    avg_monthly_load: float


class OvertrainingResponse(BaseModel):
    success: bool = True
    user_id: str
    date: datetime.date
    activities_analyzed: int
    snapshot_id: Optional[int] = Field(None, description="保存的快照ID，persist=false 时为空")
    risk: OvertrainingRiskOut
