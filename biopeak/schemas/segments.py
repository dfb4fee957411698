"""
最佳分段接口的请求和响应模式
"""

from datetime import date
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .common import coerce_id


class BestSegmentRequest(BaseModel):
    """计算最佳 1 公里分段的请求"""
    activity_id: str = Field(..., min_length=1, description="活动ID")
    user_id: str = Field(..., min_length=1, description="用户ID（需与令牌一致）")

    @field_validator("activity_id", "user_id", mode="before")
    @classmethod
    def _coerce_ids(cls, v):
        return coerce_id(v)


class BestSegmentOut(BaseModel):
    """已保存（或即时计算）的最佳分段"""
    user_id: Optional[str] = Field(None, description="用户ID")
    activity_id: Optional[str] = Field(None, description="活动ID")
    activity_date: Optional[date] = Field(None, description="活动日期")
    best_1km_pace_min_km: float = Field(..., description="最佳配速（分钟/公里，保留三位小数）")
    segment_start_distance_meters: float = Field(..., description="分段起点距离（米）")
    segment_end_distance_meters: float = Field(..., description="分段终点距离（米）")
    segment_start_time_seconds: Optional[float] = Field(None, description="分段起点时间（秒）")
    segment_end_time_seconds: Optional[float] = Field(None, description="分段终点时间（秒）")
    segment_duration_seconds: float = Field(..., description="分段用时（秒）")
    model_config = ConfigDict(from_attributes=True)


class BestSegmentResponse(BaseModel):
    success: bool = True
    bestSegment: Optional[BestSegmentOut] = Field(None, description="最佳分段；活动不足 1 公里时为 null")
    message: str


class BestSegmentHistoryResponse(BaseModel):
    success: bool = True
    user_id: str
    segments: List[BestSegmentOut]
