"""
本文件定义了 BioPeak 分析服务使用的数据库模型（ORM类）。

1. Activity：各数据源（Garmin/Strava/Polar/HealthKit/Zepp/GPX）统一后的活动摘要，对应 all_activities 表。
2. ActivitySample：活动的逐点采样（累计距离 + 时间），按时间升序读取后用于最佳分段扫描。
3. BestSegment：每个活动的最佳 1 公里分段，(user_id, activity_id) 唯一。
4. OvertrainingScore：每次过度训练风险评分的快照（只插入，不更新）。
5. GasModelSnapshot：每日 GAS 模型结果，(user_id, calendar_date) 唯一。
6. BatchJobLog：批处理任务的运行记录。

用户 ID 使用认证系统签发的 UUID 字符串。
"""

import datetime

from sqlalchemy import (
    JSON,
    Column,
    Date,
    DateTime,
    Float,
    Integer,
    String,
    Text,
    UniqueConstraint,
)

from ..db_base import Base


class Activity(Base):
    """
    活动摘要表
    - activity_id: 数据源中的活动ID（字符串，不同数据源格式不同）
    - source: 数据源（garmin/strava/polar/healthkit/zepp/gpx）
    - total_time_minutes / duration_in_seconds: 时长，两者之一可能为空
    - active_kilocalories: 活动消耗卡路里
    """
    __tablename__ = 'all_activities'
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(36), nullable=False, index=True)
    activity_id = Column(String(64), nullable=False, index=True)
    source = Column(String(16), nullable=True)
    activity_type = Column(String(64), nullable=True)
    activity_date = Column(Date, nullable=False, index=True)
    total_time_minutes = Column(Float, nullable=True)
    duration_in_seconds = Column(Integer, nullable=True)
    total_distance_meters = Column(Float, nullable=True)
    average_heart_rate = Column(Float, nullable=True)
    max_heart_rate = Column(Float, nullable=True)
    active_kilocalories = Column(Float, nullable=True)

    @property
    def duration_minutes(self):
        """优先 total_time_minutes，缺失时由 duration_in_seconds 换算"""
        if self.total_time_minutes is not None:
            return self.total_time_minutes
        if self.duration_in_seconds is not None:
            return self.duration_in_seconds / 60.0
        return None


class ActivitySample(Base):
    """活动采样点表（sample_time_seconds 为 Unix 秒或相对秒，仅要求单调）"""
    __tablename__ = 'activity_samples'
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(36), nullable=False, index=True)
    activity_id = Column(String(64), nullable=False, index=True)
    sample_time_seconds = Column(Float, nullable=True)
    total_distance_meters = Column(Float, nullable=True)


class BestSegment(Base):
    """最佳 1 公里分段表"""
    __tablename__ = 'activity_best_segments'
    __table_args__ = (UniqueConstraint('user_id', 'activity_id', name='uq_best_segment_user_activity'),)
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(36), nullable=False, index=True)
    activity_id = Column(String(64), nullable=False)
    activity_date = Column(Date, nullable=True)
    best_1km_pace_min_km = Column(Float, nullable=False)
    segment_start_distance_meters = Column(Float, nullable=False)
    segment_end_distance_meters = Column(Float, nullable=False)
    segment_start_time_seconds = Column(Float, nullable=True)
    segment_end_time_seconds = Column(Float, nullable=True)
    segment_duration_seconds = Column(Float, nullable=False)
    updated_at = Column(DateTime, default=datetime.datetime.now, onupdate=datetime.datetime.now)


class OvertrainingScore(Base):
    """过度训练评分快照表"""
    __tablename__ = 'overtraining_scores'
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(36), nullable=False, index=True)
    score = Column(Integer, nullable=False)
    level = Column(String(8), nullable=False)
    factors = Column(JSON, nullable=False)
    recommendation = Column(Text, nullable=False)
    training_load_score = Column(Integer, default=0)
    frequency_score = Column(Integer, default=0)
    intensity_score = Column(Integer, default=0)
    volume_trend_score = Column(Integer, default=0)
    activities_analyzed = Column(Integer, default=0)
    days_analyzed = Column(Integer, default=30)
    reference_date = Column(Date, nullable=False)
    created_at = Column(DateTime, default=datetime.datetime.now)


class GasModelSnapshot(Base):
    """每日 GAS 模型结果表"""
    __tablename__ = 'users_gas_model'
    __table_args__ = (UniqueConstraint('user_id', 'calendar_date', name='uq_gas_user_date'),)
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(36), nullable=False, index=True)
    calendar_date = Column(Date, nullable=False)
    fitness = Column(Float, nullable=False)
    fatigue = Column(Float, nullable=False)
    performance = Column(Float, nullable=False)
    updated_at = Column(DateTime, default=datetime.datetime.now, onupdate=datetime.datetime.now)


class BatchJobLog(Base):
    """批处理运行记录表（status: running/completed/failed）"""
    __tablename__ = 'batch_job_logs'
    id = Column(Integer, primary_key=True, index=True)
    job_name = Column(String(32), nullable=False)
    status = Column(String(16), nullable=False, default='running')
    batch_size = Column(Integer, nullable=True)
    started_at = Column(DateTime, default=datetime.datetime.now)
    completed_at = Column(DateTime, nullable=True)
    total_users_processed = Column(Integer, default=0)
    successful_calculations = Column(Integer, default=0)
    failed_calculations = Column(Integer, default=0)
    execution_time_seconds = Column(Float, nullable=True)
    error_message = Column(Text, nullable=True)
    details = Column(JSON, nullable=True)
