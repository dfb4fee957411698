from typing import List, Optional, Tuple
from datetime import date
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
import logging

from ..core.analytics.segments import SamplePoint, samples_from_points
from ..db.models import Activity, ActivitySample
from ..errors import UpstreamFailure

logger = logging.getLogger(__name__)


def get_activity(db: Session, user_id: str, activity_id: str) -> Optional[Activity]:
    try:
        return db.query(Activity).filter(
            Activity.user_id == user_id,
            Activity.activity_id == activity_id,
        ).first()
    except SQLAlchemyError as e:
        logger.error("[db-error][activity-select] user_id=%s activity_id=%s err=%s", user_id, activity_id, e)
        raise UpstreamFailure("Failed to fetch activity") from e


def get_user_activities(
    db: Session,
    user_id: str,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> List[Activity]:
    """按日期升序返回用户在 [start_date, end_date] 内的活动，两端均可省略"""
    try:
        query = db.query(Activity).filter(Activity.user_id == user_id)
        if start_date is not None:
            query = query.filter(Activity.activity_date >= start_date)
        if end_date is not None:
            query = query.filter(Activity.activity_date <= end_date)
        return query.order_by(Activity.activity_date.asc(), Activity.id.asc()).all()
    except SQLAlchemyError as e:
        logger.error("[db-error][activities-select] user_id=%s err=%s", user_id, e)
        raise UpstreamFailure("Failed to fetch activities") from e


def get_activity_samples(db: Session, user_id: str, activity_id: str) -> Tuple[List[float], List[float]]:
    """读取活动采样，按时间升序，跳过距离或时间为空的点

    返回：
        (distance, time) 两个等长列表
    """
    try:
        rows = db.query(
            ActivitySample.total_distance_meters,
            ActivitySample.sample_time_seconds,
        ).filter(
            ActivitySample.user_id == user_id,
            ActivitySample.activity_id == activity_id,
            ActivitySample.total_distance_meters.isnot(None),
            ActivitySample.sample_time_seconds.isnot(None),
        ).order_by(ActivitySample.sample_time_seconds.asc(), ActivitySample.id.asc()).all()
    except SQLAlchemyError as e:
        logger.error("[db-error][samples-select] user_id=%s activity_id=%s err=%s", user_id, activity_id, e)
        raise UpstreamFailure("Failed to fetch activity samples") from e
    return samples_from_points([SamplePoint(r[0], r[1]) for r in rows])


def get_active_user_ids(
    db: Session,
    since: Optional[date] = None,
    limit: Optional[int] = None,
    offset: int = 0,
) -> List[str]:
    """有活动的用户（去重、按 user_id 排序），since 为空时不限日期"""
    try:
        query = db.query(Activity.user_id)
        if since is not None:
            query = query.filter(Activity.activity_date >= since)
        query = query.distinct().order_by(Activity.user_id.asc())
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        rows = query.all()
    except SQLAlchemyError as e:
        logger.error("[db-error][active-users] since=%s err=%s", since, e)
        raise UpstreamFailure("Failed to fetch active users") from e
    return [r[0] for r in rows]


def has_activities(db: Session, user_id: str) -> bool:
    try:
        return db.query(Activity.id).filter(Activity.user_id == user_id).first() is not None
    except SQLAlchemyError as e:
        logger.error("[db-error][activity-exists] user_id=%s err=%s", user_id, e)
        raise UpstreamFailure("Failed to fetch activities") from e
