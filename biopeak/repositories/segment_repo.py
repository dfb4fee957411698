from typing import List, Optional
from datetime import date
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
import logging

from ..core.analytics.segments import BestSegmentResult
from ..db.models import BestSegment
from ..errors import UpstreamFailure

logger = logging.getLogger(__name__)


def upsert_best_segment(
    db: Session,
    user_id: str,
    activity_id: str,
    segment: BestSegmentResult,
    activity_date: Optional[date] = None,
) -> BestSegment:
    """按 (user_id, activity_id) 插入或更新最佳分段

    重复计算同一活动只会覆盖原记录。
    """
    try:
        row = db.query(BestSegment).filter(
            BestSegment.user_id == user_id,
            BestSegment.activity_id == activity_id,
        ).first()
        if row is None:
            row = BestSegment(user_id=user_id, activity_id=activity_id)
            db.add(row)
        row.activity_date = activity_date
        row.best_1km_pace_min_km = round(segment.best_pace_min_per_km, 3)
        row.segment_start_distance_meters = segment.start_distance
        row.segment_end_distance_meters = segment.end_distance
        row.segment_start_time_seconds = segment.start_time
        row.segment_end_time_seconds = segment.end_time
        row.segment_duration_seconds = round(segment.duration_seconds, 1)
        db.commit()
        db.refresh(row)
        return row
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("[db-error][best-segment-upsert] user_id=%s activity_id=%s err=%s", user_id, activity_id, e)
        raise UpstreamFailure(f"Failed to save segment: {e.__class__.__name__}") from e


def list_best_segments(db: Session, user_id: str, limit: int = 50) -> List[BestSegment]:
    try:
        return db.query(BestSegment).filter(
            BestSegment.user_id == user_id,
        ).order_by(
            BestSegment.activity_date.desc(),
            BestSegment.id.desc(),
        ).limit(limit).all()
    except SQLAlchemyError as e:
        logger.error("[db-error][best-segment-select] user_id=%s err=%s", user_id, e)
        raise UpstreamFailure("Failed to fetch best segments") from e
