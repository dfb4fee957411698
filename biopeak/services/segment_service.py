"""
Segment Service（最佳分段服务）

职责：
- 读取活动的距离/时间采样，计算最佳 1 公里分段
- 按 (user_id, activity_id) 写入 activity_best_segments
- 也支持直接对上传的 FIT 文件计算（不落库）
"""

from typing import Any, Dict, List
from sqlalchemy.orm import Session
import logging

from ..core.analytics.segments import SEGMENT_METERS, drop_regressions, find_best_segment
from ..db.models import BestSegment
from ..errors import NotFound
from ..repositories.activity_repo import get_activity, get_activity_samples
from ..repositories.segment_repo import list_best_segments, upsert_best_segment
from ..streams.fit_samples import extract_samples

logger = logging.getLogger(__name__)


def _not_found(message: str) -> Dict[str, Any]:
    return {"success": True, "bestSegment": None, "message": message}


class SegmentService:
    """最佳分段服务"""

    def calculate_best_segment(self, db: Session, user_id: str, activity_id: str) -> Dict[str, Any]:
        """计算并保存活动的最佳 1 公里分段

        Returns:
            dict: {"success": True, "bestSegment": BestSegment | None, "message": str}

        Raises:
            NotFound: 活动没有任何采样数据
            UpstreamFailure: 数据库读写失败
        """
        activity = get_activity(db, user_id, activity_id)
        if activity is not None and activity.total_distance_meters is not None \
                and activity.total_distance_meters < SEGMENT_METERS:
            logger.info("[segments][skip-short] user_id=%s activity_id=%s distance=%s",
                        user_id, activity_id, activity.total_distance_meters)
            return _not_found("Activity skipped - less than 1km distance")

        distance, time = get_activity_samples(db, user_id, activity_id)
        if not distance:
            logger.warning("[segments][no-samples] user_id=%s activity_id=%s", user_id, activity_id)
            raise NotFound("No GPS data found for this activity")

        distance, time, _ = drop_regressions(distance, time)
        if len(distance) < 2:
            return _not_found(f"Insufficient GPS data - only {len(distance)} valid points found")

        segment = find_best_segment(distance, time)
        if segment is None:
            return _not_found("No 1km segment found in this activity")

        row = upsert_best_segment(
            db,
            user_id,
            activity_id,
            segment,
            activity_date=activity.activity_date if activity is not None else None,
        )
        logger.info("[segments][saved] user_id=%s activity_id=%s pace=%.3f",
                    user_id, activity_id, segment.best_pace_min_per_km)
        return {
            "success": True,
            "bestSegment": row,
            "message": f"Best 1km pace: {segment.best_pace_min_per_km:.3f} min/km",
        }

    def best_segment_from_fit(self, file_data: bytes) -> Dict[str, Any]:
        """对 FIT 文件直接计算最佳分段，不写数据库"""
        distance, time = extract_samples(file_data)
        distance, time, _ = drop_regressions(distance, time)
        if len(distance) < 2:
            return _not_found(f"Insufficient GPS data - only {len(distance)} valid points found")

        segment = find_best_segment(distance, time)
        if segment is None:
            return _not_found("No 1km segment found in this activity")
        return {
            "success": True,
            "bestSegment": {
                "best_1km_pace_min_km": round(segment.best_pace_min_per_km, 3),
                "segment_start_distance_meters": segment.start_distance,
                "segment_end_distance_meters": segment.end_distance,
                "segment_start_time_seconds": segment.start_time,
                "segment_end_time_seconds": segment.end_time,
                "segment_duration_seconds": round(segment.duration_seconds, 1),
            },
            "message": f"Best 1km pace: {segment.best_pace_min_per_km:.3f} min/km",
        }

    def history(self, db: Session, user_id: str, limit: int = 50) -> List[BestSegment]:
        return list_best_segments(db, user_id, limit)


# 创建单例实例
segment_service = SegmentService()
