"""
Overtraining Service（过度训练风险服务）

职责：
- 读取用户最近 N 天的活动，计算过度训练风险
- 可选写入 overtraining_scores 快照
"""

from typing import Any, Dict, List, Optional
from datetime import date, timedelta
from sqlalchemy.orm import Session
import logging

from ..core.analytics.overtraining import calculate_overtraining_risk
from ..core.analytics.training_load import ActivitySummary
from ..db.models import Activity
from ..repositories.activity_repo import get_user_activities
from ..repositories.score_repo import insert_overtraining_score

logger = logging.getLogger(__name__)


def to_summary(activity: Activity) -> ActivitySummary:
    return ActivitySummary(
        date=activity.activity_date,
        duration_minutes=activity.duration_minutes,
        average_heart_rate=activity.average_heart_rate,
        max_heart_rate=activity.max_heart_rate,
        activity_type=activity.activity_type,
        active_calories=activity.active_kilocalories,
    )


class OvertrainingService:
    """过度训练风险服务"""

    def calculate_risk(
        self,
        db: Session,
        user_id: str,
        today: Optional[date] = None,
        days_to_analyze: int = 30,
        persist: bool = True,
    ) -> Dict[str, Any]:
        """计算指定用户的过度训练风险

        Returns:
            dict: {"user_id", "date", "activities_analyzed", "snapshot_id", "risk": OvertrainingRisk}
        """
        if today is None:
            today = date.today()

        start = today - timedelta(days=days_to_analyze - 1)
        activities: List[ActivitySummary] = [
            to_summary(a) for a in get_user_activities(db, user_id, start, today)
        ]
        risk = calculate_overtraining_risk(activities, today)

        snapshot_id = None
        if persist:
            row = insert_overtraining_score(db, user_id, risk, today, len(activities), days_to_analyze)
            snapshot_id = row.id

        logger.info(
            "[overtraining][calculated] user_id=%s date=%s activities=%s score=%s level=%s",
            user_id, today, len(activities), risk.score, risk.level.value,
        )
        return {
            "user_id": user_id,
            "date": today,
            "activities_analyzed": len(activities),
            "snapshot_id": snapshot_id,
            "risk": risk,
        }


# 创建单例实例
overtraining_service = OvertrainingService()
