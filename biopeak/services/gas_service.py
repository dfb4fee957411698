"""
GAS Model Service（健康度-疲劳度模型服务）

职责：
- 读取用户截至参考日期的全部活动，计算 fitness / fatigue / performance
- 可选写入 users_gas_model（按 user_id + calendar_date 覆盖）
"""

from typing import Any, Dict, Optional
from datetime import date
from sqlalchemy.orm import Session
import logging

from ..core.analytics.gas_model import GasActivity, GasModelParams, estimate_gas
from ..repositories.activity_repo import get_user_activities
from ..repositories.score_repo import upsert_gas_snapshot

logger = logging.getLogger(__name__)


class GasModelService:
    """GAS 模型服务"""

    def calculate(
        self,
        db: Session,
        user_id: str,
        today: Optional[date] = None,
        persist: bool = False,
        params: Optional[GasModelParams] = None,
    ) -> Dict[str, Any]:
        """计算指定用户在参考日期的 GAS 结果

        Returns:
            dict: 两位小数的 fitness / fatigue / performance 以及统计信息；
            没有历史数据时各值为 0，不视为错误
        """
        if today is None:
            today = date.today()

        rows = get_user_activities(db, user_id, end_date=today)
        activities = [
            GasActivity(
                date=a.activity_date,
                duration_minutes=a.duration_minutes,
                average_heart_rate=a.average_heart_rate,
                max_heart_rate=a.max_heart_rate,
            )
            for a in rows
        ]
        result = estimate_gas(activities, today, params or GasModelParams())
        rounded = result.rounded()

        if persist:
            upsert_gas_snapshot(db, user_id, result)

        logger.info(
            "[gas][calculated] user_id=%s date=%s used=%s skipped=%s fitness=%.2f fatigue=%.2f performance=%.2f",
            user_id, today, result.activities_used, result.activities_skipped,
            rounded.fitness, rounded.fatigue, rounded.performance,
        )
        return {
            "user_id": user_id,
            "fitness": rounded.fitness,
            "fatigue": rounded.fatigue,
            "performance": rounded.performance,
            "date": rounded.date,
            "activities_used": rounded.activities_used,
            "activities_skipped": rounded.activities_skipped,
            "persisted": persist,
        }


# 创建单例实例
gas_model_service = GasModelService()
