"""
评分与模型快照的持久化

- overtraining_scores：每次评分插入一行，保留历史
- users_gas_model：按 (user_id, calendar_date) 插入或更新
"""

from typing import Iterable, Set
from datetime import date
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
import logging

from ..core.analytics.gas_model import GASResult
from ..core.analytics.overtraining import OvertrainingRisk
from ..db.models import GasModelSnapshot, OvertrainingScore
from ..errors import UpstreamFailure

logger = logging.getLogger(__name__)


def insert_overtraining_score(
    db: Session,
    user_id: str,
    risk: OvertrainingRisk,
    reference_date: date,
    activities_analyzed: int,
    days_analyzed: int,
) -> OvertrainingScore:
    try:
        row = OvertrainingScore(
            user_id=user_id,
            score=risk.score,
            level=risk.level.value,
            factors=list(risk.factors),
            recommendation=risk.recommendation,
            training_load_score=risk.training_load_score,
            frequency_score=risk.frequency_score,
            intensity_score=risk.intensity_score,
            volume_trend_score=risk.volume_trend_score,
            activities_analyzed=activities_analyzed,
            days_analyzed=days_analyzed,
            reference_date=reference_date,
        )
        db.add(row)
        db.commit()
        db.refresh(row)
        return row
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("[db-error][overtraining-insert] user_id=%s err=%s", user_id, e)
        raise UpstreamFailure("Failed to save overtraining score") from e


def upsert_gas_snapshot(db: Session, user_id: str, result: GASResult) -> GasModelSnapshot:
    """插入或更新每日 GAS 快照（写入两位小数的结果）"""
    rounded = result.rounded()
    try:
        row = db.query(GasModelSnapshot).filter(
            GasModelSnapshot.user_id == user_id,
            GasModelSnapshot.calendar_date == rounded.date,
        ).first()
        if row is None:
            row = GasModelSnapshot(user_id=user_id, calendar_date=rounded.date)
            db.add(row)
        row.fitness = rounded.fitness
        row.fatigue = rounded.fatigue
        row.performance = rounded.performance
        db.commit()
        db.refresh(row)
        return row
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("[db-error][gas-upsert] user_id=%s date=%s err=%s", user_id, rounded.date, e)
        raise UpstreamFailure("Failed to save GAS snapshot") from e


def users_with_gas_snapshot(db: Session, user_ids: Iterable[str], calendar_date: date) -> Set[str]:
    """给定用户中已有当日快照的用户"""
    ids = list(user_ids)
    if not ids:
        return set()
    try:
        rows = db.query(GasModelSnapshot.user_id).filter(
            GasModelSnapshot.user_id.in_(ids),
            GasModelSnapshot.calendar_date == calendar_date,
        ).all()
    except SQLAlchemyError as e:
        logger.error("[db-error][gas-select] date=%s err=%s", calendar_date, e)
        raise UpstreamFailure("Failed to fetch GAS snapshots") from e
    return {r[0] for r in rows}
