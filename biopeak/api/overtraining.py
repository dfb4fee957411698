"""
Overtraining API routes

包含：
- POST /overtraining/risk：计算用户的过度训练风险
- POST /overtraining/batch：批量计算活跃用户（仅服务角色）
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from ..auth import Caller, ensure_same_user, get_caller, require_service_role
from ..errors import BioPeakError, UpstreamFailure
from ..schemas.batch import BatchResponse, OvertrainingBatchRequest
from ..schemas.overtraining import OvertrainingRequest, OvertrainingResponse, OvertrainingRiskOut
from ..services.batch_service import batch_service
from ..services.overtraining_service import overtraining_service
from ..utils import get_db, get_session_factory

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/overtraining", tags=["过度训练"])


@router.post("/risk", response_model=OvertrainingResponse)
def calculate_overtraining_risk(
    payload: OvertrainingRequest,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    """计算过度训练风险

    没有任何活动时返回 baixo 与"数据不足"因素，而不是 404。
    """
    ensure_same_user(caller, payload.user_id)
    try:
        result = overtraining_service.calculate_risk(
            db,
            payload.user_id,
            today=payload.today,
            days_to_analyze=payload.days_to_analyze,
            persist=payload.persist,
        )
    except BioPeakError:
        raise
    except Exception as e:
        logger.exception("[overtraining-api][error] user_id=%s", payload.user_id)
        raise UpstreamFailure("Internal server error") from e

    risk = result["risk"]
    return OvertrainingResponse(
        user_id=result["user_id"],
        date=result["date"],
        activities_analyzed=result["activities_analyzed"],
        snapshot_id=result["snapshot_id"],
        risk=OvertrainingRiskOut(
            score=risk.score,
            level=risk.level.value,
            factors=risk.factors,
            recommendation=risk.recommendation,
            training_load_score=risk.training_load_score,
            frequency_score=risk.frequency_score,
            intensity_score=risk.intensity_score,
            volume_trend_score=risk.volume_trend_score,
            consecutive_days=risk.consecutive_days,
            weekly_sessions=risk.weekly_sessions,
            current_week_load=round(risk.load.current_week_load, 2),
            previous_week_load=round(risk.load.previous_week_load, 2),
            avg_monthly_load=round(risk.load.avg_monthly_load, 2),
        ),
    )


@router.post("/batch", response_model=BatchResponse)
def run_overtraining_batch(
    payload: OvertrainingBatchRequest,
    caller: Caller = Depends(require_service_role),
    session_factory=Depends(get_session_factory),
):
    """批量计算最近活跃用户的过度训练风险并保存快照"""
    try:
        result = batch_service.run_overtraining_batch(
            session_factory,
            batch_size=payload.batch_size,
            days_active_threshold=payload.days_active_threshold,
            days_to_analyze=payload.days_to_analyze,
            today=payload.today,
        )
    except BioPeakError:
        raise
    except Exception as e:
        raise UpstreamFailure(f"Batch processing error: {e}") from e
    return BatchResponse(**result)
