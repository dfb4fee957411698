"""
GAS model API routes

包含：
- POST /gas-model：计算用户在参考日期的 fitness / fatigue / performance
- POST /gas-model/backfill：批量回填当日结果（仅服务角色）
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from ..auth import Caller, ensure_same_user, get_caller, require_service_role
from ..errors import BioPeakError, UpstreamFailure
from ..schemas.batch import BatchResponse, GasBackfillRequest
from ..schemas.gas import GasModelRequest, GasModelResponse
from ..services.batch_service import batch_service
from ..services.gas_service import gas_model_service
from ..utils import get_db, get_session_factory

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/gas-model", tags=["GAS 模型"])


@router.post("", response_model=GasModelResponse)
def calculate_gas_model(
    payload: GasModelRequest,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    """计算 Fitness-Fatigue 模型；历史数据稀疏时返回全 0 结果"""
    ensure_same_user(caller, payload.user_id)
    try:
        result = gas_model_service.calculate(db, payload.user_id, payload.today, persist=payload.persist)
    except BioPeakError:
        raise
    except Exception as e:
        logger.exception("[gas-api][error] user_id=%s", payload.user_id)
        raise UpstreamFailure("Internal Server Error") from e
    return GasModelResponse(**result)


@router.post("/backfill", response_model=BatchResponse)
def backfill_gas_model(
    payload: GasBackfillRequest,
    caller: Caller = Depends(require_service_role),
    session_factory=Depends(get_session_factory),
):
    """为有活动的用户回填当日 GAS 结果"""
    try:
        result = batch_service.run_gas_backfill(
            session_factory,
            limit=payload.limit,
            offset=payload.offset,
            user_id=payload.user_id,
            today=payload.date,
            concurrency=payload.concurrency,
            only_missing_today=payload.only_missing_today,
        )
    except BioPeakError:
        raise
    except Exception as e:
        raise UpstreamFailure(f"Backfill error: {e}") from e
    return BatchResponse(**result)
