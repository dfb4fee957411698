"""
Best segment API routes

包含：
- POST /segments/best-1km：计算并保存活动的最佳 1 公里分段
- GET  /segments/best-1km：查询用户已保存的最佳分段（按活动日期倒序）
- POST /segments/best-1km/fit：对上传的 FIT 文件即时计算（不保存）
"""

from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlalchemy.orm import Session
import logging

from ..auth import Caller, ensure_same_user, get_caller
from ..errors import BioPeakError, UpstreamFailure
from ..schemas.segments import (
    BestSegmentHistoryResponse,
    BestSegmentOut,
    BestSegmentRequest,
    BestSegmentResponse,
)
from ..services.segment_service import segment_service
from ..utils import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/segments", tags=["分段"])


@router.post("/best-1km", response_model=BestSegmentResponse)
def calculate_best_1km(
    payload: BestSegmentRequest,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    """计算活动的最佳 1 公里分段

    Raises:
        400 - 缺少 activity_id / user_id
        401/403 - 未登录或 user_id 与令牌不一致
        404 - 活动没有采样数据
        500 - 数据库读写失败
    """
    ensure_same_user(caller, payload.user_id)
    try:
        result = segment_service.calculate_best_segment(db, payload.user_id, payload.activity_id)
    except BioPeakError:
        raise
    except Exception as e:
        logger.exception("[segments-api][error] user_id=%s activity_id=%s", payload.user_id, payload.activity_id)
        raise UpstreamFailure(f"Unexpected error: {e}") from e

    segment = result["bestSegment"]
    return BestSegmentResponse(
        success=True,
        bestSegment=BestSegmentOut.model_validate(segment) if segment is not None else None,
        message=result["message"],
    )


@router.get("/best-1km", response_model=BestSegmentHistoryResponse)
def list_best_1km(
    user_id: str = Query(..., min_length=1, description="用户ID"),
    limit: int = Query(50, ge=1, le=500, description="最多返回条数"),
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    """查询用户的最佳分段历史"""
    ensure_same_user(caller, user_id)
    rows = segment_service.history(db, user_id, limit)
    return BestSegmentHistoryResponse(
        user_id=user_id,
        segments=[BestSegmentOut.model_validate(r) for r in rows],
    )


@router.post("/best-1km/fit", response_model=BestSegmentResponse)
async def calculate_best_1km_from_fit(
    file: UploadFile = File(..., description="FIT 文件"),
    caller: Caller = Depends(get_caller),
):
    """对上传的 FIT 文件计算最佳 1 公里分段（不保存）"""
    content = await file.read()
    result = segment_service.best_segment_from_fit(content)
    segment = result["bestSegment"]
    return BestSegmentResponse(
        success=True,
        bestSegment=BestSegmentOut.model_validate(segment) if segment is not None else None,
        message=result["message"],
    )
