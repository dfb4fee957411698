from typing import Any, Dict, Optional
import datetime
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
import logging

from ..db.models import BatchJobLog
from ..errors import UpstreamFailure

logger = logging.getLogger(__name__)


def create_batch_log(db: Session, job_name: str, batch_size: int, details: Optional[Dict[str, Any]] = None) -> BatchJobLog:
    try:
        row = BatchJobLog(job_name=job_name, status='running', batch_size=batch_size, details=details or {})
        db.add(row)
        db.commit()
        db.refresh(row)
        return row
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("[db-error][batch-log-create] job=%s err=%s", job_name, e)
        raise UpstreamFailure(f"Failed to create log entry for {job_name}") from e


def finish_batch_log(
    db: Session,
    log_id: int,
    status: str,
    total: int = 0,
    succeeded: int = 0,
    failed: int = 0,
    execution_time_seconds: Optional[float] = None,
    error_message: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> bool:
    """更新批处理记录；写日志失败不影响批处理结果，只返回 False"""
    try:
        row = db.query(BatchJobLog).filter(BatchJobLog.id == log_id).first()
        if row is None:
            return False
        row.status = status
        row.completed_at = datetime.datetime.now()
        row.total_users_processed = total
        row.successful_calculations = succeeded
        row.failed_calculations = failed
        row.execution_time_seconds = execution_time_seconds
        row.error_message = error_message
        if details is not None:
            row.details = details
        db.commit()
        return True
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("[db-error][batch-log-finish] log_id=%s err=%s", log_id, e)
        return False
