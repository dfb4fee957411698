"""
Batch Service（批处理服务）

职责：
- 每晚对活跃用户批量计算过度训练风险、回填 GAS 模型
- 用户按固定大小的窗口并发处理，窗口之间固定间隔，单个用户失败只计数、不中断整批
- 每次运行写一条 batch_job_logs 记录

每个用户使用独立的数据库会话，会话由调用方传入的 session_factory 创建。
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Callable, Dict, List, Optional, Sequence
import logging
import time

from sqlalchemy.orm import Session

from ..config import BATCH_ACTIVE_DAYS, BATCH_CONCURRENCY, BATCH_DELAY_SECONDS
from ..repositories.activity_repo import get_active_user_ids, has_activities
from ..repositories.batch_log_repo import create_batch_log, finish_batch_log
from ..repositories.score_repo import users_with_gas_snapshot
from .gas_service import gas_model_service
from .overtraining_service import overtraining_service

logger = logging.getLogger(__name__)

MAX_LOGGED_ERRORS = 100


@dataclass
class BatchOutcome:
    total: int = 0
    succeeded: int = 0
    failed: int = 0
    errors: List[Dict[str, str]] = field(default_factory=list)


def run_in_windows(
    user_ids: Sequence[str],
    worker: Callable[[str], Any],
    concurrency: int,
    delay_seconds: float,
    sleep: Callable[[float], None] = time.sleep,
) -> BatchOutcome:
    """按窗口并发执行 worker(user_id)

    参数：
        user_ids: 待处理用户
        worker: 单用户处理函数，抛出异常即视为该用户失败
        concurrency: 每个窗口的并发数
        delay_seconds: 窗口之间的固定间隔
        sleep: 便于测试替换
    """
    ids = list(user_ids)
    outcome = BatchOutcome(total=len(ids))
    window_size = max(1, int(concurrency))

    for start in range(0, len(ids), window_size):
        window = ids[start:start + window_size]
        logger.info(
            "[batch][window] %s/%s users=%s",
            start // window_size + 1, (len(ids) + window_size - 1) // window_size, len(window),
        )
        with ThreadPoolExecutor(max_workers=len(window)) as pool:
            futures = {pool.submit(worker, uid): uid for uid in window}
            for future in as_completed(futures):
                uid = futures[future]
                try:
                    future.result()
                    outcome.succeeded += 1
                except Exception as e:
                    outcome.failed += 1
                    outcome.errors.append({"user_id": uid, "error": str(e) or e.__class__.__name__})
                    logger.warning("[batch][user-failed] user_id=%s err=%s", uid, e)

        if start + window_size < len(ids) and delay_seconds > 0:
            sleep(delay_seconds)

    return outcome


class BatchService:
    """批处理服务"""

    def __init__(self, sleep: Callable[[float], None] = time.sleep):
        self._sleep = sleep

    def _per_user(self, session_factory: Callable[[], Session], fn: Callable[[Session, str], Any]) -> Callable[[str], Any]:
        def worker(user_id: str) -> Any:
            db = session_factory()
            try:
                return fn(db, user_id)
            finally:
                db.close()
        return worker

    def _run(
        self,
        session_factory: Callable[[], Session],
        job_name: str,
        target_date: date,
        batch_size: int,
        select_users: Callable[[Session], Dict[str, Any]],
        fn: Callable[[Session, str], Any],
        delay_seconds: float,
        details: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        started = time.monotonic()
        db = session_factory()
        log = None
        try:
            log = create_batch_log(db, job_name, batch_size, details)
            selection = select_users(db)
            user_ids = selection["user_ids"]
            logger.info("[batch][start] job=%s log_id=%s users=%s", job_name, log.id, len(user_ids))

            outcome = run_in_windows(
                user_ids,
                self._per_user(session_factory, fn),
                batch_size,
                delay_seconds,
                sleep=self._sleep,
            )
            elapsed = round(time.monotonic() - started, 3)
            finish_batch_log(
                db, log.id, 'completed',
                total=outcome.total,
                succeeded=outcome.succeeded,
                failed=outcome.failed,
                execution_time_seconds=elapsed,
                details={**(details or {}), "errors": outcome.errors[:MAX_LOGGED_ERRORS]},
            )
            logger.info(
                "[batch][completed] job=%s log_id=%s ok=%s failed=%s in %.1fs",
                job_name, log.id, outcome.succeeded, outcome.failed, elapsed,
            )
            return {
                "log_id": log.id,
                "job_name": job_name,
                "status": "completed",
                "date": target_date,
                "users_scanned": selection.get("scanned", len(user_ids)),
                "users_to_process": len(user_ids),
                "successful_calculations": outcome.succeeded,
                "failed_calculations": outcome.failed,
                "execution_time_seconds": elapsed,
                "errors": outcome.errors,
            }
        except Exception as e:
            logger.exception("[batch][failed] job=%s", job_name)
            if log is not None:
                finish_batch_log(
                    db, log.id, 'failed',
                    execution_time_seconds=round(time.monotonic() - started, 3),
                    error_message=str(e),
                )
            raise
        finally:
            db.close()

    def run_overtraining_batch(
        self,
        session_factory: Callable[[], Session],
        batch_size: Optional[int] = None,
        days_active_threshold: Optional[int] = None,
        days_to_analyze: int = 30,
        today: Optional[date] = None,
        delay_seconds: float = BATCH_DELAY_SECONDS,
    ) -> Dict[str, Any]:
        """为最近 days_active_threshold 天内有活动的用户计算并保存过度训练评分"""
        today = today or date.today()
        batch_size = batch_size or BATCH_CONCURRENCY
        days_active_threshold = days_active_threshold or BATCH_ACTIVE_DAYS

        def select_users(db: Session) -> Dict[str, Any]:
            since = today - timedelta(days=days_active_threshold)
            return {"user_ids": get_active_user_ids(db, since=since)}

        def fn(db: Session, user_id: str) -> Any:
            return overtraining_service.calculate_risk(db, user_id, today, days_to_analyze, persist=True)

        return self._run(
            session_factory, "overtraining", today, batch_size, select_users, fn, delay_seconds,
            details={"days_to_analyze": days_to_analyze, "days_active_threshold": days_active_threshold},
        )

    def run_gas_backfill(
        self,
        session_factory: Callable[[], Session],
        limit: int = 100,
        offset: int = 0,
        user_id: Optional[str] = None,
        today: Optional[date] = None,
        concurrency: int = 3,
        only_missing_today: bool = True,
        delay_seconds: float = 0.0,
    ) -> Dict[str, Any]:
        """为有活动的用户计算当日 GAS 结果并写入 users_gas_model

        only_missing_today 为 True 时跳过当日已有快照的用户。
        """
        today = today or date.today()

        def select_users(db: Session) -> Dict[str, Any]:
            if user_id:
                scanned = [user_id] if has_activities(db, user_id) else []
            else:
                scanned = get_active_user_ids(db, limit=limit, offset=offset)
            candidates = scanned
            if only_missing_today and candidates:
                done = users_with_gas_snapshot(db, candidates, today)
                candidates = [u for u in candidates if u not in done]
            return {"user_ids": candidates, "scanned": len(scanned)}

        def fn(db: Session, uid: str) -> Any:
            return gas_model_service.calculate(db, uid, today, persist=True)

        return self._run(
            session_factory, "gas_backfill", today, concurrency, select_users, fn, delay_seconds,
            details={"limit": limit, "offset": offset, "only_missing_today": only_missing_today},
        )


# 创建单例实例
batch_service = BatchService()
