"""健康度-疲劳度模型（GAS / Banister Fitness-Fatigue）

说明：
- 每次训练的冲量（TRIMP）= 时长（分钟） × (avgHR - restHR) / (maxHR - restHR)；
- 冲量按距参考日期的天数指数衰减后累加：
    fitness += K1 × TRIMP × exp(-days / 42)
    fatigue += K2 × TRIMP × exp(-days / 7)
- performance = fitness - fatigue；
- 单条数据不合法时跳过并记录原因，数据稀疏时返回全 0 结果而不是报错。
"""

from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional
import logging

import numpy as np

from .time_utils import DateLike, days_between, to_date

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GasModelParams:
    """模型常量，随请求显式传入"""
    rest_hr: float = 60.0
    k1: float = 1.0
    k2: float = 2.0
    fitness_tau: float = 42.0
    fatigue_tau: float = 7.0


@dataclass(frozen=True)
class GasActivity:
    date: Optional[DateLike]
    duration_minutes: Optional[float] = None
    average_heart_rate: Optional[float] = None
    max_heart_rate: Optional[float] = None


@dataclass(frozen=True)
class GASResult:
    fitness: float
    fatigue: float
    performance: float
    date: date
    activities_used: int = 0
    activities_skipped: int = 0

    def rounded(self) -> "GASResult":
        """响应用的两位小数版本"""
        return GASResult(
            fitness=round(self.fitness, 2),
            fatigue=round(self.fatigue, 2),
            performance=round(self.performance, 2),
            date=self.date,
            activities_used=self.activities_used,
            activities_skipped=self.activities_skipped,
        )


def _finite(value) -> Optional[float]:
    try:
        v = float(value)
    except (TypeError, ValueError):
        return None
    return v if np.isfinite(v) else None


def trimp(
    duration_minutes: Optional[float],
    avg_hr: Optional[float],
    max_hr: Optional[float],
    rest_hr: float = 60.0,
) -> Optional[float]:
    """训练冲量；时长/心率缺失或非正、分母非正时返回 None"""
    mins = _finite(duration_minutes)
    avg = _finite(avg_hr)
    mx = _finite(max_hr)
    if mins is None or mins <= 0 or avg is None or avg <= 0 or mx is None or mx <= 0:
        return None
    denominator = mx - rest_hr
    if denominator <= 0:
        return None
    return mins * (avg - rest_hr) / denominator


def estimate_gas(
    activities: Iterable[GasActivity],
    reference_date: date,
    params: GasModelParams = GasModelParams(),
) -> GASResult:
    """计算参考日期的 fitness / fatigue / performance。

    参数：
        activities: 用户历史活动（截至参考日期）
        reference_date: 参考日期，daysAgo = 0 的活动不衰减
        params: 模型常量

    返回：
        GASResult（未取整，performance 严格等于 fitness - fatigue）
    """
    impulses: List[float] = []
    elapsed: List[int] = []
    skipped = 0

    for act in activities:
        d = to_date(act.date)
        if d is None:
            skipped += 1
            logger.info("[gas][skip] reason=missing-date record=%s", act)
            continue
        ago = days_between(d, reference_date)
        if ago < 0:
            skipped += 1
            logger.info("[gas][skip] reason=after-reference date=%s ref=%s", d, reference_date)
            continue
        imp = trimp(act.duration_minutes, act.average_heart_rate, act.max_heart_rate, params.rest_hr)
        if imp is None:
            skipped += 1
            logger.info(
                "[gas][skip] reason=invalid-hr-or-duration date=%s mins=%s avg_hr=%s max_hr=%s",
                d, act.duration_minutes, act.average_heart_rate, act.max_heart_rate,
            )
            continue
        impulses.append(imp)
        elapsed.append(ago)

    if not impulses:
        return GASResult(0.0, 0.0, 0.0, reference_date, 0, skipped)

    imp_arr = np.asarray(impulses, dtype=float)
    days_arr = np.asarray(elapsed, dtype=float)
    fitness = float(np.sum(params.k1 * imp_arr * np.exp(-days_arr / params.fitness_tau)))
    fatigue = float(np.sum(params.k2 * imp_arr * np.exp(-days_arr / params.fatigue_tau)))

    return GASResult(
        fitness=fitness,
        fatigue=fatigue,
        performance=fitness - fatigue,
        date=reference_date,
        activities_used=len(impulses),
        activities_skipped=skipped,
    )
