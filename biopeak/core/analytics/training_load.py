"""训练负荷聚合核心算法

说明：
- 单次活动负荷 = 时长（小时） × 强度系数（avgHR/maxHR 分档） × 运动类型系数 × (卡路里 / 100)；
- 按参考日期划分滚动窗口：最近 7 天、第 8~14 天、最近 30 天，分别求和；
- 月均周负荷 = 30 天总负荷 / 4.3；
- 缺少心率的活动按强度系数 1.0 计入，时长或卡路里为 0 的活动贡献 0，不会使整体聚合失败；
- 不依赖数据库或网络，输入为简单的数据对象列表。
"""

from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional, Tuple

from .time_utils import DateLike, days_between, to_date

DEFAULT_MAX_HR = 220
WEEKS_PER_MONTH = 4.3

# (阈值, 系数)，按 avgHR/maxHR 从高到低匹配
INTENSITY_TIERS: Tuple[Tuple[float, float], ...] = (
    (0.75, 2.5),  # Zona 4-5
    (0.65, 2.0),  # Zona 3
    (0.55, 1.5),  # Zona 2
)

CURRENT_WEEK = (0, 6)
PREVIOUS_WEEK = (7, 13)
LAST_30_DAYS = (0, 29)


@dataclass(frozen=True)
class ActivitySummary:
    """单次已完成活动的只读快照"""
    date: DateLike
    duration_minutes: Optional[float] = None
    average_heart_rate: Optional[float] = None
    max_heart_rate: Optional[float] = None
    activity_type: Optional[str] = None
    active_calories: Optional[float] = None

    @property
    def activity_date(self) -> Optional[date]:
        return to_date(self.date)


@dataclass(frozen=True)
class TrainingLoadSummary:
    """滚动窗口负荷汇总"""
    current_week_load: float = 0.0
    previous_week_load: float = 0.0
    monthly_load: float = 0.0
    avg_monthly_load: float = 0.0
    activities_missing_hr: int = 0


def _positive(value: Optional[float]) -> float:
    try:
        v = float(value) if value is not None else 0.0
    except (TypeError, ValueError):
        return 0.0
    return v if v > 0 else 0.0


def heart_rate_ratio(avg_hr: Optional[float], max_hr: Optional[float]) -> Optional[float]:
    """avgHR / maxHR；maxHR 缺失时按 220 估算，avgHR 缺失返回 None"""
    avg = _positive(avg_hr)
    if avg <= 0:
        return None
    mx = _positive(max_hr) or DEFAULT_MAX_HR
    return avg / mx


def intensity_factor(avg_hr: Optional[float], max_hr: Optional[float]) -> float:
    ratio = heart_rate_ratio(avg_hr, max_hr)
    if ratio is None:
        return 1.0
    for threshold, factor in INTENSITY_TIERS:
        if ratio >= threshold:
            return factor
    return 1.0


def activity_type_factor(activity_type: Optional[str]) -> float:
    t = (activity_type or '').lower()
    if 'run' in t:
        return 1.2
    if 'bike' in t or 'cycl' in t or 'ride' in t:
        return 1.0
    if 'swim' in t:
        return 1.3
    return 1.0


def activity_load(activity: ActivitySummary) -> float:
    """单次活动负荷，输入缺失时返回 0 而不是抛异常"""
    duration_hours = _positive(activity.duration_minutes) / 60.0
    calories = _positive(activity.active_calories)
    if duration_hours <= 0 or calories <= 0:
        return 0.0
    return (
        duration_hours
        * intensity_factor(activity.average_heart_rate, activity.max_heart_rate)
        * activity_type_factor(activity.activity_type)
        * (calories / 100.0)
    )


def days_ago(activity: ActivitySummary, today: date) -> Optional[int]:
    d = activity.activity_date
    if d is None:
        return None
    return days_between(d, today)


def in_window(activity: ActivitySummary, today: date, window: Tuple[int, int]) -> bool:
    """活动是否落在 [window[0], window[1]] 天前的闭区间内；未来日期一律不计"""
    ago = days_ago(activity, today)
    if ago is None:
        return False
    return window[0] <= ago <= window[1]


def select_window(activities: Iterable[ActivitySummary], today: date, window: Tuple[int, int]) -> List[ActivitySummary]:
    return [a for a in activities if in_window(a, today, window)]


def sum_load(activities: Iterable[ActivitySummary]) -> float:
    return sum(activity_load(a) for a in activities)


def aggregate_training_load(activities: Iterable[ActivitySummary], today: date) -> TrainingLoadSummary:
    """计算 currentWeekLoad / previousWeekLoad / avgMonthlyLoad。

    参数：
        activities: 活动快照列表（不会被修改）
        today: 参考日期

    返回：
        TrainingLoadSummary；空列表时所有窗口均为 0
    """
    items = list(activities)
    monthly = select_window(items, today, LAST_30_DAYS)
    monthly_load = sum_load(monthly)
    return TrainingLoadSummary(
        current_week_load=sum_load(select_window(items, today, CURRENT_WEEK)),
        previous_week_load=sum_load(select_window(items, today, PREVIOUS_WEEK)),
        monthly_load=monthly_load,
        avg_monthly_load=monthly_load / WEEKS_PER_MONTH,
        activities_missing_hr=sum(1 for a in monthly if heart_rate_ratio(a.average_heart_rate, a.max_heart_rate) is None),
    )
