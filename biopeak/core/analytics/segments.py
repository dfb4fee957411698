"""最佳 1 公里分段扫描（Best Segment Scanner）

说明：
- 输入为同序、等长的累计距离（米）与经过时间（秒）两个数组，均为非递减序列；
- 对每个起点 i，寻找第一个满足 distance[j] - distance[i] >= 1000 的终点 j，
  计算该窗口配速（分钟/公里），取全局最小值；
- 终点游标只向前移动（双指针），整体 O(n)；
- 不依赖数据库或网络，便于单元测试与复用。
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple
import logging

from ...errors import InvalidInput

logger = logging.getLogger(__name__)

SEGMENT_METERS = 1000.0


@dataclass(frozen=True)
class SamplePoint:
    """单个采样点：累计距离（米）与经过时间（秒）"""
    distance_meters: float
    elapsed_seconds: float


@dataclass(frozen=True)
class BestSegmentResult:
    """最佳分段结果，各字段均取自真实采样点"""
    start_distance: float
    end_distance: float
    start_time: float
    end_time: float
    best_pace_min_per_km: float
    start_index: int
    end_index: int

    @property
    def distance_meters(self) -> float:
        return self.end_distance - self.start_distance

    @property
    def duration_seconds(self) -> float:
        return self.end_time - self.start_time


def validate_samples(distance: Sequence[float], time: Sequence[float]) -> None:
    """扫描前的输入校验。

    异常：
        InvalidInput: 数组长度不一致或少于 2 个点
    """
    if distance is None or time is None:
        raise InvalidInput("distance and time arrays are required")
    if len(distance) != len(time):
        raise InvalidInput(
            f"distance and time arrays must have the same length ({len(distance)} != {len(time)})"
        )
    if len(distance) < 2:
        raise InvalidInput("at least 2 samples are required")


def segment_pace(delta_seconds: float, delta_meters: float) -> float:
    """窗口配速（分钟/公里）"""
    return (delta_seconds / 60.0) / (delta_meters / 1000.0)


def find_best_segment(
    distance: Sequence[float],
    time: Sequence[float],
    segment_meters: float = SEGMENT_METERS,
) -> Optional[BestSegmentResult]:
    """寻找配速最快的连续 segment_meters 窗口。

    参数：
        distance: 累计距离序列（米），非递减
        time: 经过时间序列（秒），非递减，与 distance 一一对应
        segment_meters: 目标窗口长度，默认 1000 米

    返回：
        BestSegmentResult；若没有任何窗口达到目标距离，返回 None（属于正常结果）

    异常：
        InvalidInput: 输入数组不合法
    """
    validate_samples(distance, time)

    n = len(distance)
    best: Optional[BestSegmentResult] = None
    best_pace = float("inf")
    j = 1

    for i in range(n - 1):
        # 终点至少在起点之后；对单调序列，i 增大时满足条件的最小 j 不会变小
        if j <= i:
            j = i + 1
        target = distance[i] + segment_meters
        while j < n and distance[j] < target:
            j += 1
        if j >= n:
            # 之后的起点更靠后，同样无法覆盖目标距离
            break

        delta_m = distance[j] - distance[i]
        delta_s = time[j] - time[i]
        if delta_s <= 0:
            continue

        pace = segment_pace(delta_s, delta_m)
        if pace < best_pace:
            best_pace = pace
            best = BestSegmentResult(
                start_distance=float(distance[i]),
                end_distance=float(distance[j]),
                start_time=float(time[i]),
                end_time=float(time[j]),
                best_pace_min_per_km=pace,
                start_index=i,
                end_index=j,
            )

    if best is None:
        logger.info(
            "[segments][not-found] samples=%s total_distance=%.1f",
            n, float(distance[-1]) - float(distance[0]),
        )
    else:
        logger.debug(
            "[segments][best] %.1fm-%.1fm pace=%.3f min/km",
            best.start_distance, best.end_distance, best.best_pace_min_per_km,
        )
    return best


def samples_from_points(points: Sequence[SamplePoint]) -> Tuple[List[float], List[float]]:
    """将采样点序列按时间排序后拆分为 (distance, time) 两个数组"""
    ordered = sorted(points, key=lambda p: p.elapsed_seconds)
    return (
        [float(p.distance_meters) for p in ordered],
        [float(p.elapsed_seconds) for p in ordered],
    )


def drop_regressions(distance: Sequence[float], time: Sequence[float]) -> Tuple[List[float], List[float], int]:
    """去掉距离或时间回退的点（GPS 漂移、重复上传），保证两条序列非递减。

    出现回退时只丢一个点：若上一个保留点同时高于它前后两个点（孤立的尖峰），
    丢掉尖峰并保留当前点；否则丢掉当前点。尖峰之后的正常采样不会被连带丢弃。

    返回：
        (distance, time, 被丢弃的点数)
    """
    out_d: List[float] = []
    out_t: List[float] = []
    dropped = 0
    for d, t in zip(distance, time):
        d, t = float(d), float(t)
        if out_d and (d < out_d[-1] or t < out_t[-1]):
            dropped += 1
            if len(out_d) >= 2 and out_d[-2] <= d and out_t[-2] <= t:
                out_d.pop()
                out_t.pop()
            else:
                continue
        out_d.append(d)
        out_t.append(t)
    if dropped:
        logger.info("[segments][drop-regressions] dropped=%s kept=%s", dropped, len(out_d))
    return out_d, out_t, dropped
