"""过度训练风险评分（Overtraining Risk Scorer）

评分由四部分组成，总分截断到 [0, 100]：
1. 负荷比：本周负荷 / 月均周负荷，>1.5 计 35 分，>1.2 计 20 分
2. 频率与恢复：本周次数 >6 计 15 分（>5 计 8 分）；连续训练天数 >5 计 10 分（>3 计 5 分）
3. 强度占比：本周高强度训练占比 >0.6 计 20 分，>0.4 计 10 分
4. 负荷趋势：相比上周增长 >30% 计 20 分，>15% 计 10 分

分级：>=50 为 alto，>=25 为 medio，其余为 baixo。
因素与建议文案面向巴西用户，保持葡萄牙语。
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Iterable, List

from .time_utils import days_between
from .training_load import (
    CURRENT_WEEK,
    ActivitySummary,
    TrainingLoadSummary,
    aggregate_training_load,
    heart_rate_ratio,
    select_window,
)

SIGNIFICANT_MIN_MINUTES = 5
SIGNIFICANT_MIN_CALORIES = 10
HIGH_HR_RATIO = 0.75
HIGH_CALORIE_RATE = 400  # kcal/h

ALTO_THRESHOLD = 50
MEDIO_THRESHOLD = 25


class RiskLevel(str, Enum):
    """风险等级"""
    BAIXO = "baixo"
    MEDIO = "medio"
    ALTO = "alto"


RECOMMENDATIONS = {
    RiskLevel.ALTO: (
        "ATENÇÃO: Risco alto de overtraining. Reduza volume/intensidade, "
        "aumente recuperação e considere consultar um profissional."
    ),
    RiskLevel.MEDIO: (
        "Monitore sinais de fadiga. Inclua mais recuperação ativa e evite "
        "aumentos súbitos de carga."
    ),
    RiskLevel.BAIXO: (
        "Continue com seu plano atual, mantendo equilíbrio entre treino e recuperação."
    ),
}

INSUFFICIENT_DATA_FACTOR = "Dados insuficientes para análise"
INSUFFICIENT_DATA_RECOMMENDATION = "Inicie sua jornada de treinos gradualmente."
BALANCED_FACTOR = "Carga de treino equilibrada"


@dataclass
class OvertrainingRisk:
    """一次评分的完整结果，每次重新计算，不做增量更新"""
    score: int
    level: RiskLevel
    factors: List[str]
    recommendation: str
    training_load_score: int = 0
    frequency_score: int = 0
    intensity_score: int = 0
    volume_trend_score: int = 0
    consecutive_days: int = 0
    weekly_sessions: int = 0
    load: TrainingLoadSummary = field(default_factory=TrainingLoadSummary)


def is_significant(activity: ActivitySummary) -> bool:
    """过滤自动识别的零碎活动：至少 5 分钟或 10 kcal"""
    minutes = activity.duration_minutes or 0
    calories = activity.active_calories or 0
    return minutes >= SIGNIFICANT_MIN_MINUTES or calories >= SIGNIFICANT_MIN_CALORIES


def consecutive_training_days(activities: Iterable[ActivitySummary]) -> int:
    """最长连续训练天数。

    取有效活动的去重日期，从最近一天向前遍历；与上一个日期恰好相差 1 天则累加，
    出现 2 天及以上的间隔时重置为 1。
    """
    dates = sorted(
        {a.activity_date for a in activities if a.activity_date is not None and is_significant(a)},
        reverse=True,
    )
    if len(dates) <= 1:
        return len(dates)

    longest = 1
    current = 1
    for previous, d in zip(dates, dates[1:]):
        if days_between(d, previous) == 1:
            current += 1
            longest = max(longest, current)
        else:
            current = 1
    return longest


def is_high_intensity(activity: ActivitySummary) -> bool:
    """avgHR/maxHR > 0.75 或卡路里消耗速率 > 400 kcal/h"""
    ratio = heart_rate_ratio(activity.average_heart_rate, activity.max_heart_rate)
    if ratio is not None and ratio > HIGH_HR_RATIO:
        return True
    hours = (activity.duration_minutes or 0) / 60.0
    calories = activity.active_calories or 0
    return hours > 0 and (calories / hours) > HIGH_CALORIE_RATE


def classify(score: int) -> RiskLevel:
    if score >= ALTO_THRESHOLD:
        return RiskLevel.ALTO
    if score >= MEDIO_THRESHOLD:
        return RiskLevel.MEDIO
    return RiskLevel.BAIXO


def calculate_overtraining_risk(activities: Iterable[ActivitySummary], today: date) -> OvertrainingRisk:
    """计算过度训练风险。

    参数：
        activities: 用户近期活动列表
        today: 参考日期

    返回：
        OvertrainingRisk；没有任何活动时返回 baixo 与"数据不足"提示，而不是计算分数
    """
    items = list(activities)
    if not items:
        return OvertrainingRisk(
            score=0,
            level=RiskLevel.BAIXO,
            factors=[INSUFFICIENT_DATA_FACTOR],
            recommendation=INSUFFICIENT_DATA_RECOMMENDATION,
        )

    factors: List[str] = []
    load = aggregate_training_load(items, today)
    week = select_window(items, today, CURRENT_WEEK)

    # 1. 负荷比
    training_load_score = 0
    if load.current_week_load > load.avg_monthly_load * 1.5:
        training_load_score = 35
        factors.append(
            f"Carga de treino muito alta ({load.current_week_load:.1f} vs média {load.avg_monthly_load:.1f})"
        )
    elif load.current_week_load > load.avg_monthly_load * 1.2:
        training_load_score = 20
        factors.append("Carga de treino elevada")

    # 2. 频率与恢复
    frequency_score = 0
    weekly_sessions = len(week)
    if weekly_sessions > 6:
        frequency_score += 15
        factors.append("Frequência muito alta (>6 treinos/semana)")
    elif weekly_sessions > 5:
        frequency_score += 8
        factors.append("Frequência alta")

    consecutive = consecutive_training_days(week)
    if consecutive > 5:
        frequency_score += 10
        factors.append(f"{consecutive} dias consecutivos sem descanso")
    elif consecutive > 3:
        frequency_score += 5
        factors.append("Poucos dias de recuperação")

    # 3. 强度占比
    intensity_score = 0
    intensity_ratio = (sum(1 for a in week if is_high_intensity(a)) / len(week)) if week else 0.0
    if intensity_ratio > 0.6:
        intensity_score = 20
        factors.append(f"{round(intensity_ratio * 100)}% treinos alta intensidade")
    elif intensity_ratio > 0.4:
        intensity_score = 10
        factors.append("Muitos treinos intensos")

    # 4. 负荷趋势
    volume_trend_score = 0
    if load.previous_week_load > 0:
        increase = (load.current_week_load - load.previous_week_load) / load.previous_week_load
        if increase > 0.3:
            volume_trend_score = 20
            factors.append(f"Aumento súbito de {round(increase * 100)}% na carga")
        elif increase > 0.15:
            volume_trend_score = 10
            factors.append("Crescimento rápido no volume")

    total = training_load_score + frequency_score + intensity_score + volume_trend_score
    score = max(0, min(100, total))
    level = classify(score)

    return OvertrainingRisk(
        score=score,
        level=level,
        factors=factors or [BALANCED_FACTOR],
        recommendation=RECOMMENDATIONS[level],
        training_load_score=training_load_score,
        frequency_score=frequency_score,
        intensity_score=intensity_score,
        volume_trend_score=volume_trend_score,
        consecutive_days=consecutive,
        weekly_sessions=weekly_sessions,
        load=load,
    )
