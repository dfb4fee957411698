import math
from datetime import date, timedelta

import pytest

from biopeak.core.analytics.gas_model import GasActivity, GasModelParams, estimate_gas, trimp

TODAY = date(2025, 3, 14)
IMPULSE = 60 * (150 - 60) / (190 - 60)


def session(days_ago, **kw):
    fields = dict(duration_minutes=60, average_heart_rate=150, max_heart_rate=190)
    fields.update(kw)
    return GasActivity(date=TODAY - timedelta(days=days_ago), **fields)


def test_trimp():
    assert trimp(60, 150, 190) == pytest.approx(IMPULSE)


@pytest.mark.parametrize("minutes,avg_hr,max_hr", [
    (0, 150, 190),
    (None, 150, 190),
    (60, None, 190),
    (60, 150, None),
    (60, 150, 60),   # maxHR - restHR <= 0
])
def test_trimp_invalid(minutes, avg_hr, max_hr):
    assert trimp(minutes, avg_hr, max_hr) is None


def test_activity_on_reference_date_has_full_impulse():
    result = estimate_gas([session(0)], TODAY)
    assert result.fitness == pytest.approx(IMPULSE)
    assert result.fatigue == pytest.approx(2 * IMPULSE)
    assert result.performance == pytest.approx(-IMPULSE)
    assert result.activities_used == 1


def test_fitness_decays_with_42_day_constant():
    result = estimate_gas([session(42)], TODAY)
    assert result.fitness == pytest.approx(IMPULSE * math.exp(-1))
    assert result.fatigue == pytest.approx(2 * IMPULSE * math.exp(-6))


def test_performance_is_fitness_minus_fatigue():
    result = estimate_gas([session(d) for d in (0, 3, 9, 20, 50)], TODAY)
    assert result.performance == result.fitness - result.fatigue


def test_invalid_rows_are_skipped():
    activities = [
        session(1),
        GasActivity(date=None, duration_minutes=60, average_heart_rate=150, max_heart_rate=190),
        session(-2),                        # 参考日期之后
        session(3, average_heart_rate=None),
        session(4, max_heart_rate=50),
    ]
    result = estimate_gas(activities, TODAY)
    assert result.activities_used == 1
    assert result.activities_skipped == 4
    assert result.fitness == pytest.approx(IMPULSE * math.exp(-1 / 42))


def test_no_history_returns_zeros():
    result = estimate_gas([], TODAY)
    assert (result.fitness, result.fatigue, result.performance) == (0.0, 0.0, 0.0)
    assert result.date == TODAY


def test_custom_params():
    params = GasModelParams(rest_hr=50, k1=2.0, k2=1.0)
    result = estimate_gas([session(0)], TODAY, params)
    impulse = 60 * (150 - 50) / (190 - 50)
    assert result.fitness == pytest.approx(2 * impulse)
    assert result.fatigue == pytest.approx(impulse)


def test_rounded_to_two_decimals():
    rounded = estimate_gas([session(5)], TODAY).rounded()
    assert rounded.fitness == round(rounded.fitness, 2)
    assert rounded.fatigue == round(rounded.fatigue, 2)
