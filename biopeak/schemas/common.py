"""
请求模型中共用的字段校验
"""

from datetime import date
from typing import Any, Optional

from ..core.analytics.time_utils import to_date


def coerce_id(value: Any) -> Any:
    """数据源的活动ID/用户ID可能是数字，统一转为字符串；带小数的数字不是合法ID"""
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"id must be a whole number: {value}")
        return str(int(value))
    if isinstance(value, str):
        return value.strip()
    return value


def coerce_reference_date(value: Any) -> Optional[date]:
    """接受 YYYY-MM-DD 或 ISO 时间字符串；空值表示今天，无法解析时报错"""
    if value is None or value == "":
        return None
    parsed = to_date(value)
    if parsed is None:
        raise ValueError(f"invalid date, expected YYYY-MM-DD: {value}")
    return parsed
