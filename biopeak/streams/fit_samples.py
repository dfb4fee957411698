"""
FIT 文件采样提取（基于 fitparse）：读取 record 消息中的 timestamp 与 distance，
输出最佳分段扫描所需的 (distance, time) 两个数组，时间为相对首个记录的秒数。
"""

from io import BytesIO
from typing import List, Tuple
import logging

from fitparse import FitFile
from fitparse.utils import FitParseError

from ..errors import InvalidInput

logger = logging.getLogger(__name__)


def extract_samples(file_data: bytes) -> Tuple[List[float], List[float]]:
    """
    解析 FIT 文件，返回 (distance, time)

    缺少 timestamp 或 distance 的记录会被跳过。

    异常：
        InvalidInput: 文件为空或无法解析
    """
    if not file_data:
        raise InvalidInput("Empty FIT file")

    distance: List[float] = []
    time: List[float] = []
    skipped = 0
    start_time = None
    try:
        fitfile = FitFile(BytesIO(file_data))
        for record in fitfile.get_messages('record'):
            ts = record.get_value('timestamp')
            dist = record.get_value('distance')
            if ts is None or dist is None:
                skipped += 1
                continue
            if start_time is None:
                start_time = ts
            distance.append(float(dist))
            time.append(float((ts - start_time).total_seconds()))
    except FitParseError as e:
        logger.warning("[fit-samples][parse-failed] %s", e)
        raise InvalidInput(f"Invalid FIT file: {e}") from e

    logger.info("[fit-samples] records=%s skipped=%s", len(distance), skipped)
    return distance, time
