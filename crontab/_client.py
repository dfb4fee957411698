#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""crontab 脚本共用：以服务角色令牌调用 BioPeak 批处理接口"""

import logging
from typing import Any, Dict

import requests

from biopeak.config import BIOPEAK_API_URL, HTTP_TIMEOUT, get_service_token

logger = logging.getLogger(__name__)


def post_job(path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    """POST 到批处理接口并返回 JSON 结果；HTTP 错误直接抛出 requests.HTTPError"""
    token = get_service_token()
    if not token:
        raise RuntimeError("BIOPEAK_SERVICE_TOKEN is not set")
    url = BIOPEAK_API_URL.rstrip('/') + path
    logger.info("[cron][request] POST %s payload=%s", url, payload)
    response = requests.post(
        url,
        json=payload,
        headers={"Authorization": f"Bearer {token}"},
        timeout=HTTP_TIMEOUT,
    )
    response.raise_for_status()
    return response.json()
