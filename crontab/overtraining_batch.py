#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
每晚批量计算过度训练风险

用法：
    python -m crontab.overtraining_batch [--batch-size 20] [--days-active 30]
"""

import argparse
import logging
import sys

import requests

from biopeak.logging_config import setup_logging
from crontab._client import post_job

logger = logging.getLogger("crontab.overtraining_batch")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="批量计算活跃用户的过度训练风险")
    parser.add_argument("--batch-size", type=int, default=None)
    parser.add_argument("--days-active", type=int, default=None)
    parser.add_argument("--days-to-analyze", type=int, default=30)
    args = parser.parse_args(argv)

    setup_logging()
    payload = {"days_to_analyze": args.days_to_analyze}
    if args.batch_size:
        payload["batch_size"] = args.batch_size
    if args.days_active:
        payload["days_active_threshold"] = args.days_active

    try:
        result = post_job("/overtraining/batch", payload)
    except (requests.RequestException, RuntimeError) as e:
        logger.error("[cron][overtraining][failed] %s", e)
        return 1

    logger.info(
        "[cron][overtraining][done] log_id=%s ok=%s/%s failed=%s in %ss",
        result.get("log_id"), result.get("successful_calculations"),
        result.get("users_to_process"), result.get("failed_calculations"),
        result.get("execution_time_seconds"),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
