#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
回填当日 GAS 模型结果，按 limit/offset 分页直到没有更多用户

用法：
    python -m crontab.gas_backfill [--page-size 100] [--concurrency 3]
"""

import argparse
import logging
import sys

import requests

from biopeak.logging_config import setup_logging
from crontab._client import post_job

logger = logging.getLogger("crontab.gas_backfill")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="回填当日 GAS 模型结果")
    parser.add_argument("--page-size", type=int, default=100)
    parser.add_argument("--concurrency", type=int, default=3)
    parser.add_argument("--all", action="store_true", help="当日已有结果的用户也重新计算")
    args = parser.parse_args(argv)

    setup_logging()
    offset = 0
    processed = failed = 0
    while True:
        payload = {
            "limit": args.page_size,
            "offset": offset,
            "concurrency": args.concurrency,
            "only_missing_today": not args.all,
        }
        try:
            result = post_job("/gas-model/backfill", payload)
        except (requests.RequestException, RuntimeError) as e:
            logger.error("[cron][gas-backfill][failed] offset=%s %s", offset, e)
            return 1

        processed += result.get("successful_calculations", 0)
        failed += result.get("failed_calculations", 0)
        if result.get("users_scanned", 0) < args.page_size:
            break
        offset += args.page_size

    logger.info("[cron][gas-backfill][done] ok=%s failed=%s", processed, failed)
    return 0


if __name__ == "__main__":
    sys.exit(main())
