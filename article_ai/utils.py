# -*- coding: utf-8 -*-
from __future__ import annotations

import os
import sys
from zoneinfo import ZoneInfo

from loguru import logger


def timezone_filter(record):
    record["time"] = record["time"].astimezone(ZoneInfo(os.getenv("LOG_TIMEZONE", "Asia/Shanghai")))
    return record


def init_log(**sink_channel):
    """重置 loguru 的 sink：stdout + 可选的额外 sink（name=path 形式传入）。"""
    log_level = os.getenv("LOG_LEVEL", "DEBUG").upper()
    logger.remove()
    logger.add(sink=sys.stdout, level=log_level, filter=timezone_filter)
    for sink in sink_channel.values():
        if sink:
            logger.add(sink=sink, level=log_level, filter=timezone_filter, encoding="utf-8")
    return logger
