"""请求间隔工具"""

from __future__ import annotations

import random


def get_random_delay(base: float, random_range: float) -> float:
    """返回带随机波动的延迟秒数"""
    if random_range <= 0:
        return max(base, 0.0)
    return base + random.uniform(0, random_range)
