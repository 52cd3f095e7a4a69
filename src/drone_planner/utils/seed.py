"""
utils/seed.py — 随机种子管理

统一管理可复现性种子。
"""

import time
from typing import Optional

import numpy as np


def make_seed(seed: Optional[int] = None) -> int:
    """seed 为 None 时用当前时间戳生成; 否则原样返回."""
    if seed is None:
        return int(time.time() * 1000) % (2**31)
    return int(seed)


def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    """返回 numpy Generator, seed 为 None 时自动分配."""
    return np.random.default_rng(make_seed(seed))
