"""
utils/timing.py — 阶段计时器

用于记录规划各阶段（搜索 / 平滑）耗时。
"""

import time
from contextlib import contextmanager
from typing import Dict, List, Tuple


class Timer:
    """阶段计时器，记录每个阶段的耗时（秒）。"""

    def __init__(self) -> None:
        self.records: Dict[str, float] = {}
        self._t0 = time.perf_counter()

    @contextmanager
    def phase(self, name: str):
        """记录 name 阶段的耗时 (秒)."""
        t0 = time.perf_counter()
        try:
            yield
        finally:
            self.records[name] = time.perf_counter() - t0

    @property
    def elapsed(self) -> float:
        """自计时器创建以来的墙钟时间 (秒)."""
        return time.perf_counter() - self._t0

    @property
    def elapsed_ms(self) -> float:
        return self.elapsed * 1000.0

    @property
    def total(self) -> float:
        return sum(self.records.values())

    def to_ms_dict(self) -> Dict[str, float]:
        return {name: sec * 1000.0 for name, sec in self.records.items()}

    def summary(self, unit: str = "ms") -> str:
        """返回格式化汇总字符串."""
        mul = 1000.0 if unit == "ms" else 1.0
        lines: List[str] = []
        items: List[Tuple[str, float]] = list(self.records.items())
        for name, sec in items:
            lines.append(f"  {name:20s}: {sec * mul:8.1f} {unit}")
        lines.append(f"  {'TOTAL':20s}: {self.total * mul:8.1f} {unit}")
        return "\n".join(lines)
