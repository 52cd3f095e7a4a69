"""
trajectory.py - 轨迹回放与尾迹记录

- position_at_progress: 按路径总长度的比例（而非路径点下标）定位
- TrajectoryPlayer: 把经过时间映射为进度 min(elapsed / duration, 1)
- TrailTracker: 定长 FIFO 尾迹，支持居中滑动平均
"""

import logging
import math
from collections import deque
from typing import Deque, List, Optional, Sequence

import numpy as np

from .models import Point3D, as_point, path_length

logger = logging.getLogger(__name__)

DEFAULT_TRAIL_CAPACITY = 500
DEFAULT_DURATION = 5.0


def position_at_progress(path: Sequence[Point3D], progress: float) -> Optional[Point3D]:
    """返回路径上 progress (0~1) 处的位置

    沿累计段长找到包含目标距离的线段并线性插值。
    路径少于 2 个点时返回 None。
    """
    if len(path) < 2:
        return None
    points = [as_point(p) for p in path]
    progress = min(max(float(progress), 0.0), 1.0)

    target = progress * path_length(points)
    walked = 0.0
    for i in range(len(points) - 1):
        seg = float(np.linalg.norm(points[i + 1] - points[i]))
        if walked + seg >= target:
            if seg == 0.0:
                return points[i].copy()
            t = (target - walked) / seg
            return points[i] + t * (points[i + 1] - points[i])
        walked += seg
    return points[-1].copy()


class TrajectoryPlayer:
    """按时间回放路径

    Args:
        path: 路径点序列
        duration: 完整回放耗时 (s)
        trail: 可选的 TrailTracker，每次取位置时写入

    Example:
        >>> player = TrajectoryPlayer(result.path, duration=5.0)
        >>> pos = player.position_at(1.2)
    """

    def __init__(
        self,
        path: Sequence[Point3D],
        duration: float = DEFAULT_DURATION,
        trail: Optional['TrailTracker'] = None,
    ) -> None:
        if duration <= 0:
            raise ValueError(f"duration 必须为正数: {duration}")
        self.path = [as_point(p) for p in path]
        self.duration = duration
        self.trail = trail
        self._progress = 0.0

    @property
    def is_finished(self) -> bool:
        return self._progress >= 1.0

    def progress(self, elapsed: float) -> float:
        return min(max(elapsed, 0.0) / self.duration, 1.0)

    def position_at(self, elapsed: float) -> Optional[Point3D]:
        """elapsed 秒时的位置；路径不足 2 个点时为 None"""
        self._progress = self.progress(elapsed)
        pos = position_at_progress(self.path, self._progress)
        if pos is not None and self.trail is not None:
            self.trail.add_position(pos)
        return pos

    def reset(self) -> None:
        self._progress = 0.0
        if self.trail is not None:
            self.trail.clear()


class TrailTracker:
    """定长尾迹

    超过容量后丢弃最早的位置。返回值都是拷贝，调用方修改不影响内部状态。
    """

    def __init__(self, capacity: int = DEFAULT_TRAIL_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError(f"capacity 至少为 1: {capacity}")
        self.capacity = capacity
        self._trail: Deque[Point3D] = deque(maxlen=capacity)

    def __len__(self) -> int:
        return len(self._trail)

    def add_position(self, position: Point3D) -> None:
        self._trail.append(np.array(position, dtype=np.float64))

    def get_trail(self) -> List[Point3D]:
        return [p.copy() for p in self._trail]

    def get_smoothed_trail(self, window: int = 3) -> List[Point3D]:
        """居中滑动平均，边界处窗口截断到已有数据

        尾迹短于 window 时原样返回。
        """
        if window < 1:
            raise ValueError(f"window 至少为 1: {window}")
        trail = self.get_trail()
        n = len(trail)
        if n < window:
            return trail

        half_lo = window // 2
        half_hi = math.ceil(window / 2)
        arr = np.array(trail)
        smoothed = []
        for i in range(n):
            start = max(0, i - half_lo)
            end = min(n, i + half_hi)
            smoothed.append(arr[start:end].mean(axis=0))
        return smoothed

    def clear(self) -> None:
        self._trail.clear()

    def __repr__(self) -> str:
        return f"TrailTracker(n={len(self._trail)}, capacity={self.capacity})"
