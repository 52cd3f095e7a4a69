"""
collision.py - 几何与碰撞检测模块

提供无状态的几何工具和碰撞判定：
- 距离 / 宽松相等判断
- 点碰撞检测：无人机包络球膨胀后与 box (Minkowski 近似) / sphere 求交
- 点到线段距离
- 视线检测：线段等间隔采样逐点检查

近似性说明：
    ``has_line_of_sight`` 只检查 ``samples + 1`` 个采样点，
    比采样间隔更窄的障碍物可能被漏检。需要严格无碰撞保证的调用方
    应自行用 ``check_collision`` 重新验证。
"""

import logging
from typing import Iterable, Optional, Sequence

import numpy as np

from .models import Obstacle, Point3D

logger = logging.getLogger(__name__)

DEFAULT_DRONE_RADIUS = 0.5
DEFAULT_LOS_SAMPLES = 20


def distance(a: Point3D, b: Point3D) -> float:
    """欧氏距离"""
    return float(np.linalg.norm(np.asarray(b, dtype=np.float64)
                                - np.asarray(a, dtype=np.float64)))


def points_equal(a: Point3D, b: Point3D, tolerance: float = 0.1) -> bool:
    """三个轴的差值都严格小于 tolerance 时视为相等（仅用于到达判断）"""
    diff = np.abs(np.asarray(a, dtype=np.float64) - np.asarray(b, dtype=np.float64))
    return bool(np.all(diff < tolerance))


def check_collision(
    point: Point3D,
    obstacles: Iterable[Obstacle],
    drone_radius: float = DEFAULT_DRONE_RADIUS,
) -> bool:
    """单点碰撞检测

    按列表顺序逐个检测，命中第一个即返回。

    Args:
        point: 无人机中心位置
        obstacles: 障碍物列表
        drone_radius: 无人机包络球半径

    Returns:
        True = 存在碰撞, False = 无碰撞
    """
    p = np.asarray(point, dtype=np.float64)
    for obs in obstacles:
        if obs.kind == 'box':
            reach = obs.half_extents + drone_radius
            if np.all(np.abs(p - obs.position) <= reach):
                return True
        elif distance(p, obs.position) < obs.radius + drone_radius:
            return True
    return False


def point_to_line_distance(
    point: Point3D,
    seg_start: Point3D,
    seg_end: Point3D,
) -> float:
    """点到线段的最短距离

    投影参数落在 [0, 1] 之外时截断到端点；零长度线段退化为点到点距离。
    """
    p = np.asarray(point, dtype=np.float64)
    a = np.asarray(seg_start, dtype=np.float64)
    b = np.asarray(seg_end, dtype=np.float64)

    seg = b - a
    len_sq = float(np.dot(seg, seg))
    if len_sq == 0.0:
        return distance(p, a)

    t = float(np.dot(p - a, seg)) / len_sq
    if t < 0.0:
        closest = a
    elif t > 1.0:
        closest = b
    else:
        closest = a + t * seg
    return distance(p, closest)


def has_line_of_sight(
    start: Point3D,
    end: Point3D,
    obstacles: Sequence[Obstacle],
    samples: int = DEFAULT_LOS_SAMPLES,
    drone_radius: float = DEFAULT_DRONE_RADIUS,
) -> bool:
    """视线检测：在 [start, end] 上均匀取 samples + 1 个点，任一碰撞即不可见"""
    a = np.asarray(start, dtype=np.float64)
    b = np.asarray(end, dtype=np.float64)
    seg = b - a
    for i in range(samples + 1):
        t = i / samples
        if check_collision(a + t * seg, obstacles, drone_radius):
            return False
    return True


class CollisionChecker:
    """碰撞检测器

    绑定一个障碍物快照和无人机半径，并累计检测调用次数。

    Args:
        obstacles: 障碍物列表（或 Scene）
        drone_radius: 无人机包络球半径
        los_samples: 视线检测采样数

    Example:
        >>> checker = CollisionChecker(scene.get_obstacles())
        >>> checker.check_point(p)
        >>> checker.has_line_of_sight(p, q)
    """

    def __init__(
        self,
        obstacles: Iterable[Obstacle],
        drone_radius: float = DEFAULT_DRONE_RADIUS,
        los_samples: int = DEFAULT_LOS_SAMPLES,
    ) -> None:
        self.obstacles = list(obstacles)
        self.drone_radius = drone_radius
        self.los_samples = los_samples
        self._n_collision_checks = 0

    @property
    def n_collision_checks(self) -> int:
        """累计单点碰撞检测次数"""
        return self._n_collision_checks

    def reset_counter(self) -> None:
        self._n_collision_checks = 0

    def check_point(self, point: Point3D) -> bool:
        """True = 碰撞"""
        self._n_collision_checks += 1
        return check_collision(point, self.obstacles, self.drone_radius)

    def has_line_of_sight(self, start: Point3D, end: Point3D,
                          samples: Optional[int] = None) -> bool:
        n = self.los_samples if samples is None else samples
        a = np.asarray(start, dtype=np.float64)
        seg = np.asarray(end, dtype=np.float64) - a
        for i in range(n + 1):
            if self.check_point(a + (i / n) * seg):
                return False
        return True

    def clearance(self, point: Point3D) -> float:
        """点到最近障碍物表面的距离（未计入无人机半径，内部为 0）"""
        p = np.asarray(point, dtype=np.float64)
        best = float('inf')
        for obs in self.obstacles:
            if obs.kind == 'box':
                clamped = np.clip(p, obs.min_point, obs.max_point)
                d = distance(p, clamped)
            else:
                d = max(0.0, distance(p, obs.position) - obs.radius)
            best = min(best, d)
        return best

    def __repr__(self) -> str:
        return (f"CollisionChecker(n_obstacles={len(self.obstacles)}, "
                f"drone_radius={self.drone_radius})")
