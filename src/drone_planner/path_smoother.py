"""
path_smoother.py - 路径后处理

提供路径简化、缩短和平滑功能：
1. 角度简化：去掉转角小于阈值的中间点
2. Ramer–Douglas–Peucker 简化：按垂直距离递归剪枝
3. 视线缩短 (string pulling)：贪心跳到最远可见路径点
4. Catmull-Rom 曲线：用于可视化 / 运动回放，不做碰撞复检
5. 等分插值：每段等步长线性细分

简化与缩短只会挑选原路径点的子集；视线检测基于采样，
需要严格无碰撞保证时应用 ``check_collision`` 重新验证。
"""

import logging
from typing import List, Optional, Sequence

import numpy as np

from .collision import (
    DEFAULT_DRONE_RADIUS,
    DEFAULT_LOS_SAMPLES,
    CollisionChecker,
    point_to_line_distance,
)
from .models import Obstacle, Point3D, as_point

logger = logging.getLogger(__name__)

MIN_VECTOR_NORM = 0.001


def _as_points(path: Sequence[Point3D]) -> List[Point3D]:
    return [as_point(p) for p in path]


def simplify_path(path: Sequence[Point3D], tolerance: float = 0.5) -> List[Point3D]:
    """角度简化

    以上一个保留点为起点计算入向量，转角 (rad) 大于 tolerance
    的中间点才保留。长度小于 0.001 的向量直接跳过该点。
    """
    path = _as_points(path)
    if len(path) <= 2:
        return path

    simplified = [path[0]]
    for i in range(1, len(path) - 1):
        prev = simplified[-1]
        current = path[i]
        nxt = path[i + 1]

        v1 = current - prev
        v2 = nxt - current
        n1 = float(np.linalg.norm(v1))
        n2 = float(np.linalg.norm(v2))
        if n1 < MIN_VECTOR_NORM or n2 < MIN_VECTOR_NORM:
            continue

        cos_angle = np.clip(np.dot(v1, v2) / (n1 * n2), -1.0, 1.0)
        if float(np.arccos(cos_angle)) > tolerance:
            simplified.append(current)

    simplified.append(path[-1])
    return simplified


def ramer_douglas_peucker(path: Sequence[Point3D], epsilon: float = 0.3) -> List[Point3D]:
    """Ramer–Douglas–Peucker 路径简化

    找到离首尾连线最远的中间点；距离大于 epsilon 则在该点拆分两半
    递归处理（拼接时不重复拆分点），否则整段只保留首尾两点。

    Args:
        path: 路径点列表
        epsilon: 垂直距离阈值，必须非负

    Returns:
        简化后的路径，首尾点与输入完全相同
    """
    if epsilon < 0:
        raise ValueError(f"epsilon 不能为负: {epsilon}")
    return _rdp(_as_points(path), epsilon)


def _rdp(path: List[Point3D], epsilon: float) -> List[Point3D]:
    if len(path) < 3:
        return path

    first, last = path[0], path[-1]
    max_dist = 0.0
    max_index = 0
    for i in range(1, len(path) - 1):
        d = point_to_line_distance(path[i], first, last)
        if d > max_dist:
            max_dist = d
            max_index = i

    if max_dist > epsilon:
        left = _rdp(path[:max_index + 1], epsilon)
        right = _rdp(path[max_index:], epsilon)
        return left[:-1] + right
    return [first, last]


def _line_of_sight_pass(path: List[Point3D], checker: CollisionChecker) -> List[Point3D]:
    """单轮视线缩短：从当前点向后找最远的连续可见点并跳过去"""
    if len(path) < 3:
        return path

    result = [path[0]]
    current = 0
    while current < len(path) - 1:
        farthest = current + 1
        for i in range(current + 2, len(path)):
            if checker.has_line_of_sight(path[current], path[i]):
                farthest = i
            else:
                break
        current = farthest
        result.append(path[current])
    return result


def smooth_path(
    path: Sequence[Point3D],
    obstacles: Optional[Sequence[Obstacle]] = None,
    max_iterations: int = 3,
    drone_radius: float = DEFAULT_DRONE_RADIUS,
    samples: int = DEFAULT_LOS_SAMPLES,
) -> List[Point3D]:
    """视线缩短 (string pulling)，最多 max_iterations 轮

    某一轮路径点数没有减少时提前结束；不足 3 个点的路径原样返回。
    """
    checker = CollisionChecker(obstacles or [], drone_radius, samples)
    return PathSmoother(checker).shortcut(path, max_iterations)


def interpolate_path_for_movement(
    waypoints: Sequence[Point3D],
    points_per_segment: int = 20,
) -> List[Point3D]:
    """等分插值：每段线性细分为 points_per_segment 步，末点只输出一次"""
    waypoints = _as_points(waypoints)
    if len(waypoints) < 2:
        return list(waypoints)

    out: List[Point3D] = []
    for i in range(len(waypoints) - 1):
        start = waypoints[i]
        seg = waypoints[i + 1] - start
        for j in range(points_per_segment):
            out.append(start + (j / points_per_segment) * seg)
    out.append(waypoints[-1].copy())
    return out


def create_smooth_curve(waypoints: Sequence[Point3D], segments: int = 50) -> List[Point3D]:
    """Catmull-Rom 曲线

    每个相邻路径点区间生成 segments 个点；首尾处的虚拟控制点
    取最近的真实端点。只有两个路径点时退化为直线插值。
    """
    waypoints = _as_points(waypoints)
    if len(waypoints) < 2:
        return list(waypoints)
    if len(waypoints) == 2:
        return interpolate_path_for_movement(waypoints, segments)

    n = len(waypoints)
    curve: List[Point3D] = []
    for i in range(n - 1):
        p0 = waypoints[max(0, i - 1)]
        p1 = waypoints[i]
        p2 = waypoints[i + 1]
        p3 = waypoints[min(n - 1, i + 2)]

        # 三次 Catmull-Rom 基
        c0 = 2.0 * p1
        c1 = p2 - p0
        c2 = 2.0 * p0 - 5.0 * p1 + 4.0 * p2 - p3
        c3 = -p0 + 3.0 * p1 - 3.0 * p2 + p3
        for k in range(segments):
            t = k / segments
            curve.append(0.5 * (c0 + c1 * t + c2 * t * t + c3 * t * t * t))

    curve.append(waypoints[-1].copy())
    return curve


class PathSmoother:
    """路径后处理器

    Args:
        collision_checker: 碰撞检测器（视线检测用）
        rdp_epsilon: 自动平滑时 RDP 的距离阈值
        max_iterations: 视线缩短最大轮数

    Example:
        >>> smoother = PathSmoother(checker)
        >>> final_path = smoother.post_process(raw_path)
    """

    def __init__(
        self,
        collision_checker: CollisionChecker,
        rdp_epsilon: float = 0.5,
        max_iterations: int = 3,
    ) -> None:
        self.collision_checker = collision_checker
        self.rdp_epsilon = rdp_epsilon
        self.max_iterations = max_iterations

    def shortcut(self, path: Sequence[Point3D],
                 max_iterations: Optional[int] = None) -> List[Point3D]:
        """视线缩短，路径点数不会增加"""
        smoothed = _as_points(path)
        if len(smoothed) < 3:
            return smoothed
        if max_iterations is None:
            max_iterations = self.max_iterations

        for _ in range(max_iterations):
            optimized = _line_of_sight_pass(smoothed, self.collision_checker)
            if len(optimized) == len(smoothed):
                break
            smoothed = optimized
        return smoothed

    def post_process(self, path: Sequence[Point3D]) -> List[Point3D]:
        """规划成功后的自动平滑：RDP 简化 + 视线缩短"""
        simplified = ramer_douglas_peucker(path, self.rdp_epsilon)
        final = self.shortcut(simplified)
        if len(final) < len(path):
            logger.info("路径平滑: %d → %d (RDP) → %d 个点",
                        len(path), len(simplified), len(final))
        return final
