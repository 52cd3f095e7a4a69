"""
rrt.py - RRT 规划器（随机采样）

单树 RRT：
1. 以 goal_bias 概率直接采样目标点，否则在 bounds 内各轴均匀采样
2. 线性扫描找最近树节点
3. 向采样点延伸至多 step_size
4. 新点碰撞则丢弃本次迭代（仍计入 nodes_explored）
5. 新点距目标小于 2 * step_size 时回溯路径并显式追加目标点

迭代次数上限保证终止。随机源通过 ``rng`` / ``seed`` 注入，便于复现。
"""

import logging
from typing import Iterable, List, Optional, Tuple, Union

import numpy as np

from .collision import CollisionChecker, distance
from .models import Bounds, Obstacle, PathResult, PlannerConfig, Point3D, as_point
from .path_smoother import PathSmoother
from .utils.seed import make_rng
from .utils.timing import Timer

logger = logging.getLogger(__name__)


class _NodePool:
    """用 numpy 数组存储 RRT 节点, 父节点用下标表示 (-1 为根)."""
    __slots__ = ('points', 'parents', 'n', 'cap')

    def __init__(self, cap: int = 1024):
        self.cap = cap
        self.points = np.empty((cap, 3), dtype=np.float64)
        self.parents = np.full(cap, -1, dtype=np.int64)
        self.n = 0

    def add(self, point: Point3D, parent: int) -> int:
        if self.n >= self.cap:
            self.cap *= 2
            new_p = np.empty((self.cap, 3), dtype=np.float64)
            new_p[:self.n] = self.points[:self.n]
            self.points = new_p
            new_par = np.full(self.cap, -1, dtype=np.int64)
            new_par[:self.n] = self.parents[:self.n]
            self.parents = new_par
        idx = self.n
        self.points[idx] = point
        self.parents[idx] = parent
        self.n += 1
        return idx

    def nearest(self, point: Point3D) -> int:
        """最近节点下标；距离相同时取先加入的节点"""
        diffs = self.points[:self.n] - point
        dists = np.sum(diffs * diffs, axis=1)
        return int(np.argmin(dists))

    def extract_path(self, idx: int) -> List[Point3D]:
        path = []
        while idx >= 0:
            path.append(self.points[idx].copy())
            idx = int(self.parents[idx])
        path.reverse()
        return path


def steer(from_point: Point3D, to_point: Point3D, step_size: float) -> Point3D:
    """从 from_point 向 to_point 延伸至多 step_size"""
    dist = distance(from_point, to_point)
    if dist < step_size:
        return np.array(to_point, dtype=np.float64)
    return from_point + (step_size / dist) * (to_point - from_point)


class RRTPlanner:
    """RRT 规划器

    Args:
        obstacles: 障碍物列表（规划期间只读）
        config: 规划参数（使用 bounds / rrt_step_size / rrt_max_iterations /
            goal_bias / drone_radius / auto_smooth / rdp_epsilon /
            smooth_iterations / los_samples / record_exploration）

    Example:
        >>> planner = RRTPlanner(scene.get_obstacles())
        >>> result = planner.plan(start, goal, seed=42)
    """

    name = "rrt"

    def __init__(
        self,
        obstacles: Iterable[Obstacle],
        config: Optional[PlannerConfig] = None,
    ) -> None:
        self.config = config or PlannerConfig()
        self.bounds = self.config.bounds
        self.collision_checker = CollisionChecker(
            obstacles,
            drone_radius=self.config.drone_radius,
            los_samples=self.config.los_samples,
        )
        self.path_smoother = PathSmoother(
            self.collision_checker,
            rdp_epsilon=self.config.rdp_epsilon,
            max_iterations=self.config.smooth_iterations,
        )

    def _sample(self, goal: Point3D, rng: np.random.Generator) -> Point3D:
        if rng.random() < self.config.goal_bias:
            return goal.copy()
        return self.bounds.sample(rng)

    def plan(
        self,
        start: Point3D,
        goal: Point3D,
        rng: Optional[np.random.Generator] = None,
        seed: Optional[int] = None,
    ) -> PathResult:
        """执行规划

        Args:
            start: 起点
            goal: 终点
            rng: 随机数生成器（优先）
            seed: 随机种子，rng 为 None 时使用

        Returns:
            PathResult；迭代用尽时 success=False
        """
        timer = Timer()
        if rng is None:
            rng = make_rng(seed)
        start = as_point(start)
        goal = as_point(goal)
        step = self.config.rrt_step_size
        max_iterations = self.config.rrt_max_iterations

        checker = self.collision_checker
        checker.reset_counter()
        if checker.check_point(start):
            logger.warning("RRT: 起点 %s 与障碍物碰撞", start.tolist())

        pool = _NodePool()
        pool.add(start, -1)
        trace: Optional[List[Point3D]] = [start.copy()] if self.config.record_exploration else None

        n_explored = 0
        path: List[Point3D] = []
        with timer.phase("search"):
            for _ in range(max_iterations):
                n_explored += 1

                target = self._sample(goal, rng)
                idx_near = pool.nearest(target)
                new_point = steer(pool.points[idx_near], target, step)

                if checker.check_point(new_point):
                    continue

                idx_new = pool.add(new_point, idx_near)
                if trace is not None:
                    trace.append(new_point.copy())

                if distance(new_point, goal) < 2.0 * step:
                    path = pool.extract_path(idx_new)
                    path.append(goal.copy())
                    break

        if not path:
            logger.info("RRT: %d 次迭代内未找到路径 (树节点 %d, %.1f ms)",
                        n_explored, pool.n, timer.elapsed_ms)
            return PathResult.failure(
                computation_time_ms=timer.elapsed_ms,
                nodes_explored=n_explored,
                explored_nodes=trace,
                phase_times=timer.to_ms_dict(),
                algorithm=self.name,
            )

        if self.config.auto_smooth:
            with timer.phase("smoothing"):
                path = self.path_smoother.post_process(path)

        result = PathResult.assemble(
            path,
            computation_time_ms=timer.elapsed_ms,
            nodes_explored=n_explored,
            explored_nodes=trace,
            phase_times=timer.to_ms_dict(),
            algorithm=self.name,
        )
        logger.info("RRT: 找到路径 (迭代 %d 次, 树节点 %d, 长度 %.3f, %.1f ms)",
                    n_explored, pool.n, result.length, result.computation_time_ms)
        logger.debug("RRT: 阶段耗时\n%s", timer.summary())
        return result


def plan_rrt(
    start: Point3D,
    goal: Point3D,
    obstacles: Iterable[Obstacle],
    bounds: Union[Bounds, Tuple[float, float]] = Bounds(),
    max_iterations: int = 2000,
    step_size: float = 0.8,
    auto_smooth: bool = True,
    rng: Optional[np.random.Generator] = None,
    seed: Optional[int] = None,
    **config_overrides,
) -> PathResult:
    """RRT 便捷入口

    Args:
        start: 起点
        goal: 终点
        obstacles: 障碍物列表
        bounds: 规划范围 Bounds 或 (min, max)
        max_iterations: 最大迭代次数
        step_size: 单步延伸距离
        auto_smooth: 成功后是否做 RDP + 视线缩短
        rng: 随机数生成器
        seed: 随机种子（rng 为 None 时使用）
        **config_overrides: 其余 PlannerConfig 字段

    Returns:
        PathResult
    """
    if not isinstance(bounds, Bounds):
        bounds = Bounds(*bounds)
    config = PlannerConfig(
        bounds_min=bounds.min,
        bounds_max=bounds.max,
        rrt_max_iterations=max_iterations,
        rrt_step_size=step_size,
        auto_smooth=auto_smooth,
        **config_overrides,
    )
    return RRTPlanner(obstacles, config).plan(start, goal, rng=rng, seed=seed)
