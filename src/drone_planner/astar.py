"""
astar.py - 网格 A* 规划器（确定性）

在以 step_size 为步长的隐式 3D 晶格上做 A* 搜索：
- 18 邻域：两轴取 {-1, 0, +1}、第三轴为 0 的全部组合（去掉零向量）
- 代价 g 为累计欧氏距离，启发 h 为到目标的欧氏距离
- closed 集按 0.1 分辨率离散坐标去重，与步长无关
- 到达判断：三轴差值都小于 step_size
- 扩展次数上限 MAX_EXPANSIONS，超限视为规划失败

open 集用 (f, 节点序号) 小顶堆 + 惰性删除实现。节点序号即插入顺序，
因此 f 相同时先插入的节点先出队，与线性扫描取第一个最小值的次序一致。
"""

import heapq
import logging
import math
from typing import Dict, Iterable, List, Optional, Set, Tuple, Union

import numpy as np

from .collision import CollisionChecker, distance, points_equal
from .models import Bounds, Obstacle, PathResult, PlannerConfig, Point3D, as_point
from .path_smoother import PathSmoother
from .utils.timing import Timer

logger = logging.getLogger(__name__)

MAX_EXPANSIONS = 10000

GridKey = Tuple[int, int, int]

# 顺序决定同代价邻居的插入次序，不要调整
NEIGHBOR_DIRECTIONS = np.array([
    (1, 0, 0), (-1, 0, 0),
    (0, 1, 0), (0, -1, 0),
    (0, 0, 1), (0, 0, -1),
    (1, 1, 0), (1, -1, 0),
    (-1, 1, 0), (-1, -1, 0),
    (1, 0, 1), (1, 0, -1),
    (-1, 0, 1), (-1, 0, -1),
    (0, 1, 1), (0, 1, -1),
    (0, -1, 1), (0, -1, -1),
], dtype=np.float64)


def grid_key(point: Point3D) -> GridKey:
    """0.1 分辨率离散坐标（四舍五入，.5 向上取整）"""
    return (math.floor(point[0] * 10.0 + 0.5),
            math.floor(point[1] * 10.0 + 0.5),
            math.floor(point[2] * 10.0 + 0.5))


class _SearchArena:
    """A* 节点存储：numpy 数组 + 父节点下标，-1 表示根"""
    __slots__ = ('points', 'g', 'h', 'f', 'parents', 'closed', 'n', 'cap')

    def __init__(self, cap: int = 1024):
        self.cap = cap
        self.points = np.empty((cap, 3), dtype=np.float64)
        self.g = np.zeros(cap, dtype=np.float64)
        self.h = np.zeros(cap, dtype=np.float64)
        self.f = np.zeros(cap, dtype=np.float64)
        self.parents = np.full(cap, -1, dtype=np.int64)
        self.closed = np.zeros(cap, dtype=bool)
        self.n = 0

    def _grow(self) -> None:
        self.cap *= 2
        for name in ('points', 'g', 'h', 'f', 'parents', 'closed'):
            old = getattr(self, name)
            new = np.empty((self.cap,) + old.shape[1:], dtype=old.dtype)
            new[:self.n] = old[:self.n]
            setattr(self, name, new)

    def add(self, point: Point3D, g: float, h: float, parent: int) -> int:
        if self.n >= self.cap:
            self._grow()
        idx = self.n
        self.points[idx] = point
        self.g[idx] = g
        self.h[idx] = h
        self.f[idx] = g + h
        self.parents[idx] = parent
        self.closed[idx] = False
        self.n += 1
        return idx

    def relax(self, idx: int, g: float, parent: int) -> None:
        """更便宜的路线：原位替换 g / f / parent"""
        self.g[idx] = g
        self.f[idx] = g + self.h[idx]
        self.parents[idx] = parent

    def extract_path(self, idx: int) -> List[Point3D]:
        path = []
        while idx >= 0:
            path.append(self.points[idx].copy())
            idx = int(self.parents[idx])
        path.reverse()
        return path


class AStarPlanner:
    """网格 A* 规划器

    Args:
        obstacles: 障碍物列表（规划期间只读）
        config: 规划参数（使用 bounds / grid_step_size / drone_radius /
            auto_smooth / rdp_epsilon / smooth_iterations / los_samples /
            record_exploration）

    Example:
        >>> planner = AStarPlanner(scene.get_obstacles())
        >>> result = planner.plan([0, 0, 0], [5, 0, 0])
        >>> if result.success:
        ...     print(f"路径长度: {result.length:.3f}")
    """

    name = "astar"

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

    def _is_free(self, point: Point3D) -> bool:
        return (self.bounds.contains(point)
                and not self.collision_checker.check_point(point))

    def plan(self, start: Point3D, goal: Point3D) -> PathResult:
        """执行规划；找不到路径时返回 success=False 的结果"""
        timer = Timer()
        start = as_point(start)
        goal = as_point(goal)
        step = self.config.grid_step_size
        record = self.config.record_exploration
        trace: Optional[List[Point3D]] = [] if record else None

        checker = self.collision_checker
        checker.reset_counter()
        if checker.check_point(start):
            logger.warning("A*: 起点 %s 与障碍物碰撞", start.tolist())
        if checker.check_point(goal):
            logger.warning("A*: 终点 %s 与障碍物碰撞", goal.tolist())

        arena = _SearchArena()
        h0 = distance(start, goal)
        arena.add(start, 0.0, h0, -1)
        heap: List[Tuple[float, int]] = [(float(arena.f[0]), 0)]
        open_index: Dict[GridKey, int] = {grid_key(start): 0}
        closed_keys: Set[GridKey] = set()
        offsets = NEIGHBOR_DIRECTIONS * step

        n_explored = 0
        goal_idx = -1
        with timer.phase("search"):
            while heap and n_explored < MAX_EXPANSIONS:
                f, idx = heapq.heappop(heap)
                if arena.closed[idx] or f != arena.f[idx]:
                    continue  # 过期条目

                n_explored += 1
                current = arena.points[idx]
                if trace is not None:
                    trace.append(current.copy())

                if points_equal(current, goal, step):
                    goal_idx = idx
                    break

                key = grid_key(current)
                arena.closed[idx] = True
                closed_keys.add(key)
                open_index.pop(key, None)

                g_current = arena.g[idx]
                for offset in offsets:
                    neighbor = current + offset
                    n_key = grid_key(neighbor)
                    if n_key in closed_keys:
                        continue
                    if not self._is_free(neighbor):
                        continue

                    g = g_current + distance(current, neighbor)
                    existing = open_index.get(n_key)
                    if existing is not None:
                        if g < arena.g[existing]:
                            arena.relax(existing, g, idx)
                            heapq.heappush(heap, (float(arena.f[existing]), existing))
                    else:
                        n_idx = arena.add(neighbor, g, distance(neighbor, goal), idx)
                        open_index[n_key] = n_idx
                        heapq.heappush(heap, (float(arena.f[n_idx]), n_idx))

        if goal_idx < 0:
            if n_explored >= MAX_EXPANSIONS:
                logger.debug("A*: 达到扩展上限 %d", MAX_EXPANSIONS)
            logger.info("A*: 未找到路径 (扩展 %d 个节点, %.1f ms)",
                        n_explored, timer.elapsed_ms)
            return PathResult.failure(
                computation_time_ms=timer.elapsed_ms,
                nodes_explored=n_explored,
                explored_nodes=trace,
                phase_times=timer.to_ms_dict(),
                algorithm=self.name,
            )

        path = arena.extract_path(goal_idx)
        if len(path) == 1:
            # 起点已在到达容差内，补上目标点使路径至少有两个点
            path.append(goal.copy())
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
        logger.info("A*: 找到路径 (扩展 %d 个节点, %d 个路径点, 长度 %.3f, %.1f ms)",
                    n_explored, result.n_waypoints, result.length,
                    result.computation_time_ms)
        logger.debug("A*: 阶段耗时\n%s", timer.summary())
        return result


def plan_astar(
    start: Point3D,
    goal: Point3D,
    obstacles: Iterable[Obstacle],
    bounds: Union[Bounds, Tuple[float, float]] = Bounds(),
    step_size: float = 1.0,
    auto_smooth: bool = True,
    **config_overrides,
) -> PathResult:
    """网格 A* 便捷入口

    Args:
        start: 起点
        goal: 终点
        obstacles: 障碍物列表
        bounds: 规划范围 Bounds 或 (min, max)
        step_size: 网格步长（同时是到达容差）
        auto_smooth: 成功后是否做 RDP (epsilon 0.5) + 视线缩短 (3 轮)
        **config_overrides: 其余 PlannerConfig 字段

    Returns:
        PathResult
    """
    if not isinstance(bounds, Bounds):
        bounds = Bounds(*bounds)
    config = PlannerConfig(
        bounds_min=bounds.min,
        bounds_max=bounds.max,
        grid_step_size=step_size,
        auto_smooth=auto_smooth,
        **config_overrides,
    )
    return AStarPlanner(obstacles, config).plan(start, goal)
