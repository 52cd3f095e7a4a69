"""
planner.py - 规划入口

按算法名分派到 A* / RRT 规划器，并支持在同一障碍物快照上
对两种算法做对比。
"""

import logging
from typing import Dict, Iterable, Optional

import numpy as np

from .astar import AStarPlanner
from .models import Obstacle, PathResult, PlannerConfig, Point3D
from .rrt import RRTPlanner

logger = logging.getLogger(__name__)

ALGORITHMS = ('astar', 'rrt')


def plan_path(
    start: Point3D,
    goal: Point3D,
    obstacles: Iterable[Obstacle],
    algorithm: str = "astar",
    config: Optional[PlannerConfig] = None,
    rng: Optional[np.random.Generator] = None,
) -> PathResult:
    """规划一条路径

    Args:
        start: 起点
        goal: 终点
        obstacles: 障碍物列表或 Scene
        algorithm: 'astar' 或 'rrt'
        config: 规划参数，None 时用默认值
        rng: RRT 使用的随机数生成器

    Raises:
        ValueError: 未知算法名
    """
    algorithm = algorithm.lower()
    if algorithm == 'astar':
        return AStarPlanner(obstacles, config).plan(start, goal)
    if algorithm == 'rrt':
        return RRTPlanner(obstacles, config).plan(start, goal, rng=rng)
    raise ValueError(f"未知算法: {algorithm!r}, 可选 {ALGORITHMS}")


def run_comparison(
    start: Point3D,
    goal: Point3D,
    obstacles: Iterable[Obstacle],
    config: Optional[PlannerConfig] = None,
    rng: Optional[np.random.Generator] = None,
) -> Dict[str, PathResult]:
    """在同一障碍物快照上依次运行 A* 和 RRT

    Returns:
        {'astar': PathResult, 'rrt': PathResult}
    """
    snapshot = list(obstacles)
    results = {
        name: plan_path(start, goal, snapshot, algorithm=name, config=config, rng=rng)
        for name in ALGORITHMS
    }
    logger.info("对比完成: %s", ", ".join(
        f"{name}={'成功' if r.success else '失败'}" for name, r in results.items()))
    return results
