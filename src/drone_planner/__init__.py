"""
drone_planner - 三维无人机避障路径规划

在有界立方体空间内，为带包络半径的无人机计算绕开静态
box / sphere 障碍物的路径。

核心组件：
1. 碰撞检测：点-障碍物判定、点到线段距离、视线检测
2. A* 网格搜索（确定性，18 邻域，扩展次数上限 10000）
3. RRT 随机采样（目标偏置，迭代次数上限可配）
4. 路径后处理：RDP 简化 + 视线缩短，可选 Catmull-Rom 曲线与等分插值
5. 轨迹回放：按路径长度比例插值，定长尾迹与滑动平均
"""

from .models import (
    Obstacle,
    Bounds,
    PlannerConfig,
    PathResult,
    Point3D,
    as_point,
    path_length,
)
from .obstacles import Scene, default_scene
from .collision import (
    CollisionChecker,
    check_collision,
    distance,
    has_line_of_sight,
    point_to_line_distance,
    points_equal,
)
from .astar import AStarPlanner, plan_astar, MAX_EXPANSIONS
from .rrt import RRTPlanner, plan_rrt
from .path_smoother import (
    PathSmoother,
    simplify_path,
    ramer_douglas_peucker,
    smooth_path,
    create_smooth_curve,
    interpolate_path_for_movement,
)
from .trajectory import TrailTracker, TrajectoryPlayer, position_at_progress
from .metrics import PathMetrics, evaluate_result, compare_results, format_comparison_table
from .planner import plan_path, run_comparison

__version__ = "1.0.0"

__all__ = [
    # 数据模型
    'Obstacle',
    'Bounds',
    'PlannerConfig',
    'PathResult',
    'Point3D',
    'as_point',
    'path_length',
    # 场景
    'Scene',
    'default_scene',
    # 碰撞检测
    'CollisionChecker',
    'check_collision',
    'distance',
    'has_line_of_sight',
    'point_to_line_distance',
    'points_equal',
    # 规划器
    'AStarPlanner',
    'plan_astar',
    'MAX_EXPANSIONS',
    'RRTPlanner',
    'plan_rrt',
    'plan_path',
    'run_comparison',
    # 后处理
    'PathSmoother',
    'simplify_path',
    'ramer_douglas_peucker',
    'smooth_path',
    'create_smooth_curve',
    'interpolate_path_for_movement',
    # 回放
    'TrailTracker',
    'TrajectoryPlayer',
    'position_at_progress',
    # 评价
    'PathMetrics',
    'evaluate_result',
    'compare_results',
    'format_comparison_table',
]
