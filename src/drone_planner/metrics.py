"""
metrics.py - 路径质量评价与算法对比

提供多维度路径质量评估：
- 路径长度 / 直线距离 / 效率比值
- 平滑度 (相邻线段转角)
- 安全裕度 (路径点到障碍物表面的最小距离)
- 计算统计 (耗时、探索节点数)

以及两个规划结果的对比（只做计算，不负责展示）。
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

import numpy as np

from .collision import CollisionChecker
from .models import Obstacle, PathResult, Point3D, path_length

logger = logging.getLogger(__name__)

MIN_SEGMENT_LENGTH = 1e-10


@dataclass
class PathMetrics:
    """路径质量指标汇总

    Attributes:
        algorithm: 算法名称
        success: 是否找到路径
        path_length: 路径总长度
        direct_distance: 起终点直线距离
        length_ratio: 路径长度 / 直线距离 (≥1.0)
        smoothness: 转角均值 (rad)
        max_curvature: 最大转角 (rad)
        min_clearance: 路径点到障碍物表面的最小距离
        n_waypoints: 路径点数量
        computation_time_ms: 规划耗时 (ms)
        nodes_explored: 探索节点数
    """
    algorithm: str = ""
    success: bool = False
    path_length: float = 0.0
    direct_distance: float = 0.0
    length_ratio: float = float('inf')
    smoothness: float = 0.0
    max_curvature: float = 0.0
    min_clearance: float = float('inf')
    n_waypoints: int = 0
    computation_time_ms: float = 0.0
    nodes_explored: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'algorithm': self.algorithm,
            'success': self.success,
            'path_length': self.path_length,
            'direct_distance': self.direct_distance,
            'length_ratio': self.length_ratio,
            'smoothness': self.smoothness,
            'max_curvature': self.max_curvature,
            'min_clearance': self.min_clearance,
            'n_waypoints': self.n_waypoints,
            'computation_time_ms': self.computation_time_ms,
            'nodes_explored': self.nodes_explored,
        }


def compute_smoothness(path: List[Point3D]) -> Tuple[float, float]:
    """路径转角统计 (rad)

    对每个中间路径点取入段与出段的夹角；零长度线段所在的转角不计入。

    Returns:
        (平均转角, 最大转角)，不足 3 个点或没有有效转角时为 (0, 0)
    """
    if len(path) < 3:
        return 0.0, 0.0

    segs = np.diff(np.asarray(path, dtype=np.float64), axis=0)
    lengths = np.linalg.norm(segs, axis=1)
    incoming, outgoing = segs[:-1], segs[1:]
    denom = lengths[:-1] * lengths[1:]
    valid = (lengths[:-1] >= MIN_SEGMENT_LENGTH) & (lengths[1:] >= MIN_SEGMENT_LENGTH)
    if not np.any(valid):
        return 0.0, 0.0

    cos_turn = np.einsum('ij,ij->i', incoming[valid], outgoing[valid]) / denom[valid]
    turns = np.arccos(np.clip(cos_turn, -1.0, 1.0))
    return float(turns.mean()), float(turns.max())


def evaluate_result(
    result: PathResult,
    obstacles: Optional[Iterable[Obstacle]] = None,
) -> PathMetrics:
    """从 PathResult 计算路径质量指标

    失败结果只填充耗时与探索节点数。
    """
    metrics = PathMetrics(
        algorithm=result.algorithm,
        success=result.success,
        computation_time_ms=result.computation_time_ms,
        nodes_explored=result.nodes_explored,
    )
    if not result.success or len(result.path) < 2:
        return metrics

    path = result.path
    metrics.n_waypoints = len(path)
    metrics.path_length = path_length(path)
    metrics.direct_distance = float(np.linalg.norm(path[-1] - path[0]))
    if metrics.direct_distance > 1e-10:
        metrics.length_ratio = metrics.path_length / metrics.direct_distance
    else:
        metrics.length_ratio = 1.0

    metrics.smoothness, metrics.max_curvature = compute_smoothness(path)

    if obstacles is not None:
        checker = CollisionChecker(obstacles)
        if checker.obstacles:
            metrics.min_clearance = min(checker.clearance(p) for p in path)

    return metrics


def _lower_wins(a: float, b: float, name_a: str, name_b: str) -> Optional[str]:
    if a < b:
        return name_a
    if b < a:
        return name_b
    return None


def compare_results(a: PathResult, b: PathResult) -> Dict[str, Any]:
    """对比两个规划结果

    - shorter_path: 两者都成功时比较长度；只有一方成功则该方胜出
    - faster: 耗时更短者
    - fewer_nodes: 探索节点更少者
    - length_diff_percent: 胜出方路径比另一方短的百分比

    平局时对应项为 None。
    """
    name_a = a.algorithm or "a"
    name_b = b.algorithm or "b"

    shorter = None
    length_diff = 0.0
    if a.success and b.success:
        shorter = _lower_wins(a.length, b.length, name_a, name_b)
        if shorter == name_a and b.length > 0:
            length_diff = (1.0 - a.length / b.length) * 100.0
        elif shorter == name_b and a.length > 0:
            length_diff = (1.0 - b.length / a.length) * 100.0
    elif a.success:
        shorter = name_a
    elif b.success:
        shorter = name_b

    return {
        'shorter_path': shorter,
        'faster': _lower_wins(a.computation_time_ms, b.computation_time_ms, name_a, name_b),
        'fewer_nodes': _lower_wins(a.nodes_explored, b.nodes_explored, name_a, name_b),
        'length_diff_percent': length_diff,
    }


def format_comparison_table(metrics_dict: Dict[str, PathMetrics]) -> str:
    """将多组指标格式化为对比表"""
    if not metrics_dict:
        return "无数据"

    names = list(metrics_dict.keys())
    width = 20 + 16 * len(names)
    header = f"{'指标':<20}" + "".join(f"{n:>16}" for n in names)

    rows = [
        ("路径长度", "path_length", ".4f"),
        ("直线距离", "direct_distance", ".4f"),
        ("路径效率", "length_ratio", ".4f"),
        ("平滑度", "smoothness", ".4f"),
        ("最大曲率", "max_curvature", ".4f"),
        ("最小安全裕度", "min_clearance", ".4f"),
        ("路径点数", "n_waypoints", "d"),
        ("计算时间(ms)", "computation_time_ms", ".2f"),
        ("探索节点数", "nodes_explored", "d"),
    ]

    lines = ["=" * width, header, "-" * width]
    success_row = f"{'是否成功':<20}"
    for n in names:
        success_row += f"{'是' if metrics_dict[n].success else '否':>16}"
    lines.append(success_row)
    for label, attr, fmt in rows:
        row = f"{label:<20}"
        for n in names:
            val = getattr(metrics_dict[n], attr)
            row += f"{val:>16{fmt}}"
        lines.append(row)
    lines.append("=" * width)

    return "\n".join(lines)
