"""
models.py - 规划器数据模型

定义路径规划使用的核心数据结构：Obstacle、Bounds、PlannerConfig、PathResult。

点 (Point3D) 统一用 shape=(3,) 的 float64 ``np.ndarray`` 表示。
"""

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import numpy as np

Point3D = np.ndarray

OBSTACLE_KINDS = ('box', 'sphere')


def as_point(p: Sequence[float]) -> Point3D:
    """把任意长度为 3 的序列转为 float64 点"""
    arr = np.asarray(p, dtype=np.float64)
    if arr.shape != (3,):
        raise ValueError(f"Point3D 需要 3 个分量, 实际 shape={arr.shape}")
    return arr


@dataclass
class Obstacle:
    """静态障碍物（box 或 sphere）

    Attributes:
        position: 中心点 [x, y, z]
        size: box 为各轴全长; sphere 取 size[0] 为直径（y/z 不使用）
        kind: 'box' 或 'sphere'
        name: 障碍物名称（可选）
    """
    position: Point3D
    size: Point3D
    kind: str = 'box'
    name: str = ""

    def __post_init__(self) -> None:
        self.position = as_point(self.position).copy()
        self.size = as_point(self.size).copy()
        if self.kind not in OBSTACLE_KINDS:
            raise ValueError(f"未知障碍物类型: {self.kind!r}")
        if np.any(self.size < 0):
            raise ValueError(f"障碍物尺寸不能为负: {self.size.tolist()}")
        # 规划期间只读
        self.position.flags.writeable = False
        self.size.flags.writeable = False

    @property
    def half_extents(self) -> np.ndarray:
        """box 半长 (size / 2)"""
        return self.size / 2.0

    @property
    def radius(self) -> float:
        """sphere 半径 (size.x / 2)"""
        return float(self.size[0]) / 2.0

    @property
    def min_point(self) -> np.ndarray:
        """未膨胀的 AABB 最小角点"""
        if self.kind == 'sphere':
            return self.position - self.radius
        return self.position - self.half_extents

    @property
    def max_point(self) -> np.ndarray:
        """未膨胀的 AABB 最大角点"""
        if self.kind == 'sphere':
            return self.position + self.radius
        return self.position + self.half_extents

    def to_dict(self) -> Dict[str, Any]:
        return {
            'position': self.position.tolist(),
            'size': self.size.tolist(),
            'type': self.kind,
            'name': self.name,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Obstacle':
        """从 dict 创建，兼容 ``type`` 与 ``kind`` 两种键名"""
        return cls(
            position=data['position'],
            size=data['size'],
            kind=data.get('kind', data.get('type', 'box')),
            name=data.get('name', ''),
        )


@dataclass(frozen=True)
class Bounds:
    """轴对齐的立方体规划范围，三个轴共用 [min, max]"""
    min: float = -10.0
    max: float = 10.0

    def __post_init__(self) -> None:
        if self.min > self.max:
            raise ValueError(f"Bounds 下界 {self.min} 大于上界 {self.max}")

    def contains(self, point: Point3D) -> bool:
        return bool(np.all(point >= self.min) and np.all(point <= self.max))

    def sample(self, rng: np.random.Generator) -> Point3D:
        """各轴独立均匀采样"""
        return self.min + rng.random(3) * (self.max - self.min)


@dataclass
class PlannerConfig:
    """规划器参数配置

    Attributes:
        bounds_min: 规划空间下界（三轴共用）
        bounds_max: 规划空间上界（三轴共用）
        grid_step_size: A* 网格步长，同时作为到达目标的容差
        rrt_step_size: RRT 单步最大延伸距离
        rrt_max_iterations: RRT 最大迭代次数
        goal_bias: RRT 直接采样目标点的概率 [0, 1]
        drone_radius: 无人机包络球半径（碰撞检测膨胀量）
        auto_smooth: 规划成功后是否自动 RDP + 视线平滑
        rdp_epsilon: 自动平滑时 RDP 的距离阈值
        smooth_iterations: 视线平滑最大轮数
        los_samples: 视线检测的分段采样数
        record_exploration: 是否记录搜索过程中探索的点
    """
    bounds_min: float = -10.0
    bounds_max: float = 10.0
    grid_step_size: float = 1.0
    rrt_step_size: float = 0.8
    rrt_max_iterations: int = 2000
    goal_bias: float = 0.1
    drone_radius: float = 0.5
    auto_smooth: bool = True
    rdp_epsilon: float = 0.5
    smooth_iterations: int = 3
    los_samples: int = 20
    record_exploration: bool = False

    def __post_init__(self) -> None:
        if self.grid_step_size <= 0 or self.rrt_step_size <= 0:
            raise ValueError("步长必须为正数")
        if self.rrt_max_iterations < 0 or self.smooth_iterations < 0:
            raise ValueError("迭代次数不能为负")
        if not 0.0 <= self.goal_bias <= 1.0:
            raise ValueError(f"goal_bias 需在 [0, 1] 内: {self.goal_bias}")
        if self.drone_radius < 0:
            raise ValueError("drone_radius 不能为负")
        if self.los_samples < 1:
            raise ValueError("los_samples 至少为 1")
        # 触发 Bounds 的校验
        self.bounds

    @property
    def bounds(self) -> Bounds:
        return Bounds(self.bounds_min, self.bounds_max)

    # ── JSON 序列化 ──

    def to_dict(self) -> Dict[str, Any]:
        """转为字典"""
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def to_json(self, filepath: Union[str, Path]) -> str:
        """保存到 JSON 文件，返回文件路径字符串"""
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)
        return str(filepath)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PlannerConfig':
        """从字典创建（忽略未知字段，缺失字段用默认值）"""
        valid_fields = {f.name for f in fields(cls)}
        filtered = {k: v for k, v in data.items() if k in valid_fields}
        return cls(**filtered)

    @classmethod
    def from_json(cls, filepath: Union[str, Path]) -> 'PlannerConfig':
        """从 JSON 文件加载"""
        with open(Path(filepath), 'r', encoding='utf-8') as f:
            data = json.load(f)
        return cls.from_dict(data)


@dataclass
class PathResult:
    """路径规划结果

    Attributes:
        success: 是否成功找到路径
        path: 路径点序列 [start, ..., goal]，失败时为空
        length: 最终路径总长度，失败时为 0
        computation_time_ms: 本次规划墙钟时间 (ms)
        nodes_explored: A* 为扩展次数，RRT 为迭代次数
        explored_nodes: 搜索过程中探索的点（仅 record_exploration 时记录）
        collision_avoidance_rate: 成功为 100，失败为 0
        phase_times: 各阶段耗时 (ms)
        algorithm: 规划算法名称
    """
    success: bool = False
    path: List[Point3D] = field(default_factory=list)
    length: float = 0.0
    computation_time_ms: float = 0.0
    nodes_explored: int = 0
    explored_nodes: Optional[List[Point3D]] = None
    collision_avoidance_rate: Optional[float] = None
    phase_times: Dict[str, float] = field(default_factory=dict)
    algorithm: str = ""

    @property
    def n_waypoints(self) -> int:
        return len(self.path)

    @classmethod
    def assemble(cls,
                 path: List[Point3D],
                 computation_time_ms: float,
                 nodes_explored: int,
                 explored_nodes: Optional[List[Point3D]] = None,
                 **kwargs) -> 'PathResult':
        """打包成功结果：长度按最终（可能已平滑的）路径计算"""
        return cls(
            success=True,
            path=list(path),
            length=path_length(path),
            computation_time_ms=computation_time_ms,
            nodes_explored=nodes_explored,
            explored_nodes=explored_nodes,
            collision_avoidance_rate=100.0,
            **kwargs,
        )

    @staticmethod
    def failure(computation_time_ms: float = 0.0,
                nodes_explored: int = 0,
                explored_nodes: Optional[List[Point3D]] = None,
                **kwargs) -> 'PathResult':
        """快捷构造失败结果."""
        return PathResult(
            success=False, path=[], length=0.0,
            computation_time_ms=computation_time_ms,
            nodes_explored=nodes_explored,
            explored_nodes=explored_nodes,
            collision_avoidance_rate=0.0,
            **kwargs,
        )

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            'success': self.success,
            'path': [p.tolist() for p in self.path],
            'length': self.length,
            'computation_time_ms': self.computation_time_ms,
            'nodes_explored': self.nodes_explored,
            'n_waypoints': self.n_waypoints,
            'collision_avoidance_rate': self.collision_avoidance_rate,
            'phase_times': dict(self.phase_times),
            'algorithm': self.algorithm,
        }
        if self.explored_nodes is not None:
            d['explored_nodes'] = [p.tolist() for p in self.explored_nodes]
        return d


def path_length(path: Sequence[Point3D]) -> float:
    """计算路径总长度 (相邻点欧氏距离之和)"""
    if len(path) < 2:
        return 0.0
    return float(sum(
        np.linalg.norm(path[i] - path[i - 1]) for i in range(1, len(path))
    ))
