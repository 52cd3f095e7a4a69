"""
obstacles.py - 障碍物与场景管理

管理规划空间中的静态障碍物集合（box / sphere），提供增删查改、
dict / JSON 序列化，以及演示用的默认场景。
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple, Union

from .models import Obstacle, Point3D, as_point

logger = logging.getLogger(__name__)


class Scene:
    """障碍物场景

    保持添加顺序（碰撞检测按列表顺序逐个测试）。

    Example:
        >>> scene = Scene()
        >>> scene.add_box([0, 0, 0], [3, 3, 3], name="cube")
        >>> scene.add_sphere([4, 4, 4], diameter=4)
        >>> obstacles = scene.get_obstacles()
    """

    def __init__(self, obstacles: Optional[Sequence[Obstacle]] = None) -> None:
        self._obstacles: List[Obstacle] = list(obstacles or [])

    @property
    def n_obstacles(self) -> int:
        return len(self._obstacles)

    def __len__(self) -> int:
        return len(self._obstacles)

    def __iter__(self) -> Iterator[Obstacle]:
        return iter(self._obstacles)

    def add(self, obstacle: Obstacle) -> Obstacle:
        if not obstacle.name:
            obstacle.name = f"obstacle_{self.n_obstacles}"
        self._obstacles.append(obstacle)
        logger.debug("添加障碍物 '%s' (%s): position=%s, size=%s",
                     obstacle.name, obstacle.kind,
                     obstacle.position.tolist(), obstacle.size.tolist())
        return obstacle

    def add_box(self, position: Sequence[float], size: Sequence[float],
                name: str = "") -> Obstacle:
        """添加 box 障碍物，size 为各轴全长"""
        return self.add(Obstacle(position=position, size=size, kind='box', name=name))

    def add_sphere(self, position: Sequence[float], diameter: float,
                   name: str = "") -> Obstacle:
        """添加 sphere 障碍物"""
        return self.add(Obstacle(position=position,
                                 size=[diameter, diameter, diameter],
                                 kind='sphere', name=name))

    def remove(self, name: str) -> bool:
        """按名称移除障碍物，返回是否找到"""
        for i, obs in enumerate(self._obstacles):
            if obs.name == name:
                self._obstacles.pop(i)
                return True
        return False

    def clear(self) -> None:
        self._obstacles.clear()

    def get_obstacles(self) -> List[Obstacle]:
        """返回障碍物列表的副本（规划调用期间的快照）"""
        return list(self._obstacles)

    def get_obstacle(self, name: str) -> Optional[Obstacle]:
        for obs in self._obstacles:
            if obs.name == name:
                return obs
        return None

    # ── 序列化 ──

    def to_dict(self) -> Dict[str, Any]:
        return {'obstacles': [obs.to_dict() for obs in self._obstacles]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Scene':
        """从字典加载: {'obstacles': [{'position': [...], 'size': [...], 'type': 'box'}, ...]}"""
        scene = cls()
        for item in data.get('obstacles', []):
            scene.add(Obstacle.from_dict(item))
        return scene

    def to_json(self, filepath: Union[str, Path]) -> str:
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)
        return str(filepath)

    @classmethod
    def from_json(cls, filepath: Union[str, Path]) -> 'Scene':
        with open(Path(filepath), 'r', encoding='utf-8') as f:
            data = json.load(f)
        return cls.from_dict(data)

    def __repr__(self) -> str:
        return f"Scene(n_obstacles={self.n_obstacles})"


# 演示场景：10 个障碍物散布在 [-10, 10]^3 内
_DEFAULT_OBSTACLES = [
    ((0, 0, 0), (3, 3, 3), 'box'),
    ((4, 4, 4), (4, 4, 4), 'sphere'),
    ((-4, 2, 2), (2, 4, 2), 'box'),
    ((6, -3, 0), (2.5, 2.5, 2.5), 'box'),
    ((-6, 5, -3), (3, 3, 3), 'sphere'),
    ((2, -5, 5), (2, 5, 2), 'box'),
    ((-3, -2, 6), (3.5, 3.5, 3.5), 'sphere'),
    ((5, 6, -5), (2, 2, 4), 'box'),
    ((-7, -6, 3), (2, 3, 2), 'box'),
    ((1, 7, 1), (3, 3, 3), 'sphere'),
]


def default_scene() -> Tuple[Scene, Point3D, Point3D]:
    """返回默认演示场景及其起点 (-8,-8,-8)、终点 (8,8,8)"""
    scene = Scene()
    for position, size, kind in _DEFAULT_OBSTACLES:
        scene.add(Obstacle(position=position, size=size, kind=kind))
    return scene, as_point([-8, -8, -8]), as_point([8, 8, 8])
