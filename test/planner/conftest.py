"""test/planner/conftest.py - 共享 fixtures"""
import numpy as np
import pytest

from drone_planner.obstacles import Scene
from drone_planner.collision import CollisionChecker
from drone_planner.models import Obstacle


# ==================== 场景 ====================

@pytest.fixture
def empty_scene():
    """空场景（无障碍物）"""
    return Scene()


@pytest.fixture
def wall_scene():
    """一个挡在 (0,0,0)→(5,0,0) 直线上的 box

    膨胀后 (r=0.5): x ∈ [1.5, 3.5], y/z ∈ [-2.5, 2.5]
    """
    scene = Scene()
    scene.add_box([2.5, 0, 0], [1, 4, 4], name="wall")
    return scene


@pytest.fixture
def mixed_scene():
    """box + sphere 混合场景"""
    scene = Scene()
    scene.add_box([0, 0, 0], [2, 2, 2], name="box")
    scene.add_sphere([5, 5, 5], 2.0, name="ball")
    return scene


@pytest.fixture
def unit_box():
    """原点处边长 2 的 box（半长 1）"""
    return Obstacle(position=[0, 0, 0], size=[2, 2, 2], kind='box')


@pytest.fixture
def unit_sphere():
    """原点处直径 2 的 sphere（半径 1）"""
    return Obstacle(position=[0, 0, 0], size=[2, 2, 2], kind='sphere')


@pytest.fixture
def wall_checker(wall_scene):
    return CollisionChecker(wall_scene.get_obstacles())


# ==================== 端点 ====================

@pytest.fixture
def start():
    return np.array([0.0, 0.0, 0.0])


@pytest.fixture
def goal():
    return np.array([5.0, 0.0, 0.0])
