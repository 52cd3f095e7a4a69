"""test/planner/test_obstacles.py - 场景管理测试"""
import numpy as np
import pytest

from drone_planner.models import Obstacle
from drone_planner.obstacles import Scene, default_scene


class TestScene:

    def test_add_box(self, empty_scene):
        obs = empty_scene.add_box([1, 2, 3], [2, 2, 2], name="b")
        assert empty_scene.n_obstacles == 1
        assert obs.kind == 'box'
        assert empty_scene.get_obstacle("b") is obs

    def test_add_sphere(self, empty_scene):
        obs = empty_scene.add_sphere([0, 0, 0], 3.0)
        assert obs.kind == 'sphere'
        assert obs.radius == pytest.approx(1.5)

    def test_auto_name(self, empty_scene):
        empty_scene.add_box([0, 0, 0], [1, 1, 1])
        empty_scene.add_box([2, 0, 0], [1, 1, 1])
        names = [o.name for o in empty_scene]
        assert names == ["obstacle_0", "obstacle_1"]

    def test_order_preserved(self, mixed_scene):
        assert [o.name for o in mixed_scene.get_obstacles()] == ["box", "ball"]

    def test_remove(self, mixed_scene):
        assert mixed_scene.remove("box") is True
        assert mixed_scene.remove("box") is False
        assert len(mixed_scene) == 1

    def test_clear(self, mixed_scene):
        mixed_scene.clear()
        assert len(mixed_scene) == 0

    def test_get_obstacles_is_copy(self, mixed_scene):
        snapshot = mixed_scene.get_obstacles()
        snapshot.append(Obstacle(position=[0, 0, 0], size=[1, 1, 1]))
        assert mixed_scene.n_obstacles == 2

    def test_get_missing(self, mixed_scene):
        assert mixed_scene.get_obstacle("nope") is None


class TestSceneSerialization:

    def test_from_dict(self):
        data = {'obstacles': [
            {'position': [0, 0, 0], 'size': [1, 1, 1], 'type': 'box'},
            {'position': [3, 3, 3], 'size': [2, 2, 2], 'type': 'sphere', 'name': 's'},
        ]}
        scene = Scene.from_dict(data)
        assert scene.n_obstacles == 2
        assert scene.get_obstacle("s").kind == 'sphere'

    def test_json_round_trip(self, mixed_scene, tmp_path):
        path = mixed_scene.to_json(tmp_path / "scene.json")
        loaded = Scene.from_json(path)
        assert [o.name for o in loaded] == ["box", "ball"]
        np.testing.assert_array_equal(loaded.get_obstacle("ball").position, [5, 5, 5])


class TestDefaultScene:

    def test_layout(self):
        scene, start, goal = default_scene()
        assert scene.n_obstacles == 10
        kinds = [o.kind for o in scene]
        assert kinds.count('sphere') == 4
        np.testing.assert_array_equal(start, [-8, -8, -8])
        np.testing.assert_array_equal(goal, [8, 8, 8])

    def test_endpoints_free(self):
        from drone_planner.collision import check_collision
        scene, start, goal = default_scene()
        obstacles = scene.get_obstacles()
        assert not check_collision(start, obstacles)
        assert not check_collision(goal, obstacles)

    def test_fresh_instance(self):
        a, _, _ = default_scene()
        b, _, _ = default_scene()
        a.clear()
        assert b.n_obstacles == 10
