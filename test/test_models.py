"""
test_models.py — Unit tests for models.py data classes.

Covers:
    - as_point / path_length helpers
    - Obstacle validation & AABB properties
    - Bounds contains / sample
    - PlannerConfig validation & JSON round trip
    - PathResult assemble / failure / to_dict
"""

import numpy as np
import pytest

from drone_planner.models import (
    Bounds,
    Obstacle,
    PathResult,
    PlannerConfig,
    as_point,
    path_length,
)


class TestAsPoint:

    def test_list_to_float_array(self):
        p = as_point([1, 2, 3])
        assert p.dtype == np.float64
        np.testing.assert_array_equal(p, [1.0, 2.0, 3.0])

    def test_wrong_shape_rejected(self):
        with pytest.raises(ValueError):
            as_point([1, 2])


class TestPathLength:

    def test_empty_and_single(self):
        assert path_length([]) == 0.0
        assert path_length([np.zeros(3)]) == 0.0

    def test_polyline(self, l_shaped_path):
        assert path_length(l_shaped_path) == pytest.approx(6.0)


class TestObstacle:

    def test_auto_ndarray(self):
        obs = Obstacle(position=[1, 2, 3], size=[2, 2, 2])
        assert isinstance(obs.position, np.ndarray)
        assert obs.kind == 'box'

    def test_negative_size_rejected(self):
        with pytest.raises(ValueError):
            Obstacle(position=[0, 0, 0], size=[1, -1, 1])

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValueError):
            Obstacle(position=[0, 0, 0], size=[1, 1, 1], kind='cylinder')

    def test_arrays_read_only(self):
        obs = Obstacle(position=[0, 0, 0], size=[1, 1, 1])
        with pytest.raises(ValueError):
            obs.position[0] = 5.0

    def test_caller_arrays_untouched(self):
        """构造后调用方的数组仍可修改，且不影响障碍物"""
        pos = np.array([1.0, 2.0, 3.0])
        size = np.array([1.0, 1.0, 1.0])
        obs = Obstacle(position=pos, size=size)
        pos[0] = 5.0
        size[1] = 9.0
        np.testing.assert_array_equal(obs.position, [1, 2, 3])
        np.testing.assert_array_equal(obs.size, [1, 1, 1])

    def test_box_bounds(self):
        obs = Obstacle(position=[1, 1, 1], size=[2, 4, 6])
        np.testing.assert_allclose(obs.min_point, [0, -1, -2])
        np.testing.assert_allclose(obs.max_point, [2, 3, 4])

    def test_sphere_radius_uses_x(self):
        obs = Obstacle(position=[0, 0, 0], size=[3, 10, 10], kind='sphere')
        assert obs.radius == pytest.approx(1.5)
        np.testing.assert_allclose(obs.max_point, [1.5, 1.5, 1.5])

    def test_dict_round_trip(self):
        obs = Obstacle(position=[1, 2, 3], size=[1, 1, 1], kind='sphere', name="s")
        d = obs.to_dict()
        assert d['type'] == 'sphere'
        back = Obstacle.from_dict(d)
        assert back.kind == 'sphere'
        assert back.name == "s"
        np.testing.assert_array_equal(back.position, obs.position)


class TestBounds:

    def test_contains_inclusive(self):
        b = Bounds(-1, 1)
        assert b.contains(np.array([1.0, -1.0, 0.0]))
        assert not b.contains(np.array([1.01, 0.0, 0.0]))

    def test_inverted_rejected(self):
        with pytest.raises(ValueError):
            Bounds(1, -1)

    def test_sample_inside(self, rng):
        b = Bounds(-2, 3)
        for _ in range(100):
            assert b.contains(b.sample(rng))


class TestPlannerConfig:

    def test_defaults(self, default_config):
        assert default_config.grid_step_size == 1.0
        assert default_config.rrt_step_size == 0.8
        assert default_config.rrt_max_iterations == 2000
        assert default_config.goal_bias == 0.1
        assert default_config.drone_radius == 0.5
        assert default_config.auto_smooth is True
        assert default_config.bounds == Bounds(-10, 10)

    @pytest.mark.parametrize("kwargs", [
        {'grid_step_size': 0},
        {'rrt_step_size': -1},
        {'rrt_max_iterations': -1},
        {'goal_bias': 1.5},
        {'drone_radius': -0.1},
        {'bounds_min': 5, 'bounds_max': 0},
    ])
    def test_invalid_rejected(self, kwargs):
        with pytest.raises(ValueError):
            PlannerConfig(**kwargs)

    def test_from_dict_ignores_unknown(self):
        cfg = PlannerConfig.from_dict({'grid_step_size': 0.5, 'colour': 'red'})
        assert cfg.grid_step_size == 0.5
        assert cfg.rrt_step_size == 0.8

    def test_json_round_trip(self, tmp_path):
        cfg = PlannerConfig(goal_bias=0.3, record_exploration=True)
        path = cfg.to_json(tmp_path / "sub" / "cfg.json")
        assert PlannerConfig.from_json(path) == cfg


class TestPathResult:

    def test_assemble_computes_length(self, straight_path):
        r = PathResult.assemble(straight_path, computation_time_ms=1.5,
                                nodes_explored=7, algorithm="astar")
        assert r.success
        assert r.length == pytest.approx(5.0)
        assert r.n_waypoints == 6
        assert r.collision_avoidance_rate == 100.0
        assert r.explored_nodes is None

    def test_failure(self):
        r = PathResult.failure(computation_time_ms=2.0, nodes_explored=3)
        assert not r.success
        assert r.path == []
        assert r.length == 0.0
        assert r.nodes_explored == 3
        assert r.collision_avoidance_rate == 0.0

    def test_to_dict(self, straight_path):
        r = PathResult.assemble(straight_path, 1.0, 2,
                                explored_nodes=[np.zeros(3)])
        d = r.to_dict()
        assert d['path'][-1] == [5.0, 0.0, 0.0]
        assert d['n_waypoints'] == 6
        assert d['explored_nodes'] == [[0.0, 0.0, 0.0]]

    def test_to_dict_without_trace(self):
        assert 'explored_nodes' not in PathResult.failure().to_dict()
