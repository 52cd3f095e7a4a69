"""test/planner/test_trajectory.py - 轨迹回放与尾迹测试"""
import numpy as np
import pytest

from drone_planner import trajectory
from drone_planner.trajectory import TrailTracker, TrajectoryPlayer, position_at_progress


@pytest.fixture
def corner_path():
    """(0,0,0) → (3,0,0) → (3,4,0)，总长 7"""
    return [np.array([0.0, 0, 0]), np.array([3.0, 0, 0]), np.array([3.0, 4, 0])]


class TestPositionAtProgress:

    def test_endpoints(self, corner_path):
        np.testing.assert_allclose(position_at_progress(corner_path, 0.0), [0, 0, 0])
        np.testing.assert_allclose(position_at_progress(corner_path, 1.0), [3, 4, 0])

    def test_by_length_not_index(self, corner_path):
        """一半长度 = 3.5，落在第二段 0.5 处"""
        np.testing.assert_allclose(position_at_progress(corner_path, 0.5), [3, 0.5, 0])

    def test_clamped(self, corner_path):
        np.testing.assert_allclose(position_at_progress(corner_path, 2.0), [3, 4, 0])
        np.testing.assert_allclose(position_at_progress(corner_path, -1.0), [0, 0, 0])

    def test_too_short(self):
        assert position_at_progress([], 0.5) is None
        assert position_at_progress([np.zeros(3)], 0.5) is None

    def test_zero_length_path(self):
        p = np.array([1.0, 2.0, 3.0])
        np.testing.assert_array_equal(position_at_progress([p, p.copy()], 0.7), p)

    def test_rounding_overshoot_returns_end(self, corner_path, monkeypatch):
        """目标距离因舍入略超总长时落在终点"""
        monkeypatch.setattr(trajectory, "path_length", lambda pts: 7.0 + 1e-9)
        np.testing.assert_array_equal(position_at_progress(corner_path, 1.0), [3, 4, 0])


class TestTrajectoryPlayer:

    def test_progress(self, corner_path):
        player = TrajectoryPlayer(corner_path, duration=5.0)
        assert player.progress(2.5) == pytest.approx(0.5)
        assert player.progress(10.0) == 1.0

    def test_position_and_finished(self, corner_path):
        player = TrajectoryPlayer(corner_path, duration=2.0)
        np.testing.assert_allclose(player.position_at(1.0), [3, 0.5, 0])
        assert not player.is_finished
        np.testing.assert_allclose(player.position_at(3.0), [3, 4, 0])
        assert player.is_finished

    def test_feeds_trail(self, corner_path):
        trail = TrailTracker(capacity=10)
        player = TrajectoryPlayer(corner_path, trail=trail)
        for t in (0.0, 1.0, 2.0):
            player.position_at(t)
        assert len(trail) == 3
        player.reset()
        assert len(trail) == 0
        assert not player.is_finished

    def test_invalid_duration(self, corner_path):
        with pytest.raises(ValueError):
            TrajectoryPlayer(corner_path, duration=0.0)


class TestTrailTracker:

    def test_capacity_eviction(self):
        trail = TrailTracker(capacity=3)
        for i in range(5):
            trail.add_position(np.array([float(i), 0, 0]))
        xs = [p[0] for p in trail.get_trail()]
        assert xs == [2.0, 3.0, 4.0]

    def test_default_capacity(self):
        trail = TrailTracker()
        for i in range(600):
            trail.add_position([i, 0, 0])
        assert len(trail) == 500
        assert trail.get_trail()[0][0] == 100.0

    def test_snapshot_isolated(self):
        trail = TrailTracker()
        src = np.array([1.0, 1.0, 1.0])
        trail.add_position(src)
        src[0] = 99.0
        snap = trail.get_trail()
        snap[0][1] = -5.0
        snap.clear()
        np.testing.assert_array_equal(trail.get_trail()[0], [1, 1, 1])

    def test_smoothed_centered(self):
        trail = TrailTracker()
        for i in range(4):
            trail.add_position([float(i), 0, 0])
        xs = [p[0] for p in trail.get_smoothed_trail(window=3)]
        assert xs == pytest.approx([0.5, 1.0, 2.0, 2.5])

    def test_smoothed_short_trail_unchanged(self):
        trail = TrailTracker()
        trail.add_position([1, 2, 3])
        trail.add_position([3, 2, 1])
        out = trail.get_smoothed_trail(window=3)
        np.testing.assert_array_equal(np.array(out), [[1, 2, 3], [3, 2, 1]])

    def test_clear(self):
        trail = TrailTracker()
        trail.add_position([0, 0, 0])
        trail.clear()
        assert trail.get_trail() == []

    @pytest.mark.parametrize("kwargs", [{'capacity': 0}, {'capacity': -3}])
    def test_invalid_capacity(self, kwargs):
        with pytest.raises(ValueError):
            TrailTracker(**kwargs)

    def test_invalid_window(self):
        with pytest.raises(ValueError):
            TrailTracker().get_smoothed_trail(window=0)
