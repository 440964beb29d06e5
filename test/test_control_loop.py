from unittest.mock import Mock

import pytest

from waypoint_maker.capture_trigger import CaptureTrigger, ControlInput, VelocityCommand
from waypoint_maker.control_loop import ControlLoop
from waypoint_maker.pose_tracker import Pose, PoseTracker
from waypoint_maker.waypoint_recorder import WaypointRecorder, WaypointStore


def joy(forward=0.0, turn=0.0, capture=0):
    return ControlInput(axes=(turn, 0.0, 0.0, forward), buttons=(0, 0, capture, 0))


class Rig:
    def __init__(self, path, queue_depth=10):
        self.path = path
        self.tracker = PoseTracker()
        self.store = WaypointStore(path)
        self.markers = Mock()
        self.velocity = Mock()
        self.logger = Mock()
        self.recorder = WaypointRecorder(self.tracker, self.store, self.markers, self.logger)
        self.loop = ControlLoop(self.tracker, CaptureTrigger(), self.recorder,
                                self.velocity, self.logger, queue_depth=queue_depth)

    def lines(self):
        try:
            with open(self.path) as f:
                return f.read().splitlines()
        except FileNotFoundError:
            return []

    def marker_ids(self):
        return [c[0][0].id for c in self.markers.call_args_list]


@pytest.fixture
def rig(tmp_path):
    return Rig(str(tmp_path / 'waypoints.csv'))


def test_scenario_single_capture(rig):
    rig.loop.push_pose(Pose(x=1.0, y=2.0, qz=0.0, qw=1.0))
    rig.loop.push_input(joy(capture=1))
    rig.loop.tick()

    assert rig.lines() == ['1.000000,2.000000,0.000000']
    assert rig.marker_ids() == [0]
    marker = rig.markers.call_args[0][0]
    assert (marker.pose.x, marker.pose.y) == (1.0, 2.0)
    assert not rig.loop.capture_pending


def test_velocity_published_every_tick(rig):
    rig.loop.tick()
    rig.velocity.assert_called_once_with(VelocityCommand(0.0, 0.0))

    rig.loop.push_input(joy(forward=0.5, turn=-0.3))
    for _ in range(3):
        rig.loop.tick()

    assert rig.velocity.call_count == 4
    for c in rig.velocity.call_args_list[1:]:
        assert c[0][0] == VelocityCommand(linear=0.5, angular=-0.3)


def test_idle_ticks_never_write(rig):
    for i in range(20):
        rig.loop.push_pose(Pose(x=float(i)))
        rig.loop.push_input(joy(forward=0.1 * i))
        rig.loop.tick()
    assert rig.lines() == []
    rig.markers.assert_not_called()


def test_held_button_captures_once_per_tick(rig):
    for i in range(4):
        rig.loop.push_pose(Pose(x=float(i)))
        rig.loop.push_input(joy(capture=1))
        rig.loop.tick()

    assert len(rig.lines()) == 4
    assert rig.marker_ids() == [0, 1, 2, 3]


def test_press_then_release_captures_once(rig):
    rig.loop.push_input(joy(capture=1))
    rig.loop.tick()
    for _ in range(3):
        rig.loop.push_input(joy(capture=0))
        rig.loop.tick()
    assert rig.marker_ids() == [0]


def test_several_presses_within_one_tick_capture_once(rig):
    for _ in range(3):
        rig.loop.push_input(joy(capture=1))
    rig.loop.tick()
    assert rig.marker_ids() == [0]


def test_latest_pose_and_input_win_within_a_tick(rig):
    rig.loop.push_pose(Pose(x=1.0))
    rig.loop.push_pose(Pose(x=2.0))
    rig.loop.push_input(joy(forward=0.2, capture=1))
    rig.loop.push_input(joy(forward=0.7))
    rig.loop.tick()

    assert rig.lines()[0].startswith('2.000000,')
    rig.velocity.assert_called_once_with(VelocityCommand(linear=0.7, angular=0.0))


def test_invalid_sample_is_skipped(rig):
    rig.loop.push_input(joy(forward=0.4))
    rig.loop.tick()
    rig.loop.push_input(ControlInput(axes=(1.0,), buttons=(1, 1, 1)))
    rig.loop.tick()

    rig.logger.warning.assert_called_once()
    assert rig.velocity.call_args[0][0] == VelocityCommand(linear=0.4, angular=0.0)
    assert rig.lines() == []


def test_failed_write_needs_a_new_press(tmp_path):
    blocker = tmp_path / 'waypoints.csv'
    blocker.mkdir()
    rig = Rig(str(blocker))

    rig.loop.push_pose(Pose(x=1.0))
    rig.loop.push_input(joy(capture=1))
    rig.loop.tick()
    assert not rig.loop.capture_pending
    rig.markers.assert_not_called()

    # Store recovers while the robot keeps moving: nothing is written unprompted
    blocker.rmdir()
    for i in range(50):
        rig.loop.push_pose(Pose(x=100.0 + i))
        rig.loop.tick()
    assert rig.lines() == []
    assert rig.logger.error.call_count == 1

    rig.loop.push_input(joy(capture=1))
    rig.loop.tick()
    assert rig.marker_ids() == [0]
    assert rig.lines() == ['149.000000,0.000000,0.000000']


def test_inbox_keeps_only_newest(tmp_path):
    rig = Rig(str(tmp_path / 'waypoints.csv'), queue_depth=2)
    for forward in (0.1, 0.2, 0.3):
        rig.loop.push_input(joy(forward=forward))
    assert len(rig.loop.input_inbox) == 2
    assert rig.loop.input_inbox[0].axes[3] == 0.2


def test_spin_stops_when_not_ok(rig):
    checks = iter([True, True, True, False])
    sleep = Mock()
    clock = Mock(side_effect=[0.0, 0.02] * 3)

    rig.loop.spin(lambda: next(checks), sleep=sleep, clock=clock)

    assert rig.loop.ticks == 3
    assert sleep.call_count == 3
    assert sleep.call_args[0][0] == pytest.approx(0.08)


def test_spin_skips_sleep_when_tick_overruns(rig):
    checks = iter([True, False])
    sleep = Mock()
    rig.loop.spin(lambda: next(checks), sleep=sleep, clock=Mock(side_effect=[0.0, 0.5]))
    sleep.assert_not_called()


def test_period_must_be_positive(rig):
    with pytest.raises(ValueError):
        ControlLoop(rig.tracker, CaptureTrigger(), rig.recorder, rig.velocity,
                    rig.logger, period=0.0)
