from __future__ import annotations

import numpy as np
import pytest

from projectile_drag.playback import Playback
from projectile_drag.simulation import SimulationConfig, TrajectoryIntegrator


def run_ticks(playback: Playback, count: int) -> None:
    for _ in range(count):
        playback.tick()


def test_scrub_before_any_time_elapsed():
    playback = Playback()

    assert playback.progress() == 0.0
    assert playback.scrub(50.0) == 0.0
    assert playback.integrator.trajectory == []
    np.testing.assert_array_equal(playback.integrator.state.position, [0.0, 1.5, 0.0])
    assert playback.progress() == 0.0


def test_paused_playback_does_not_step():
    playback = Playback()
    run_ticks(playback, 5)
    playback.toggle_pause()

    assert playback.tick() is False
    assert playback.integrator.elapsed_time == pytest.approx(0.05)
    assert len(playback.integrator.trajectory) == 5

    playback.toggle_pause()
    assert playback.tick() is True
    assert len(playback.integrator.trajectory) == 6


def test_scrub_maps_percent_onto_max_time():
    playback = Playback()
    run_ticks(playback, 40)
    max_time = playback.max_time_reached

    target = playback.scrub(50.0)

    assert target == pytest.approx(0.5 * max_time)
    assert playback.integrator.elapsed_time == pytest.approx(target)
    assert len(playback.integrator.trajectory) == 20
    assert playback.max_time_reached == max_time
    assert playback.progress() == pytest.approx(0.5, abs=0.03)


def test_scrub_clamps_out_of_range_input():
    playback = Playback()
    run_ticks(playback, 25)
    forward_position = playback.integrator.state.position.copy()

    playback.scrub(250.0)
    np.testing.assert_array_equal(playback.integrator.state.position, forward_position)
    assert playback.progress() == 1.0

    playback.scrub(-30.0)
    assert playback.integrator.trajectory == []
    assert playback.integrator.elapsed_time == 0.0


def test_scrub_twice_is_identical():
    playback = Playback()
    run_ticks(playback, 60)

    playback.scrub(73.0)
    first = np.array(playback.integrator.trajectory)
    playback.scrub(10.0)
    playback.scrub(73.0)
    second = np.array(playback.integrator.trajectory)

    np.testing.assert_array_equal(first, second)


def test_resuming_after_scrub_keeps_max_time():
    playback = Playback()
    run_ticks(playback, 30)
    max_time = playback.max_time_reached

    playback.scrub(20.0)
    run_ticks(playback, 3)

    assert playback.max_time_reached == max_time
    run_ticks(playback, 40)
    assert playback.max_time_reached > max_time


def test_speed_scale_is_clamped():
    config = SimulationConfig(min_speed_scale=0.5, max_speed_scale=3.0, speed_scale_step=0.5)
    playback = Playback(TrajectoryIntegrator(config=config))

    assert playback.faster() == 1.5
    assert playback.set_speed(10.0) == 3.0
    assert playback.set_speed(0.0) == 0.5
    assert playback.slower() == 0.5


def test_tick_uses_speed_scale():
    playback = Playback()
    playback.set_speed(2.0)
    run_ticks(playback, 10)

    assert playback.integrator.elapsed_time == pytest.approx(0.2)
    assert playback.max_time_reached == playback.integrator.elapsed_time
    assert len(playback.integrator.trajectory) == 10


def test_restart_clears_timeline():
    playback = Playback()
    run_ticks(playback, 10)
    playback.toggle_pause()

    playback.restart()

    assert playback.paused is False
    assert playback.max_time_reached == 0.0
    assert playback.integrator.trajectory == []


@pytest.mark.parametrize("speed, ticks", [(2.5, 4), (1.5, 7), (3.0, 10), (0.7, 9), (1.0, 33)])
def test_full_scrub_stays_within_max_time(speed, ticks):
    playback = Playback()
    playback.set_speed(speed)
    run_ticks(playback, ticks)
    max_time = playback.max_time_reached

    playback.scrub(100.0)

    assert playback.integrator.elapsed_time <= playback.max_time_reached
    assert playback.max_time_reached == pytest.approx(max_time)
    assert playback.max_time_reached - playback.integrator.elapsed_time < playback.config.dt
    assert playback.progress() <= 1.0


def test_scrub_lands_on_whole_steps():
    playback = Playback()
    playback.set_speed(1.5)
    run_ticks(playback, 7)

    target = playback.scrub(100.0)

    assert target == pytest.approx(0.1)
    assert len(playback.integrator.trajectory) == 10
