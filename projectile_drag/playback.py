"""Per-frame playback control: pause, speed scaling and timeline scrubbing."""
from __future__ import annotations

import logging

from .simulation import TrajectoryIntegrator, steps_within

logger = logging.getLogger(__name__)

SCRUB_MIN = 0.0
SCRUB_MAX = 100.0


def clamp(value: float, min_value: float, max_value: float) -> float:
    return max(min_value, min(max_value, value))


class Playback:
    """Drives a TrajectoryIntegrator from an external frame loop.

    Each frame calls tick() once. A scrub replays the integrator from t=0 to a
    fraction of the furthest time reached so far.
    """

    def __init__(self, integrator: TrajectoryIntegrator | None = None) -> None:
        self.integrator = integrator if integrator is not None else TrajectoryIntegrator()
        self.config = self.integrator.config
        self.paused = False
        self.speed_scale = 1.0
        self.max_time_reached = self.integrator.elapsed_time

    def tick(self) -> bool:
        if self.paused:
            return False
        self.integrator.step(self.speed_scale)
        self.max_time_reached = max(self.max_time_reached, self.integrator.elapsed_time)
        return True

    def toggle_pause(self) -> bool:
        self.paused = not self.paused
        return self.paused

    def set_speed(self, scale: float) -> float:
        self.speed_scale = clamp(scale, self.config.min_speed_scale, self.config.max_speed_scale)
        logger.debug("Speed scale set to %.2fx", self.speed_scale)
        return self.speed_scale

    def faster(self) -> float:
        return self.set_speed(self.speed_scale + self.config.speed_scale_step)

    def slower(self) -> float:
        return self.set_speed(self.speed_scale - self.config.speed_scale_step)

    def target_time_for(self, percent: float) -> float:
        return clamp(percent, SCRUB_MIN, SCRUB_MAX) / SCRUB_MAX * self.max_time_reached

    def scrub(self, percent: float) -> float:
        dt = self.config.dt
        limit = min(self.target_time_for(percent), self.max_time_reached)
        target = steps_within(limit, dt) * dt
        self.integrator.replay_to(target)
        # Replayed and ticked clocks can differ in the last bit
        self.max_time_reached = max(self.max_time_reached, self.integrator.elapsed_time)
        logger.info("Scrubbed to %.1f%% (t=%.2fs)", clamp(percent, SCRUB_MIN, SCRUB_MAX), target)
        return target

    def progress(self) -> float:
        if self.max_time_reached <= 0:
            return 0.0
        return clamp(self.integrator.elapsed_time / self.max_time_reached, 0.0, 1.0)

    def restart(self) -> None:
        self.integrator.reset()
        self.max_time_reached = 0.0
        self.paused = False
