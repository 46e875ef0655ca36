from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np

from .vector_math import (
    Vector,
    ground_projection,
    height,
    magnitude,
    normalize,
    to_vector,
)

logger = logging.getLogger(__name__)

# Absorbs the rounding of a clock accumulated from repeated dt additions
STEP_TOLERANCE = 1e-9


@dataclass(frozen=True, slots=True)
class PhysicalParameters:
    carrier_speed: float = 22.22  # m/s, 80 km/h
    ejection_speed: float = 5.0  # m/s, sideways along +z
    gravity: float = 9.8
    air_density: float = 1.225  # kg/m^3
    sphere_radius: float = 0.01  # m
    sphere_mass: float = 0.01  # kg
    drag_coefficient: float = 0.47  # smooth sphere

    def __post_init__(self) -> None:
        if self.sphere_mass <= 0:
            raise ValueError("Sphere mass must be positive")
        if self.sphere_radius < 0:
            raise ValueError("Sphere radius must be non-negative")
        if self.air_density < 0 or self.drag_coefficient < 0:
            raise ValueError("Air density and drag coefficient must be non-negative")
        if self.gravity < 0:
            raise ValueError("Gravity must be non-negative (it always pulls along -y)")

    @property
    def cross_section_area(self) -> float:
        return math.pi * self.sphere_radius * self.sphere_radius


@dataclass(frozen=True, slots=True)
class SimulationConfig:
    dt: float = 0.01
    initial_height: float = 1.5
    min_speed_scale: float = 0.1
    max_speed_scale: float = 5.0
    speed_scale_step: float = 0.25

    def __post_init__(self) -> None:
        if self.dt <= 0:
            raise ValueError("Time step must be positive")
        if not 0 < self.min_speed_scale <= self.max_speed_scale:
            raise ValueError("Speed scale range must satisfy 0 < min <= max")


@dataclass(slots=True)
class SimulationState:
    elapsed_time: float
    position: Vector
    velocity: Vector

    @property
    def speed(self) -> float:
        return magnitude(self.velocity)

    @property
    def landed(self) -> bool:
        return height(self.position) <= 0.0

    def copy(self) -> SimulationState:
        return SimulationState(
            elapsed_time=self.elapsed_time,
            position=self.position.copy(),
            velocity=self.velocity.copy(),
        )


def initial_state(
    params: PhysicalParameters,
    config: SimulationConfig = SimulationConfig(),
) -> SimulationState:
    return SimulationState(
        elapsed_time=0.0,
        position=to_vector((0.0, config.initial_height, 0.0)),
        velocity=to_vector((params.carrier_speed, 0.0, params.ejection_speed)),
    )


def drag_force(velocity: Vector, params: PhysicalParameters) -> Vector:
    """Quadratic drag 0.5*rho*|v|^2*Cd*A, pointing against velocity."""
    speed = magnitude(velocity)
    if speed == 0:
        return np.zeros(3, dtype=np.float64)
    strength = (
        0.5
        * params.air_density
        * speed
        * speed
        * params.drag_coefficient
        * params.cross_section_area
    )
    return -normalize(velocity) * strength


def gravity_force(params: PhysicalParameters) -> Vector:
    return np.array([0.0, -params.gravity * params.sphere_mass, 0.0], dtype=np.float64)


def steps_to_reach(target_time: float, dt: float) -> int:
    """Number of dt steps needed for the clock to reach target_time."""
    return max(0, math.ceil(target_time / dt - STEP_TOLERANCE))


def steps_within(duration: float, dt: float) -> int:
    """Number of whole dt steps that fit inside duration."""
    return max(0, math.floor(duration / dt + STEP_TOLERANCE))


def carrier_position(elapsed_time: float, params: PhysicalParameters) -> float:
    """Distance the carrier has driven along +x."""
    return elapsed_time * params.carrier_speed


def advance(
    state: SimulationState,
    params: PhysicalParameters,
    dt: float,
    speed_scale: float = 1.0,
) -> SimulationState:
    """One semi-implicit Euler step of dt * speed_scale.

    The force is evaluated once, from the velocity at the start of the step.
    A landed state keeps its position and velocity; only the clock moves.
    """
    stride = dt * speed_scale
    if state.landed:
        return SimulationState(
            elapsed_time=state.elapsed_time + stride,
            position=state.position.copy(),
            velocity=state.velocity.copy(),
        )

    total_force = drag_force(state.velocity, params) + gravity_force(params)
    acceleration = total_force / params.sphere_mass
    velocity = state.velocity + acceleration * stride
    position = state.position + velocity * stride
    return SimulationState(
        elapsed_time=state.elapsed_time + stride,
        position=position,
        velocity=velocity,
    )


class TrajectoryIntegrator:
    """Sphere ejected from a moving carrier, under gravity and quadratic drag."""

    def __init__(
        self,
        params: PhysicalParameters = PhysicalParameters(),
        config: SimulationConfig = SimulationConfig(),
    ) -> None:
        self.params = params
        self.config = config
        self.state = initial_state(params, config)
        self.trajectory: list[Vector] = []
        self.ground_projection: list[Vector] = []

    @property
    def elapsed_time(self) -> float:
        return self.state.elapsed_time

    @property
    def landed(self) -> bool:
        return self.state.landed

    def reset(self) -> None:
        self.state = initial_state(self.params, self.config)
        self.trajectory = []
        self.ground_projection = []

    def step(self, speed_scale: float = 1.0) -> SimulationState:
        if speed_scale <= 0:
            raise ValueError("Speed scale must be positive")
        was_landed = self.state.landed
        self.state = advance(self.state, self.params, self.config.dt, speed_scale)
        if not was_landed:
            self.trajectory.append(self.state.position.copy())
            self.ground_projection.append(ground_projection(self.state.position))
            if self.state.landed:
                logger.info(
                    "Landed at t=%.2fs, x=%.2fm z=%.2fm after %d points",
                    self.state.elapsed_time,
                    self.state.position[0],
                    self.state.position[2],
                    len(self.trajectory),
                )
        return self.state

    def replay_to(self, target_time: float) -> tuple[SimulationState, list[Vector], list[Vector]]:
        """Recompute everything from t=0 with unit speed scale up to target_time."""
        if target_time < 0:
            raise ValueError("Target time must be non-negative")
        self.reset()
        for _ in range(steps_to_reach(target_time, self.config.dt)):
            self.step(1.0)
        logger.debug(
            "Replayed to t=%.2fs (%d trajectory points)",
            self.state.elapsed_time,
            len(self.trajectory),
        )
        return self.snapshot()

    def snapshot(self) -> tuple[SimulationState, list[Vector], list[Vector]]:
        return (
            self.state.copy(),
            [point.copy() for point in self.trajectory],
            [point.copy() for point in self.ground_projection],
        )
