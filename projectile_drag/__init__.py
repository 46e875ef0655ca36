"""Projectile ejected from a moving carrier, under gravity and quadratic drag."""

from .playback import Playback
from .simulation import (
    PhysicalParameters,
    SimulationConfig,
    SimulationState,
    TrajectoryIntegrator,
    advance,
)

__all__ = [
    "Playback",
    "PhysicalParameters",
    "SimulationConfig",
    "SimulationState",
    "TrajectoryIntegrator",
    "advance",
]
