"""Lightweight vector helpers for 3D projectile dynamics (y is up)."""
from __future__ import annotations

from typing import Iterable

import numpy as np

Vector = np.ndarray

UP_AXIS = 1


def to_vector(value: Iterable[float] | Vector) -> Vector:
    """Convert any iterable to a float64 numpy vector."""
    return np.asarray(list(value), dtype=np.float64)


def magnitude(vec: Vector) -> float:
    return float(np.linalg.norm(vec))


def normalize(vec: Vector) -> Vector:
    norm = magnitude(vec)
    if norm == 0:
        raise ValueError("Cannot normalize the zero vector")
    return vec / norm


def height(point: Vector) -> float:
    return float(point[UP_AXIS])


def ground_projection(point: Vector) -> Vector:
    """Drop point onto the y=0 plane, keeping x and z."""
    shadow = np.array(point, dtype=np.float64)
    shadow[UP_AXIS] = 0.0
    return shadow
