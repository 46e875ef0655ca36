from __future__ import annotations

import math

import numpy as np
import pytest

from viewer import MAX_PITCH, MOUSE_ORBIT_SPEED, Camera


def test_mouse_drag_orbits_around_focus():
    camera = Camera()
    start_yaw, start_pitch = camera.yaw, camera.pitch
    start_distance = np.linalg.norm(camera.position() - camera.focus)

    camera.orbit_drag(50, -20)

    assert camera.yaw == pytest.approx(start_yaw + 50 * MOUSE_ORBIT_SPEED)
    assert camera.pitch == pytest.approx(start_pitch - 20 * MOUSE_ORBIT_SPEED)
    assert np.linalg.norm(camera.position() - camera.focus) == pytest.approx(start_distance)


def test_mouse_drag_cannot_flip_over_the_top():
    camera = Camera()
    camera.orbit_drag(0, 10_000)

    assert camera.pitch == MAX_PITCH
    assert camera.position()[1] > camera.focus[1]


def test_right_drag_pans_across_the_view():
    camera = Camera()
    _, _, _, forward = camera._basis()

    camera.pan_drag(40, 0)

    assert np.linalg.norm(camera.pan) > 0
    assert float(np.dot(camera.pan, forward)) == pytest.approx(0.0, abs=1e-12)

    camera.reset_view()
    np.testing.assert_array_equal(camera.pan, np.zeros(3))
    assert camera.pitch == pytest.approx(math.radians(35.0))
