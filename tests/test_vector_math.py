from __future__ import annotations

import numpy as np
import pytest

from projectile_drag.vector_math import ground_projection, height, normalize, to_vector


def test_normalize_rejects_zero_vector():
    with pytest.raises(ValueError):
        normalize(np.zeros(3))


def test_ground_projection_leaves_input_untouched():
    point = to_vector((2.0, 3.5, -1.0))
    shadow = ground_projection(point)

    np.testing.assert_array_equal(shadow, [2.0, 0.0, -1.0])
    assert height(point) == 3.5
    assert shadow.dtype == np.float64
