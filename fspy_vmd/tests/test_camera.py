"""
Tests for perspective camera model.
"""

import pytest
import numpy as np
from numpy.testing import assert_allclose
from scipy.spatial.transform import Rotation

from fspy_vmd.camera import PerspectiveCamera


class TestProjection:
    """Tests for projection matrix computation."""

    def test_known_frustum(self):
        """90 degree square frustum with near=1, far=3."""
        camera = PerspectiveCamera(fov=90.0, aspect=1.0, near=1.0, far=3.0)

        expected = np.array([
            [1, 0, 0, 0],
            [0, 1, 0, 0],
            [0, 0, -2, -3],
            [0, 0, -1, 0]
        ])
        assert_allclose(camera.projection_matrix, expected, atol=1e-12)

    def test_aspect_scales_x(self):
        camera = PerspectiveCamera(fov=90.0, aspect=2.0, near=1.0, far=3.0)
        assert camera.projection_matrix[0, 0] == pytest.approx(0.5)
        assert camera.projection_matrix[1, 1] == pytest.approx(1.0)

    def test_recompute_after_change(self):
        """Projection only changes once update_projection_matrix is called."""
        camera = PerspectiveCamera(fov=90.0, aspect=1.0, near=1.0, far=3.0)
        before = camera.projection_matrix.copy()

        camera.fov = 60.0
        assert_allclose(camera.projection_matrix, before)

        camera.update_projection_matrix()
        assert camera.projection_matrix[1, 1] == pytest.approx(1 / np.tan(np.radians(30)))

    def test_inverse(self):
        camera = PerspectiveCamera(fov=60.0, aspect=1.5, near=0.1, far=100.0)
        assert_allclose(camera.projection_matrix @ camera.projection_matrix_inverse, np.eye(4), atol=1e-9)

    def test_non_finite_aspect(self):
        """An infinite aspect ratio does not raise."""
        camera = PerspectiveCamera()
        camera.aspect = float('inf')
        camera.update_projection_matrix()
        assert not np.isfinite(camera.projection_matrix).all()


class TestWorldMatrix:
    """Tests for local/world matrix handling."""

    def test_auto_update_composes_from_position(self):
        camera = PerspectiveCamera()
        camera.position = np.array([1.0, 2.0, 3.0])

        camera.update_matrix_world()

        assert_allclose(camera.matrix_world[:3, 3], [1, 2, 3])
        assert_allclose(camera.get_world_position(), [1, 2, 3])

    def test_column_major_assignment(self):
        """World matrix loads from column-major elements."""
        camera = PerspectiveCamera()
        elements = [1, 0, 0, 0, 0, 1, 0, 0, 0, 0, 1, 0, 4, 5, 6, 1]

        camera.set_matrix_world_from_array(elements)

        assert_allclose(camera.matrix_world[:3, 3], [4, 5, 6])
        assert camera.matrix_world_elements() == [float(e) for e in elements]

    def test_manual_matrix_survives_world_update(self):
        """With auto update disabled, a directly set world matrix is kept."""
        camera = PerspectiveCamera()
        camera.matrix_auto_update = False
        matrix = np.eye(4)
        matrix[:3, 3] = [0, 0, 10]
        camera.matrix_world = matrix

        camera.update_matrix_world()

        assert_allclose(camera.get_world_position(), [0, 0, 10])

    def test_auto_update_overwrites_manual_matrix(self):
        camera = PerspectiveCamera()
        matrix = np.eye(4)
        matrix[:3, 3] = [0, 0, 10]
        camera.matrix_world = matrix

        assert_allclose(camera.get_world_position(), [0, 0, 0])

    def test_decompose_matrix_world(self):
        camera = PerspectiveCamera()
        R = Rotation.from_euler('y', 0.5).as_matrix()
        matrix = np.eye(4)
        matrix[:3, :3] = R
        matrix[:3, 3] = [1, 2, 3]
        camera.matrix_world = matrix

        camera.decompose_matrix_world()

        assert_allclose(camera.position, [1, 2, 3])
        assert_allclose(camera.scale, [1, 1, 1])
        assert_allclose(Rotation.from_quat(camera.quaternion).as_matrix(), R, atol=1e-12)

    def test_forced_world_update_copies_local(self):
        camera = PerspectiveCamera()
        camera.matrix_auto_update = False
        camera.position = np.array([5.0, 0.0, 0.0])
        camera.update_matrix()
        camera.update_matrix_world(force=True)

        assert_allclose(camera.matrix_world, camera.matrix)

    def test_world_quaternion(self):
        camera = PerspectiveCamera()
        camera.quaternion = Rotation.from_euler('x', 0.25).as_quat()

        q = camera.get_world_quaternion()

        assert Rotation.from_quat(q).magnitude() == pytest.approx(0.25)
