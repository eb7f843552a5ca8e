"""
Perspective camera model.

A minimal scene-graph camera with three.js PerspectiveCamera semantics,
holding the projection parameters and the local/world transforms that the
converter reads and writes.

Coordinate System:
    - Right-handed, Y up
    - The camera looks along its local -Z axis

Projection Model:
    OpenGL-style frustum built from the vertical field of view:
        top = near * tan(fov / 2) / zoom
        height = 2 * top
        width = aspect * height
"""

from typing import Optional, Sequence, Tuple

import numpy as np
import logging

from .transforms import (
    column_major_from_matrix,
    compose_matrix,
    decompose_matrix,
    matrix_from_column_major,
)

logger = logging.getLogger(__name__)


class PerspectiveCamera:
    """
    Perspective camera with directly assignable world matrix.

    When ``matrix_auto_update`` is True the local matrix is recomposed from
    position/quaternion/scale on every world update. Setting it to False
    keeps whatever matrix was assigned directly.

    Attributes:
        fov: Vertical field of view in degrees
        aspect: Width / height of the viewport
        near: Near clipping plane distance
        far: Far clipping plane distance
        zoom: Zoom factor applied to the frustum
        position: Local translation (x, y, z)
        quaternion: Local rotation (x, y, z, w)
        scale: Local scale (x, y, z)
        matrix: Local 4x4 transform
        matrix_world: World 4x4 transform
        projection_matrix: 4x4 projection matrix
    """

    def __init__(
        self,
        fov: float = 50.0,
        aspect: float = 1.0,
        near: float = 0.1,
        far: float = 2000.0,
    ):
        self.fov = fov
        self.aspect = aspect
        self.near = near
        self.far = far
        self.zoom = 1.0

        self.position = np.zeros(3)
        self.quaternion = np.array([0.0, 0.0, 0.0, 1.0])
        self.scale = np.ones(3)

        self.matrix = np.eye(4)
        self.matrix_world = np.eye(4)
        self.matrix_auto_update = True
        self.matrix_world_needs_update = False

        self.projection_matrix = np.eye(4)
        self.projection_matrix_inverse = np.eye(4)
        self.update_projection_matrix()

    def update_projection_matrix(self) -> None:
        """Recompute the projection matrix from fov, aspect, near, far and zoom."""
        near = np.float64(self.near)
        far = np.float64(self.far)
        top = near * np.tan(np.radians(0.5 * self.fov)) / self.zoom
        height = 2 * top
        width = np.float64(self.aspect) * height
        left = -0.5 * width

        # Degenerate frusta (zero or non-finite sizes) give non-finite entries
        with np.errstate(invalid='ignore', divide='ignore', over='ignore'):
            self.projection_matrix = self._make_perspective(
                left, left + width, top, top - height, near, far
            )
            try:
                self.projection_matrix_inverse = np.linalg.inv(self.projection_matrix)
            except np.linalg.LinAlgError:
                self.projection_matrix_inverse = np.full((4, 4), np.nan)

        logger.debug(
            f"Projection updated: fov={self.fov}, aspect={self.aspect}, "
            f"near={self.near}, far={self.far}"
        )

    @staticmethod
    def _make_perspective(
        left: float, right: float, top: float, bottom: float, near: float, far: float
    ) -> np.ndarray:
        x = 2 * near / (right - left)
        y = 2 * near / (top - bottom)

        a = (right + left) / (right - left)
        b = (top + bottom) / (top - bottom)
        c = -(far + near) / (far - near)
        d = -2 * far * near / (far - near)

        return np.array([
            [x, 0, a, 0],
            [0, y, b, 0],
            [0, 0, c, d],
            [0, 0, -1, 0]
        ], dtype=np.float64)

    def set_matrix_world_from_array(self, elements: Sequence[float]) -> None:
        """Assign the world matrix from 16 column-major elements."""
        self.matrix_world = matrix_from_column_major(elements)

    def matrix_world_elements(self) -> list:
        """World matrix as 16 column-major elements."""
        return column_major_from_matrix(self.matrix_world)

    def decompose_matrix_world(self, decomposition: Optional[Tuple] = None) -> None:
        """
        Overwrite position, quaternion and scale from the world matrix.

        Args:
            decomposition: (position, quaternion, scale) already computed
                from the current world matrix
        """
        if decomposition is None:
            decomposition = decompose_matrix(self.matrix_world)
        self.position, self.quaternion, self.scale = decomposition
        logger.debug(
            f"Decomposed world matrix: position={self.position}, "
            f"quaternion={self.quaternion}, scale={self.scale}"
        )

    def update_matrix(self) -> None:
        """Recompose the local matrix from position, quaternion and scale."""
        self.matrix = compose_matrix(self.position, self.quaternion, self.scale)
        self.matrix_world_needs_update = True

    def update_matrix_world(self, force: bool = False) -> None:
        """
        Refresh the world matrix.

        The camera has no parent, so the world matrix is a copy of the
        local matrix.

        Args:
            force: Copy the local matrix even if nothing flagged a change
        """
        if self.matrix_auto_update:
            self.update_matrix()

        if self.matrix_world_needs_update or force:
            self.matrix_world = self.matrix.copy()
            self.matrix_world_needs_update = False

    def get_world_position(self) -> np.ndarray:
        """Camera position in world space."""
        self.update_matrix_world()
        return self.matrix_world[:3, 3].copy()

    def get_world_quaternion(self) -> np.ndarray:
        """Camera orientation in world space as (x, y, z, w)."""
        self.update_matrix_world()
        _, quaternion, _ = decompose_matrix(self.matrix_world)
        return quaternion
