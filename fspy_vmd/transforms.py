"""
Coordinate and matrix-layout transformations between fSpy, the camera model
and MMD.

Matrix Layouts:
    - fSpy: row-major nested rows
        [[m00, m01, m02, m03],
         [m10, m11, m12, m13],
         [m20, m21, m22, m23],
         [m30, m31, m32, m33]]
    - Camera model arrays: column-major, 16 elements
        [m00, m10, m20, m30, m01, m11, m21, m31, m02, m12, m22, m32, m03, m13, m23, m33]

Coordinate Systems:
    - fSpy / camera model: right-handed, Y up, camera looking along -Z
    - MMD (VMD files): left-handed, Euler angles in Y-X-Z order

Rotation Conventions:
    - Quaternions are (x, y, z, w), scalar last
    - "YXZ" is an intrinsic order: R = Ry(y) @ Rx(x) @ Rz(z)
"""

import math
from numbers import Real
from typing import List, Sequence, Tuple

import numpy as np
from scipy.spatial.transform import Rotation
import logging

from .errors import ErrorCode, FspyVmdConverterError

logger = logging.getLogger(__name__)

MATRIX_SIZE = 4
MATRIX_ELEMENT_COUNT = MATRIX_SIZE * MATRIX_SIZE

DEGREES_PER_HALF_TURN = 180.0

# MMD expects Euler angles decomposed in this order
MMD_EULER_ORDER = "YXZ"


def rad_to_deg(radian: float) -> float:
    """Convert radians to degrees."""
    return radian * DEGREES_PER_HALF_TURN / math.pi


def validate_transform_rows(rows: Sequence[Sequence[float]], name: str = "cameraTransform") -> None:
    """
    Check that a row-major transform is exactly 4x4 and fully numeric.

    The outer and inner dimensions are checked first, then each element.

    Args:
        rows: Nested row-major matrix
        name: Field name used in error messages

    Raises:
        FspyVmdConverterError: INVALID_TRANSFORM_SHAPE if the matrix is not 4x4,
            INVALID_TRANSFORM_VALUE if an element is missing or not a number
    """
    try:
        shape_ok = len(rows) == MATRIX_SIZE and all(len(row) == MATRIX_SIZE for row in rows)
    except TypeError:
        shape_ok = False
    if not shape_ok:
        raise FspyVmdConverterError(
            ErrorCode.INVALID_TRANSFORM_SHAPE,
            f"{name}.rows must be 4x4",
        )

    for row_index in range(MATRIX_SIZE):
        for col_index in range(MATRIX_SIZE):
            value = rows[row_index][col_index]
            if value is None or isinstance(value, bool) or not isinstance(value, Real):
                raise FspyVmdConverterError(
                    ErrorCode.INVALID_TRANSFORM_VALUE,
                    f"Invalid {name}.rows[{row_index}][{col_index}]: {value!r}",
                )


def matrix_from_fspy_rows(rows: Sequence[Sequence[float]]) -> List[float]:
    """
    Convert an fSpy row-major matrix to a column-major element array.

    The conversion is a transpose: ``elements[col * 4 + row] = rows[row][col]``.

    Args:
        rows: Row-major 4x4 matrix

    Returns:
        16 column-major elements

    Raises:
        FspyVmdConverterError: if the matrix is malformed
    """
    validate_transform_rows(rows)

    elements = [0.0] * MATRIX_ELEMENT_COUNT
    for row_index in range(MATRIX_SIZE):
        for col_index in range(MATRIX_SIZE):
            elements[col_index * MATRIX_SIZE + row_index] = float(rows[row_index][col_index])
    return elements


def rows_from_column_major(elements: Sequence[float]) -> List[List[float]]:
    """Convert 16 column-major elements back to row-major rows."""
    if len(elements) != MATRIX_ELEMENT_COUNT:
        raise ValueError(f"Expected {MATRIX_ELEMENT_COUNT} elements, got {len(elements)}")
    return [
        [elements[col * MATRIX_SIZE + row] for col in range(MATRIX_SIZE)]
        for row in range(MATRIX_SIZE)
    ]


def matrix_from_column_major(elements: Sequence[float]) -> np.ndarray:
    """Build a 4x4 array from 16 column-major elements."""
    if len(elements) != MATRIX_ELEMENT_COUNT:
        raise ValueError(f"Expected {MATRIX_ELEMENT_COUNT} elements, got {len(elements)}")
    return np.asarray(elements, dtype=np.float64).reshape((MATRIX_SIZE, MATRIX_SIZE), order='F')


def column_major_from_matrix(matrix: np.ndarray) -> List[float]:
    """Flatten a 4x4 array into 16 column-major elements."""
    return np.asarray(matrix, dtype=np.float64).ravel(order='F').tolist()


def compose_matrix(
    position: np.ndarray,
    quaternion: np.ndarray,
    scale: np.ndarray,
) -> np.ndarray:
    """
    Compose a 4x4 affine transform from translation, rotation and scale.

    Args:
        position: Translation (x, y, z)
        quaternion: Rotation (x, y, z, w)
        scale: Per-axis scale (x, y, z)

    Returns:
        4x4 transform T @ R @ S
    """
    matrix = np.eye(MATRIX_SIZE)
    quaternion = np.asarray(quaternion, dtype=np.float64)
    if np.isfinite(quaternion).all():
        R = Rotation.from_quat(quaternion).as_matrix()
    else:
        R = np.full((3, 3), np.nan)
    matrix[:3, :3] = R * np.asarray(scale, dtype=np.float64)[np.newaxis, :]
    matrix[:3, 3] = position
    return matrix


def decompose_matrix(matrix: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Decompose a 4x4 affine transform into translation, rotation and scale.

    Scale is the length of each basis column. A negative determinant is
    folded into the X scale so the remaining block is a proper rotation.
    A zero scale or a non-finite element gives a NaN quaternion instead of
    an error.

    Args:
        matrix: 4x4 transform

    Returns:
        Tuple of (position, quaternion (x, y, z, w), scale)
    """
    matrix = np.asarray(matrix, dtype=np.float64)

    sx = np.linalg.norm(matrix[:3, 0])
    sy = np.linalg.norm(matrix[:3, 1])
    sz = np.linalg.norm(matrix[:3, 2])
    if np.linalg.det(matrix[:3, :3]) < 0:
        sx = -sx

    position = matrix[:3, 3].copy()
    scale = np.array([sx, sy, sz])

    with np.errstate(divide='ignore', invalid='ignore'):
        R = matrix[:3, :3] / scale[np.newaxis, :]
    if np.isfinite(R).all():
        quaternion = Rotation.from_matrix(R).as_quat()
    else:
        quaternion = np.full(4, np.nan)

    return position, quaternion, scale


def euler_from_quaternion(
    quaternion: np.ndarray,
    order: str = MMD_EULER_ORDER,
) -> Tuple[float, float, float]:
    """
    Decompose a quaternion into intrinsic Euler angles.

    Args:
        quaternion: Rotation (x, y, z, w)
        order: Intrinsic axis order, e.g. "YXZ"

    Returns:
        Angles about the X, Y and Z axes in radians, in that order
        regardless of the decomposition order; NaN for a non-finite quaternion
    """
    quaternion = np.asarray(quaternion, dtype=np.float64)
    if not np.isfinite(quaternion).all():
        return math.nan, math.nan, math.nan

    angles = Rotation.from_quat(quaternion).as_euler(order.upper())
    by_axis = dict(zip(order.lower(), angles))
    return float(by_axis['x']), float(by_axis['y']), float(by_axis['z'])


def to_mmd_rotation(euler: Tuple[float, float, float]) -> Tuple[float, float, float]:
    """
    Convert right-handed Euler angles to MMD's left-handed convention.

    Only the Z rotation changes sign; X and Y are unchanged.
    """
    x, y, z = euler
    return x, y, -z
