"""
fSpy calibration data module.

Holds the structured camera parameters exported by fSpy
("File > Export > Camera parameters as JSON").

JSON Structure:
    {
      "principalPoint": {"x": 0.0, "y": 0.0},
      "viewTransform": {"rows": [[...4], [...4], [...4], [...4]]},
      "cameraTransform": {"rows": [[...4], [...4], [...4], [...4]]},
      "horizontalFieldOfView": 1.2,
      "verticalFieldOfView": 0.7,
      "vanishingPoints": [{"x": ..., "y": ...}, ...],
      "vanishingPointAxes": ["xNegative", "yPositive", "zPositive"],
      "relativeFocalLength": 1.6,
      "imageWidth": 1920,
      "imageHeight": 1080
    }

Conventions:
    - Transform matrices are row-major (rows[row][col])
    - The camera transform is camera-to-world, translation in column 3
    - Field of view angles are in radians
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List
import logging

logger = logging.getLogger(__name__)


class VanishingPointAxis(str, Enum):
    """Axis direction associated with a vanishing point."""
    X_POSITIVE = "xPositive"
    X_NEGATIVE = "xNegative"
    Y_POSITIVE = "yPositive"
    Y_NEGATIVE = "yNegative"
    Z_POSITIVE = "zPositive"
    Z_NEGATIVE = "zNegative"


@dataclass
class FspyPoint:
    """2D point (principal point, vanishing point)."""
    x: float
    y: float


@dataclass
class FspyTransformMatrix:
    """4x4 transform, row-major."""
    rows: List[List[float]]


@dataclass
class FspyData:
    """
    Camera parameters solved by fSpy.

    Attributes:
        principal_point: Principal point in relative image coordinates
        view_transform: World-to-camera transform (row-major)
        camera_transform: Camera-to-world transform (row-major)
        horizontal_field_of_view: Horizontal FOV in radians (not used for export)
        vertical_field_of_view: Vertical FOV in radians
        vanishing_points: Vanishing points in relative image coordinates
        vanishing_point_axes: Axis label of each vanishing point
        relative_focal_length: Focal length relative to the image size
        image_width: Image width in pixels
        image_height: Image height in pixels
    """
    principal_point: FspyPoint
    view_transform: FspyTransformMatrix
    camera_transform: FspyTransformMatrix
    horizontal_field_of_view: float
    vertical_field_of_view: float
    vanishing_points: List[FspyPoint] = field(default_factory=list)
    vanishing_point_axes: List[VanishingPointAxis] = field(default_factory=list)
    relative_focal_length: float = 0.0
    image_width: int = 0
    image_height: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FspyData":
        """
        Build calibration data from a decoded fSpy JSON export.

        Transform rows are copied as given; their shape is checked when the
        calibration is applied to a camera.

        Raises:
            ValueError: if a required key is missing or an axis label is unknown
        """
        required = {
            'principalPoint', 'viewTransform', 'cameraTransform',
            'horizontalFieldOfView', 'verticalFieldOfView',
            'imageWidth', 'imageHeight',
        }
        missing = required - set(data.keys())
        if missing:
            raise ValueError(f"fSpy data missing keys: {sorted(missing)}")

        try:
            axes = [VanishingPointAxis(a) for a in data.get('vanishingPointAxes', [])]
        except ValueError as e:
            raise ValueError(f"Unknown vanishing point axis: {e}") from e

        return cls(
            principal_point=_point_from_dict(data['principalPoint']),
            view_transform=_matrix_from_dict(data['viewTransform'], 'viewTransform'),
            camera_transform=_matrix_from_dict(data['cameraTransform'], 'cameraTransform'),
            horizontal_field_of_view=data['horizontalFieldOfView'],
            vertical_field_of_view=data['verticalFieldOfView'],
            vanishing_points=[_point_from_dict(p) for p in data.get('vanishingPoints', [])],
            vanishing_point_axes=axes,
            relative_focal_length=data.get('relativeFocalLength', 0.0),
            image_width=data['imageWidth'],
            image_height=data['imageHeight'],
        )

    def to_dict(self) -> Dict[str, Any]:
        """Inverse of :meth:`from_dict` using fSpy's key names."""
        return {
            'principalPoint': {'x': self.principal_point.x, 'y': self.principal_point.y},
            'viewTransform': {'rows': [list(r) for r in self.view_transform.rows]},
            'cameraTransform': {'rows': [list(r) for r in self.camera_transform.rows]},
            'horizontalFieldOfView': self.horizontal_field_of_view,
            'verticalFieldOfView': self.vertical_field_of_view,
            'vanishingPoints': [{'x': p.x, 'y': p.y} for p in self.vanishing_points],
            'vanishingPointAxes': [a.value for a in self.vanishing_point_axes],
            'relativeFocalLength': self.relative_focal_length,
            'imageWidth': self.image_width,
            'imageHeight': self.image_height,
        }


def _point_from_dict(data: Dict[str, Any]) -> FspyPoint:
    try:
        return FspyPoint(x=data['x'], y=data['y'])
    except (KeyError, TypeError) as e:
        raise ValueError(f"Invalid point: {data!r}") from e


def _matrix_from_dict(data: Dict[str, Any], name: str) -> FspyTransformMatrix:
    if not isinstance(data, dict) or 'rows' not in data:
        raise ValueError(f"'{name}' must contain a 'rows' list")
    return FspyTransformMatrix(rows=data['rows'])


def load_fspy_json(file_path: str) -> FspyData:
    """
    Load an fSpy camera parameter JSON export.

    Args:
        file_path: Path to the JSON file

    Returns:
        Parsed calibration data
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"fSpy JSON not found: {file_path}")

    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"fSpy JSON must be an object: {file_path}")

    fspy = FspyData.from_dict(data)
    logger.info(
        f"Loaded fSpy calibration from {path.name} "
        f"({fspy.image_width}x{fspy.image_height})"
    )
    return fspy
