"""
fSpy to VMD Camera Conversion Package

Applies a camera calibration solved by fSpy to a perspective camera and
exports the camera as an MMD (MikuMikuDance) VMD camera motion.

Conversion Chain:
    fSpy JSON → FspyData → PerspectiveCamera → CameraFrame → VMD bytes

Conventions:
    - fSpy transforms: row-major, right-handed, Y up
    - Camera model matrices: column-major 16-element arrays
    - VMD: left-handed, Y-X-Z Euler angles, little endian
"""

from .camera import PerspectiveCamera
from .config import ApplyOptions, ConverterOptions, ExportConfig, ExportOptions
from .converter import FspyVmdConverter
from .errors import ErrorCode, FspyVmdConverterError
from .fspy import FspyData, FspyPoint, FspyTransformMatrix, VanishingPointAxis, load_fspy_json
from .vmd import CameraFrame, create_default_camera_curve, save_vmd, write_camera_vmd

__version__ = "1.0.0"
__all__ = [
    "PerspectiveCamera",
    "ApplyOptions",
    "ConverterOptions",
    "ExportConfig",
    "ExportOptions",
    "FspyVmdConverter",
    "ErrorCode",
    "FspyVmdConverterError",
    "FspyData",
    "FspyPoint",
    "FspyTransformMatrix",
    "VanishingPointAxis",
    "load_fspy_json",
    "CameraFrame",
    "create_default_camera_curve",
    "save_vmd",
    "write_camera_vmd",
]
