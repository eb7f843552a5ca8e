"""
fSpy to VMD converter.

This is the main module that ties the two conversion stages together:
    1. Apply an fSpy calibration to a perspective camera
        a. Vertical FOV (radians) to camera fov (degrees)
        b. Image size to aspect ratio, near/far clipping planes
        c. Row-major camera transform to the camera's world matrix
    2. Export the camera state as a VMD camera motion
        a. Distance from the target, scaled to MMD units
        b. World orientation as Y-X-Z Euler angles, Z negated for MMD
        c. Serialize the keyframe(s) to VMD bytes

The converter borrows its camera: it mutates the camera when a calibration
is applied but never creates or releases it. Calibration data and options
are copied whenever they cross the converter boundary.
"""

import copy
import dataclasses
import math
from typing import Optional, Sequence

import numpy as np
import logging

from .camera import PerspectiveCamera
from .config import (
    DEFAULT_FAR,
    DEFAULT_NEAR,
    ApplyOptions,
    ConverterOptions,
    ExportOptions,
)
from .errors import ErrorCode, FspyVmdConverterError
from .fspy import FspyData
from .transforms import (
    decompose_matrix,
    euler_from_quaternion,
    matrix_from_column_major,
    matrix_from_fspy_rows,
    rad_to_deg,
    to_mmd_rotation,
    validate_transform_rows,
)
from .vmd import (
    PERSPECTIVE,
    CameraFrame,
    create_default_camera_curve,
    write_camera_vmd,
)

logger = logging.getLogger(__name__)


class FspyVmdConverter:
    """
    Applies fSpy calibrations to a camera and exports VMD camera motions.

    Not safe for concurrent use: applying and exporting both read and
    write the same camera and held calibration.

    Example:
        camera = PerspectiveCamera()
        converter = FspyVmdConverter(camera)
        converter.apply_fspy_to_camera(load_fspy_json("shot.json"))
        data = converter.export_vmd(ExportOptions(frame_time=0))
    """

    def __init__(
        self,
        camera: PerspectiveCamera,
        options: Optional[ConverterOptions] = None,
    ):
        """
        Initialize the converter.

        Nothing is applied to the camera here; call
        :meth:`apply_fspy_to_camera` explicitly.

        Args:
            camera: Camera to drive (borrowed, not owned)
            options: Converter options, fixed for the converter's lifetime
        """
        self._camera = camera
        self._fspy_data: Optional[FspyData] = None
        self._fspy_cleared = False
        self._options = options if options is not None else ConverterOptions()

        logger.debug(
            f"Converter initialized: distance_base_multiplier="
            f"{self._options.distance_base_multiplier}"
        )

    @property
    def camera(self) -> PerspectiveCamera:
        return self._camera

    def get_fspy_data(self) -> Optional[FspyData]:
        """Copy of the held calibration, or None if none is held."""
        if self._fspy_data is None:
            return None
        return copy.deepcopy(self._fspy_data)

    def get_options(self) -> ConverterOptions:
        return dataclasses.replace(self._options)

    def clear_fspy_data(self) -> None:
        """Release the held calibration. Exports fail until the next apply."""
        if self._fspy_data is not None:
            self._fspy_data = None
            self._fspy_cleared = True
            logger.debug("Calibration cleared")

    def apply_fspy_to_camera(
        self,
        fspy: FspyData,
        options: Optional[ApplyOptions] = None,
    ) -> None:
        """
        Apply an fSpy calibration to the camera.

        Side effects on the camera:
            - fov, aspect, near, far set and projection matrix recomputed
            - world matrix replaced by the calibration's camera transform
            - matrix_auto_update disabled
            - position, quaternion and scale re-derived from the world matrix
            - local and world matrices recomputed

        Both transforms are validated and the camera transform decomposed
        before anything is mutated, so a failing call leaves the camera and
        the held calibration unchanged. A zero image height is not rejected;
        the aspect becomes inf or nan. A non-finite or zero-scale camera
        transform leaves the camera quaternion NaN.

        Args:
            fspy: Calibration to apply (copied)
            options: Clipping plane overrides

        Raises:
            FspyVmdConverterError: if a transform is not a numeric 4x4 matrix
        """
        options = options or ApplyOptions()

        elements = matrix_from_fspy_rows(fspy.camera_transform.rows)
        validate_transform_rows(fspy.view_transform.rows, name="viewTransform")
        decomposition = decompose_matrix(matrix_from_column_major(elements))
        if not np.isfinite(decomposition[1]).all():
            logger.warning("Camera transform has no valid rotation; orientation is NaN")
        fspy_copy = copy.deepcopy(fspy)

        camera = self._camera
        camera.fov = rad_to_deg(fspy.vertical_field_of_view)
        with np.errstate(divide='ignore', invalid='ignore'):
            camera.aspect = float(np.float64(fspy.image_width) / fspy.image_height)
        if not math.isfinite(camera.aspect):
            logger.warning(
                f"Non-finite aspect ratio from image size "
                f"{fspy.image_width}x{fspy.image_height}"
            )
        camera.near = options.near if options.near is not None else DEFAULT_NEAR
        camera.far = options.far if options.far is not None else DEFAULT_FAR
        camera.update_projection_matrix()

        # The world matrix is assigned directly, so stop recomputing it
        # from position/quaternion/scale
        camera.matrix_auto_update = False
        camera.set_matrix_world_from_array(elements)
        camera.decompose_matrix_world(decomposition)
        camera.update_matrix()
        camera.update_matrix_world(force=True)

        self._fspy_data = fspy_copy
        self._fspy_cleared = False

        logger.info(
            f"Calibration applied: fov={camera.fov:.3f} deg, aspect={camera.aspect:.4f}, "
            f"position={camera.position}"
        )

    def derive_camera_frame(self, options: Optional[ExportOptions] = None) -> CameraFrame:
        """
        Build a VMD camera keyframe from the camera's current state.

        Args:
            options: Target, distance multiplier and frame index

        Returns:
            CameraFrame in MMD conventions

        Raises:
            FspyVmdConverterError: CALIBRATION_NOT_APPLIED if no calibration is held
        """
        if self._fspy_data is None:
            if self._fspy_cleared:
                message = "fSpy data was cleared. Call apply_fspy_to_camera before export_vmd."
            else:
                message = "fSpy data is not set. Call apply_fspy_to_camera before export_vmd."
            raise FspyVmdConverterError(ErrorCode.CALIBRATION_NOT_APPLIED, message)

        options = options or ExportOptions()
        camera = self._camera

        target = np.asarray(options.target, dtype=np.float64)
        camera_position = camera.get_world_position()
        distance = -(
            float(np.linalg.norm(camera_position - target))
            * options.distance_multiplier
            * self._options.distance_base_multiplier
        )

        euler = euler_from_quaternion(camera.get_world_quaternion(), order="YXZ")

        # MMD is left-handed: only the Z rotation flips
        frame = CameraFrame(
            frame_time=options.frame_time,
            distance=distance,
            position=(float(target[0]), float(target[1]), float(target[2])),
            rotation=to_mmd_rotation(euler),
            curve=create_default_camera_curve(),
            view_angle=_round_half_up(camera.fov),
            orthographic=PERSPECTIVE,
        )

        logger.debug(
            f"Camera frame {frame.frame_time}: distance={frame.distance:.4f}, "
            f"rotation={frame.rotation}, view_angle={frame.view_angle}"
        )
        return frame

    def export_vmd(self, options: Optional[ExportOptions] = None) -> bytes:
        """
        Export the camera's current state as a single-frame VMD motion.

        Raises:
            FspyVmdConverterError: CALIBRATION_NOT_APPLIED if no calibration is held
        """
        frame = self.derive_camera_frame(options)
        data = self.write_camera_vmd([frame])
        logger.info(f"Exported VMD camera motion ({len(data)} bytes)")
        return data

    @staticmethod
    def create_default_camera_curve() -> list:
        return create_default_camera_curve()

    @staticmethod
    def write_camera_vmd(frames: Sequence[CameraFrame]) -> bytes:
        """Serialize caller-supplied camera frames to VMD bytes."""
        return write_camera_vmd(frames)


def _round_half_up(value: float) -> int:
    # NaN and inf store as 0 in the uint32 field
    if not math.isfinite(value):
        return 0
    return int(math.floor(value + 0.5))
