"""
VMD (Vocaloid Motion Data) camera motion writer.

VMD File Layout (little endian):
    - Header (30 bytes): "Vocaloid Motion Data 0002", zero padded
    - Model name (20 bytes): Shift-JIS, "カメラ・照明" for camera motions
    - Bone frame count (uint32) + bone frames
    - Morph frame count (uint32) + morph frames
    - Camera frame count (uint32) + camera frames (61 bytes each)
    - Light frame count (uint32)
    - Shadow frame count (uint32)
    - IK frame count (uint32)

Camera Frame Layout (61 bytes):
    frame_time   uint32      frame index (30 fps)
    distance     float32     camera to target distance (negative = in front)
    position     float32 x3  target position
    rotation     float32 x3  rotation in radians (X, Y, Z)
    curve        uint8 x24   interpolation control points
    view_angle   uint32      field of view in degrees
    orthographic uint8       0 = perspective, 1 = orthographic

Only camera frames are written; every other section is empty.
"""

import struct
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

import numpy as np
import logging

logger = logging.getLogger(__name__)

VMD_SIGNATURE = "Vocaloid Motion Data 0002"
VMD_HEADER_SIZE = 30
VMD_MODEL_NAME_SIZE = 20
VMD_UINT32_SIZE = 4
# bone, morph, camera, light, shadow, ik
VMD_COUNT_FIELDS = 6

# "カメラ・照明" in Shift-JIS
CAMERA_MODEL_NAME_SJIS = bytes([
    0x83, 0x4a,  # カ
    0x83, 0x81,  # メ
    0x83, 0x89,  # ラ
    0x81, 0x45,  # ・
    0x8f, 0xc6,  # 照
    0x96, 0xbe,  # 明
])

# Keep only the low 7 bits of each character code
ASCII_MASK = 0x7f

CAMERA_FRAME_STRUCT = struct.Struct('<If3f3f24BIB')
VMD_CAMERA_FRAME_SIZE = CAMERA_FRAME_STRUCT.size  # 61
COUNT_STRUCT = struct.Struct('<I')

# Linear interpolation on MMD's 0-127 control point scale.
# One start/end pair per curve, 12 pairs in total.
CAMERA_CURVE_START = 20
CAMERA_CURVE_END = 107
CAMERA_CURVE_PAIR_COUNT = 12
CAMERA_CURVE_LENGTH = CAMERA_CURVE_PAIR_COUNT * 2

DEFAULT_FRAME_TIME = 0
PERSPECTIVE = 0
ORTHOGRAPHIC = 1


def create_default_camera_curve() -> List[int]:
    """Linear interpolation curve: [20, 107] repeated 12 times."""
    curve = []
    for _ in range(CAMERA_CURVE_PAIR_COUNT):
        curve.extend((CAMERA_CURVE_START, CAMERA_CURVE_END))
    return curve


@dataclass
class CameraFrame:
    """
    One VMD camera keyframe.

    Attributes:
        frame_time: Frame index (30 fps)
        distance: Distance from target to camera, negative when looking at it
        position: Target position (x, y, z)
        rotation: Camera rotation in radians (x, y, z), MMD convention
        curve: 24 interpolation control points (12 start/end pairs)
        view_angle: Field of view in whole degrees
        orthographic: 0 for perspective, 1 for orthographic
    """
    frame_time: int = DEFAULT_FRAME_TIME
    distance: float = 0.0
    position: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    rotation: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    curve: List[int] = field(default_factory=create_default_camera_curve)
    view_angle: int = 0
    orthographic: int = PERSPECTIVE

    def __post_init__(self):
        if len(self.curve) != CAMERA_CURVE_LENGTH:
            raise ValueError(
                f"curve must have {CAMERA_CURVE_LENGTH} entries, got {len(self.curve)}"
            )
        if len(self.position) != 3 or len(self.rotation) != 3:
            raise ValueError("position and rotation must have 3 components")

    def pack(self) -> bytes:
        """
        Encode this frame as its 61-byte record.

        Float fields are rounded to float32; magnitudes beyond the float32
        range are stored as +/-inf.
        """
        return CAMERA_FRAME_STRUCT.pack(
            self.frame_time,
            to_float32(self.distance),
            *(to_float32(v) for v in self.position),
            *(to_float32(v) for v in self.rotation),
            *self.curve,
            self.view_angle,
            self.orthographic,
        )


def to_float32(value: float) -> float:
    """Round to the nearest float32, overflowing to +/-inf."""
    with np.errstate(over='ignore'):
        return float(np.float32(value))


def encode_ascii(text: str, length: int) -> bytes:
    """
    Encode text into a fixed-size ASCII field.

    Each character code is masked to 7 bits, so non-ASCII characters are
    not rejected but written as their low bits. Longer text is truncated,
    shorter text is zero padded.
    """
    return bytes(ord(ch) & ASCII_MASK for ch in text[:length]).ljust(length, b'\x00')


def pad_bytes(data: bytes, length: int) -> bytes:
    """Truncate or zero pad raw bytes to a fixed-size field."""
    return bytes(data[:length]).ljust(length, b'\x00')


def vmd_size(frame_count: int) -> int:
    """Total file size for a camera-only VMD with ``frame_count`` frames."""
    return (
        VMD_HEADER_SIZE
        + VMD_MODEL_NAME_SIZE
        + VMD_UINT32_SIZE * VMD_COUNT_FIELDS
        + frame_count * VMD_CAMERA_FRAME_SIZE
    )


def write_camera_vmd(frames: Sequence[CameraFrame]) -> bytes:
    """
    Serialize camera frames into a VMD file image.

    Args:
        frames: Camera keyframes in output order

    Returns:
        The complete VMD file contents

    Raises:
        struct.error: if an integer field is out of its unsigned range
    """
    out = bytearray()

    out += encode_ascii(VMD_SIGNATURE, VMD_HEADER_SIZE)
    out += pad_bytes(CAMERA_MODEL_NAME_SJIS, VMD_MODEL_NAME_SIZE)

    # Bone and morph sections are empty for a camera motion
    out += COUNT_STRUCT.pack(0)
    out += COUNT_STRUCT.pack(0)

    out += COUNT_STRUCT.pack(len(frames))
    for frame in frames:
        out += frame.pack()

    # Light, shadow, IK
    out += COUNT_STRUCT.pack(0)
    out += COUNT_STRUCT.pack(0)
    out += COUNT_STRUCT.pack(0)

    logger.debug(f"Encoded {len(frames)} camera frames ({len(out)} bytes)")
    return bytes(out)


def save_vmd(file_path: str, data: bytes) -> None:
    """Write an encoded VMD buffer to disk."""
    with open(file_path, 'wb') as f:
        f.write(data)
    logger.info(f"VMD saved to {file_path} ({len(data)} bytes)")
