"""
Tests for VMD camera motion writer.
"""

import math
import struct

import pytest

from fspy_vmd.vmd import (
    CAMERA_MODEL_NAME_SJIS,
    ORTHOGRAPHIC,
    PERSPECTIVE,
    VMD_CAMERA_FRAME_SIZE,
    VMD_SIGNATURE,
    CameraFrame,
    create_default_camera_curve,
    encode_ascii,
    pad_bytes,
    save_vmd,
    vmd_size,
    write_camera_vmd,
)

CAMERA_COUNT_OFFSET = 30 + 20 + 4 + 4
FIRST_FRAME_OFFSET = CAMERA_COUNT_OFFSET + 4


class TestDefaultCurve:
    """Tests for the linear interpolation curve."""

    def test_length(self):
        assert len(create_default_camera_curve()) == 24

    def test_alternating_values(self):
        curve = create_default_camera_curve()
        assert curve == [20, 107] * 12

    def test_fresh_list_each_call(self):
        curve = create_default_camera_curve()
        curve[0] = 0
        assert create_default_camera_curve()[0] == 20


class TestCameraFrame:
    """Tests for the camera keyframe record."""

    def test_record_size(self):
        assert VMD_CAMERA_FRAME_SIZE == 61
        assert len(CameraFrame().pack()) == 61

    def test_defaults(self):
        frame = CameraFrame()
        assert frame.frame_time == 0
        assert frame.orthographic == PERSPECTIVE
        assert frame.curve == create_default_camera_curve()

    def test_wrong_curve_length(self):
        with pytest.raises(ValueError):
            CameraFrame(curve=[20, 107] * 11)

    def test_wrong_vector_length(self):
        with pytest.raises(ValueError):
            CameraFrame(position=(0.0, 0.0))

    def test_field_order(self):
        """Fields are packed in VMD order, little endian."""
        frame = CameraFrame(
            frame_time=12,
            distance=-50.0,
            position=(1.0, 2.0, 3.0),
            rotation=(0.5, -0.25, 0.125),
            view_angle=45,
            orthographic=1,
        )
        data = frame.pack()

        assert struct.unpack_from('<I', data, 0)[0] == 12
        assert struct.unpack_from('<f', data, 4)[0] == -50.0
        assert struct.unpack_from('<3f', data, 8) == (1.0, 2.0, 3.0)
        assert struct.unpack_from('<3f', data, 20) == (0.5, -0.25, 0.125)
        assert list(data[32:56]) == [20, 107] * 12
        assert struct.unpack_from('<I', data, 56)[0] == 45
        assert data[60] == 1

    def test_float32_overflow_stored_as_infinity(self):
        frame = CameraFrame(distance=-5e38, position=(1e39, 0.0, -1e39), rotation=(0.1, 0.0, 0.0))
        data = frame.pack()

        assert struct.unpack_from('<f', data, 4)[0] == -math.inf
        assert struct.unpack_from('<3f', data, 8) == (math.inf, 0.0, -math.inf)
        assert struct.unpack_from('<f', data, 20)[0] == pytest.approx(0.1)

    def test_nan_stored_as_nan(self):
        data = CameraFrame(rotation=(math.nan, 0.0, 0.0)).pack()
        assert math.isnan(struct.unpack_from('<f', data, 20)[0])

    def test_negative_frame_time_rejected(self):
        with pytest.raises(struct.error):
            CameraFrame(frame_time=-1).pack()


class TestTextFields:
    """Tests for fixed-size text fields."""

    def test_ascii_padding(self):
        assert encode_ascii("abc", 6) == b"abc\x00\x00\x00"

    def test_ascii_truncation(self):
        assert encode_ascii("abcdef", 3) == b"abc"

    def test_non_ascii_masked(self):
        """Non-ASCII characters keep only their low 7 bits."""
        assert encode_ascii("é", 2) == bytes([0xe9 & 0x7f, 0])
        assert encode_ascii("あ", 1) == bytes([0x42])

    def test_pad_bytes(self):
        assert pad_bytes(b"\x01\x02", 4) == b"\x01\x02\x00\x00"
        assert pad_bytes(b"\x01\x02\x03", 2) == b"\x01\x02"

    def test_model_name_is_shift_jis(self):
        assert CAMERA_MODEL_NAME_SJIS == "カメラ・照明".encode("shift_jis")


class TestWriteCameraVMD:
    """Tests for full VMD serialization."""

    @pytest.mark.parametrize("count", [0, 1, 3])
    def test_size(self, count):
        data = write_camera_vmd([CameraFrame(frame_time=i) for i in range(count)])
        assert len(data) == 30 + 20 + 24 + 61 * count
        assert len(data) == vmd_size(count)

    def test_header(self):
        data = write_camera_vmd([CameraFrame()])

        assert data[:30].rstrip(b"\x00").decode("ascii") == VMD_SIGNATURE
        assert data[25:30] == b"\x00" * 5
        assert data[30:42] == CAMERA_MODEL_NAME_SJIS
        assert data[42:50] == b"\x00" * 8

    def test_section_counts(self):
        data = write_camera_vmd([CameraFrame(), CameraFrame(frame_time=30)])

        bone_count, morph_count, camera_count = struct.unpack_from('<3I', data, 50)
        assert (bone_count, morph_count, camera_count) == (0, 0, 2)

        light_count, shadow_count, ik_count = struct.unpack_from('<3I', data, len(data) - 12)
        assert (light_count, shadow_count, ik_count) == (0, 0, 0)

    def test_single_frame_count_byte(self):
        """A single default frame gives 135 bytes and a camera count of 1 after the bone and morph counts."""
        data = write_camera_vmd([CameraFrame(frame_time=0)])
        assert len(data) == 135
        assert data[CAMERA_COUNT_OFFSET] == 1

    def test_frames_in_order(self):
        frames = [CameraFrame(frame_time=t) for t in (0, 15, 30)]
        data = write_camera_vmd(frames)

        times = [
            struct.unpack_from('<I', data, FIRST_FRAME_OFFSET + i * 61)[0]
            for i in range(3)
        ]
        assert times == [0, 15, 30]

    def test_orthographic_flag(self):
        data = write_camera_vmd([CameraFrame(orthographic=ORTHOGRAPHIC)])
        assert data[FIRST_FRAME_OFFSET + 60] == ORTHOGRAPHIC

    def test_deterministic(self):
        frames = [CameraFrame(distance=-12.5, rotation=(0.1, 0.2, 0.3), view_angle=30)]
        assert write_camera_vmd(frames) == write_camera_vmd(frames)

    def test_returns_bytes(self):
        assert isinstance(write_camera_vmd([]), bytes)


class TestSaveVMD:
    def test_writes_file(self, tmp_path):
        data = write_camera_vmd([CameraFrame()])
        out = tmp_path / "camera.vmd"

        save_vmd(str(out), data)

        assert out.read_bytes() == data
