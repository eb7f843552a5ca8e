"""
Error types for the fSpy to VMD conversion.

Every failure raised by the converter carries a machine-checkable code so
callers can branch on the failure kind instead of matching message text.
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Failure kinds raised by :class:`FspyVmdConverterError`."""
    CALIBRATION_NOT_APPLIED = "FSPY_DATA_NOT_SET"
    INVALID_TRANSFORM_SHAPE = "INVALID_CAMERA_TRANSFORM_ROWS_SIZE"
    INVALID_TRANSFORM_VALUE = "INVALID_CAMERA_TRANSFORM_VALUE"


class FspyVmdConverterError(Exception):
    """
    Error raised by the calibration applier and motion encoder.

    Attributes:
        code: The failure kind
        message: Human readable description
    """

    def __init__(self, code: ErrorCode, message: str):
        super().__init__(message)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"
