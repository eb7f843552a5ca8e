"""
Configuration module for fSpy to VMD conversion.

Handles converter, camera and export options, loadable from YAML files.
"""

import yaml
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional, Tuple
import logging

logger = logging.getLogger(__name__)

DEFAULT_DISTANCE_BASE_MULTIPLIER = 5.0
DEFAULT_NEAR = 0.01
DEFAULT_FAR = 2000.0


@dataclass(frozen=True)
class ConverterOptions:
    """
    Options fixed for the lifetime of a converter.

    Attributes:
        distance_base_multiplier: Scale from camera model units to MMD units
    """
    distance_base_multiplier: float = DEFAULT_DISTANCE_BASE_MULTIPLIER


@dataclass
class ApplyOptions:
    """Clipping planes used when applying a calibration (None = default)."""
    near: Optional[float] = None  # defaults to 0.01
    far: Optional[float] = None  # defaults to 2000.0


@dataclass
class ExportOptions:
    """
    Per-export options for VMD generation.

    Attributes:
        distance_multiplier: Extra scale applied to the camera distance
        target: Point the MMD camera orbits around (x, y, z)
        frame_time: Frame index of the exported keyframe (30 fps)
    """
    distance_multiplier: float = 1.0
    target: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    frame_time: int = 0


@dataclass
class ExportConfig:
    """
    Complete configuration for a conversion run.

    Example YAML structure:
        converter:
          distance_base_multiplier: 5.0
        camera:
          near: 0.01
          far: 2000.0
        export:
          distance_multiplier: 1.0
          target: [0.0, 0.0, 0.0]
          frame_time: 0
    """
    converter: ConverterOptions = field(default_factory=ConverterOptions)
    camera: ApplyOptions = field(default_factory=ApplyOptions)
    export: ExportOptions = field(default_factory=ExportOptions)

    @classmethod
    def from_yaml(cls, config_path: str) -> "ExportConfig":
        """
        Load configuration from a YAML file.

        Every section and key is optional.

        Args:
            config_path: Path to the YAML configuration file

        Returns:
            ExportConfig with loaded parameters
        """
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(path, 'r') as f:
            data = yaml.safe_load(f) or {}

        logger.info(f"Loading configuration from {config_path}")

        conv_data = data.get('converter') or {}
        converter = ConverterOptions(
            distance_base_multiplier=float(
                conv_data.get('distance_base_multiplier', DEFAULT_DISTANCE_BASE_MULTIPLIER)
            ),
        )

        cam_data = data.get('camera') or {}
        camera = ApplyOptions(
            near=cam_data.get('near'),
            far=cam_data.get('far'),
        )

        exp_data = data.get('export') or {}
        target = exp_data.get('target', [0.0, 0.0, 0.0])
        if not isinstance(target, (list, tuple)) or len(target) != 3:
            raise ValueError(f"export.target must be a list of 3 numbers, got {target!r}")

        export = ExportOptions(
            distance_multiplier=float(exp_data.get('distance_multiplier', 1.0)),
            target=tuple(float(v) for v in target),
            frame_time=int(exp_data.get('frame_time', 0)),
        )

        return cls(converter=converter, camera=camera, export=export)

    def to_yaml(self, config_path: str) -> None:
        """Save configuration to a YAML file."""
        data = {
            'converter': {
                'distance_base_multiplier': self.converter.distance_base_multiplier,
            },
            'camera': {
                'near': self.camera.near,
                'far': self.camera.far,
            },
            'export': {
                'distance_multiplier': self.export.distance_multiplier,
                'target': list(self.export.target),
                'frame_time': self.export.frame_time,
            },
        }

        with open(config_path, 'w') as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

        logger.info(f"Configuration saved to {config_path}")
