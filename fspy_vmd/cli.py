"""
Command-line interface for fSpy to VMD conversion.

Usage:
    fspy2vmd calibration.json [--output OUTPUT.vmd] [--config CONFIG.yaml]
"""

import argparse
import dataclasses
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .camera import PerspectiveCamera
from .config import ExportConfig
from .converter import FspyVmdConverter
from .errors import FspyVmdConverterError
from .fspy import load_fspy_json
from .vmd import save_vmd


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)]
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Convert an fSpy camera calibration to an MMD camera motion (VMD)',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
    # Write shot.vmd next to the calibration
    fspy2vmd shot.json

    # Custom output and options file
    fspy2vmd shot.json -o camera.vmd -c fspy2vmd.yaml

    # Orbit around a point and place the key at frame 30
    fspy2vmd shot.json --target 0 10 0 --frame-time 30
'''
    )

    parser.add_argument(
        'calibration',
        type=str,
        help='Path to fSpy camera parameter JSON export'
    )

    parser.add_argument(
        '--output', '-o',
        type=str,
        default=None,
        help='Output VMD path (default: calibration path with .vmd suffix)'
    )

    parser.add_argument(
        '--config', '-c',
        type=str,
        default=None,
        help='Path to YAML options file'
    )

    parser.add_argument(
        '--frame-time',
        type=int,
        default=None,
        help='Frame index of the exported keyframe (30 fps)'
    )

    parser.add_argument(
        '--distance-multiplier',
        type=float,
        default=None,
        help='Extra scale applied to the camera distance'
    )

    parser.add_argument(
        '--target',
        type=float,
        nargs=3,
        metavar=('X', 'Y', 'Z'),
        default=None,
        help='Target point the MMD camera looks at'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose output'
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for CLI."""
    args = build_parser().parse_args(argv)

    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    try:
        config = ExportConfig.from_yaml(args.config) if args.config else ExportConfig()

        # Command line values override the options file
        overrides = {}
        if args.frame_time is not None:
            overrides['frame_time'] = args.frame_time
        if args.distance_multiplier is not None:
            overrides['distance_multiplier'] = args.distance_multiplier
        if args.target is not None:
            overrides['target'] = tuple(args.target)
        export_options = dataclasses.replace(config.export, **overrides)

        fspy = load_fspy_json(args.calibration)

        converter = FspyVmdConverter(PerspectiveCamera(), config.converter)
        converter.apply_fspy_to_camera(fspy, config.camera)
        data = converter.export_vmd(export_options)

        output = Path(args.output) if args.output else Path(args.calibration).with_suffix('.vmd')
        output.parent.mkdir(parents=True, exist_ok=True)
        save_vmd(str(output), data)
        return 0

    except FileNotFoundError as e:
        logger.error(f"File not found: {e}")
        return 1
    except FspyVmdConverterError as e:
        logger.error(f"Conversion failed: {e}")
        return 1
    except ValueError as e:
        logger.error(f"Invalid input: {e}")
        return 1
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
