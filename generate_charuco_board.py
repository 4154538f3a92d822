#!/usr/bin/env python3
"""
CharuCo Board Generator

Generates a CharuCo calibration board for printing and camera calibration.
"""

import argparse
import sys
from charuco_calib.calibration.charuco_board import board_from_config, save_board_image
from charuco_calib.exceptions import CalibrationFileError
from charuco_calib.utils.config_manager import ConfigManager
from charuco_calib.utils.logging_utils import setup_logging


def main():
    """Generate CharuCo calibration board."""
    parser = argparse.ArgumentParser(
        description="Generate CharuCo calibration board for camera calibration"
    )

    parser.add_argument(
        "--output", "-o",
        type=str,
        help="Output file path for the board image (default from config: board.png)"
    )

    parser.add_argument(
        "--width",
        type=int,
        help="Image width in pixels (default from config: 2480, A4 at 300 DPI)"
    )

    parser.add_argument(
        "--height",
        type=int,
        help="Image height in pixels (default from config: 3508, A4 at 300 DPI)"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration file"
    )

    args = parser.parse_args()
    setup_logging()

    # Load configuration
    config = ConfigManager(args.config) if args.config else ConfigManager()
    charuco_config = config.get_calibration_params()

    board, _ = board_from_config(charuco_config)
    size = (
        args.width or charuco_config.get('board_image_width', 2480),
        args.height or charuco_config.get('board_image_height', 3508),
    )
    output = args.output or config.get('output.board_image', 'board.png')

    print("Generating CharuCo calibration board...")
    print(f"Board configuration: {charuco_config.get('squares_x', 5)}x{charuco_config.get('squares_y', 8)}")
    print(f"Square size: {charuco_config.get('square_length', 0.04) * 1000:.1f}mm")
    print(f"Marker size: {charuco_config.get('marker_length', 0.02) * 1000:.1f}mm")

    try:
        save_board_image(output, board, size=size, margin=charuco_config.get('board_margin', 10))
    except CalibrationFileError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"\nCharuCo board saved to: {output}")
    print("\nCalibration Instructions:")
    print("1. Print the board at 100% scale and mount it on a flat, rigid surface")
    print("2. Measure a printed square and update charuco.square_length if it differs")
    print("3. Run charuco-calib and move the board through the whole field of view")
    print("4. Tilt the board in pitch and yaw, and vary its distance")
    print("5. Press ESC when enough frames have been captured")


if __name__ == "__main__":
    main()
