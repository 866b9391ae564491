"""
Fire suppression aiming loop.

Usage:
    python main.py --config config/params.yaml
    python main.py --image testImage/02.jpg --no-display
    python main.py --source rtsp://192.168.1.64/stream
"""

import argparse
import logging
import time
from typing import Optional, Sequence

import cv2

from camera_stream import FrameSource, ThermalCameraStream, ThermalImageSource
from fire_pipeline import process_frame
from suppression_config import Settings, load_settings
from visualization import draw_results, render_temperature_grid

WINDOW = "Fire Detection Visual Output"
FRAME_DELAY_MS = 500

logger = logging.getLogger("main")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Aim a fire suppression nozzle from thermal frames.")
    parser.add_argument("--config", default=None, help="YAML parameters file")
    parser.add_argument("--source", default=None, help="Camera index or stream URL (overrides config)")
    parser.add_argument("--image", default=None, help="Use a still thermal image instead of a camera")
    parser.add_argument("--azimuth", type=float, default=0.0, help="Current gimbal azimuth (deg)")
    parser.add_argument("--pitch", type=float, default=0.0, help="Current gimbal pitch (deg)")
    parser.add_argument("--no-display", action="store_true", help="Do not open a window")
    parser.add_argument("--max-frames", type=int, default=0, help="Stop after N frames (0 = run forever)")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def build_source(args: argparse.Namespace, settings: Settings) -> FrameSource:
    src = settings.source
    if args.image:
        return ThermalImageSource(args.image, src.min_temp, src.max_temp,
                                  (src.image_width, src.image_height))
    return ThermalCameraStream(args.source or src.identifier, src.min_temp, src.max_temp)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    settings = load_settings(args.config)
    logger.info("Using HFOV: %.1f, VFOV: %.1f",
                settings.camera.hfov_degrees, settings.camera.vfov_degrees)
    logger.info("Using Nozzle Offset Az: %.2f, Pitch: %.2f",
                settings.gimbal.nozzle_offset_azimuth_degrees,
                settings.gimbal.nozzle_offset_pitch_degrees)

    source = build_source(args, settings)
    if not source.open():
        return 1

    # Gimbal feedback is external; the pose stays at the given values
    current_azimuth, current_pitch = args.azimuth, args.pitch
    frames = 0

    logger.info("Vision processing for fire suppression started. Press 'q' or ESC to exit.")
    try:
        while True:
            grid, ok = source.read_frame()
            if not ok:
                logger.error("Could not read a temperature frame, stopping")
                break

            result = process_frame(grid, settings, current_azimuth, current_pitch)

            primary = result.primary_target
            if primary is not None and result.angles is not None:
                px, py = primary.final_pixel_aim_point
                logger.info("Primary target %d pixel: (%.1f, %.1f) severity: %.0f",
                            primary.id, px, py, primary.severity)
                logger.info("Gimbal command -> azimuth: %.2f, pitch: %.2f",
                            result.angles.target_azimuth_degrees,
                            result.angles.target_pitch_degrees)
            else:
                logger.info("No spray targets detected.")

            frames += 1
            if args.max_frames and frames >= args.max_frames:
                break

            if args.no_display:
                time.sleep(FRAME_DELAY_MS / 1000.0)
                continue

            vis = draw_results(render_temperature_grid(grid), result.hotspots, result.targets,
                               grid=grid, threshold=settings.detection.fire_temperature_threshold)
            cv2.imshow(WINDOW, vis)
            key = cv2.waitKey(FRAME_DELAY_MS) & 0xFF
            if key in (ord('q'), 27):
                break
    finally:
        source.close()
        if not args.no_display:
            cv2.destroyAllWindows()
        logger.info("Vision processing terminated.")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
