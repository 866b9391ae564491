import logging
from dataclasses import dataclass
from typing import Tuple

from suppression_config import CameraConfig, GimbalConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GimbalAngles:
    """Absolute gimbal pose command in degrees."""
    target_azimuth_degrees: float
    target_pitch_degrees: float


def calculate_gimbal_angles(target_pixel: Tuple[float, float],
                            image_width: int,
                            image_height: int,
                            hfov_degrees: float,
                            vfov_degrees: float,
                            current_azimuth_degrees: float,
                            current_pitch_degrees: float,
                            nozzle_offset_azimuth_degrees: float,
                            nozzle_offset_pitch_degrees: float,
                            pitch_sign: int = 1) -> GimbalAngles:
    """Calculate the gimbal pose that puts the nozzle on a target pixel.

    The angular offset is linear in the pixel offset from the image center.
    Wrapping and mechanical limits are left to the actuator driver.

    Args:
        target_pixel: Target pixel coordinates (x, y).
        image_width: Frame width in pixels.
        image_height: Frame height in pixels.
        hfov_degrees: Horizontal field of view in degrees.
        vfov_degrees: Vertical field of view in degrees.
        current_azimuth_degrees: Gimbal azimuth reported by the gimbal.
        current_pitch_degrees: Gimbal pitch reported by the gimbal.
        nozzle_offset_azimuth_degrees: Calibrated nozzle azimuth offset.
        nozzle_offset_pitch_degrees: Calibrated nozzle pitch offset.
        pitch_sign: +1 if increasing pixel y raises pitch, -1 otherwise.

    Returns:
        GimbalAngles to command. The current pose when the frame size or
        field of view is not positive.
    """
    if image_width <= 0 or image_height <= 0 or hfov_degrees <= 0 or vfov_degrees <= 0:
        logger.debug("Invalid frame size or FOV, keeping current gimbal pose")
        return GimbalAngles(current_azimuth_degrees, current_pitch_degrees)

    target_x, target_y = target_pixel
    center_x = image_width / 2.0
    center_y = image_height / 2.0

    offset_x = (target_x - center_x) / center_x
    offset_y = (target_y - center_y) / center_y

    delta_azimuth = offset_x * (hfov_degrees / 2.0)
    delta_pitch = pitch_sign * offset_y * (vfov_degrees / 2.0)

    return GimbalAngles(
        target_azimuth_degrees=current_azimuth_degrees + delta_azimuth - nozzle_offset_azimuth_degrees,
        target_pitch_degrees=current_pitch_degrees + delta_pitch - nozzle_offset_pitch_degrees,
    )


class GimbalAimSolver:
    """Converts target pixels into gimbal commands for one camera/nozzle calibration."""

    def __init__(self, camera: CameraConfig, gimbal: GimbalConfig):
        self.camera = camera
        self.gimbal = gimbal

    def solve(self, target_pixel: Tuple[float, float], frame_shape: Tuple[int, int],
              current_azimuth: float = 0.0, current_pitch: float = 0.0) -> GimbalAngles:
        """
        Args:
            target_pixel: Target pixel coordinates (x, y).
            frame_shape: (height, width) of the temperature grid.
            current_azimuth: Current gimbal azimuth in degrees.
            current_pitch: Current gimbal pitch in degrees.
        """
        height, width = frame_shape
        return calculate_gimbal_angles(
            target_pixel, width, height,
            self.camera.hfov_degrees, self.camera.vfov_degrees,
            current_azimuth, current_pitch,
            self.gimbal.nozzle_offset_azimuth_degrees,
            self.gimbal.nozzle_offset_pitch_degrees,
            pitch_sign=self.gimbal.pitch_sign,
        )
