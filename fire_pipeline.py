"""
Per-frame fire suppression pipeline:
grid -> mask -> hotspots -> ranked spray targets -> gimbal command.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from gimbal_aim import GimbalAimSolver, GimbalAngles
from suppression_config import Settings
from target_clusterer import SprayTarget, TargetClusterer, select_primary_target
from thermal_detector import HotSpot, HotspotDetector, is_valid_temperature_grid

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FrameResult:
    hotspots: Tuple[HotSpot, ...]
    targets: Tuple[SprayTarget, ...]
    angles: Optional[GimbalAngles]

    @property
    def primary_target(self) -> Optional[SprayTarget]:
        return select_primary_target(self.targets)


EMPTY_RESULT = FrameResult(hotspots=(), targets=(), angles=None)


def process_frame(grid: np.ndarray, settings: Settings,
                  current_azimuth: float = 0.0, current_pitch: float = 0.0) -> FrameResult:
    """
    Run every stage on one temperature grid.

    Nothing is cached between calls, so the same grid and settings always
    produce the same result.

    Args:
        grid: Temperature grid in degrees Celsius.
        settings: Full configuration.
        current_azimuth: Gimbal azimuth reported before this frame (degrees).
        current_pitch: Gimbal pitch reported before this frame (degrees).

    Returns:
        FrameResult; angles is None when no target was found.
    """
    if not is_valid_temperature_grid(grid):
        logger.warning("Temperature grid is empty, not 2-D, not floating point or not finite")
        return EMPTY_RESULT

    detector = HotspotDetector(settings.detection, settings.camera.intrinsics.as_matrix())
    clusterer = TargetClusterer(settings.detection.max_grouping_distance_meters)
    solver = GimbalAimSolver(settings.camera, settings.gimbal)

    hotspots = detector.detect(grid)
    targets = clusterer.cluster(hotspots)

    primary = select_primary_target(targets)
    if primary is None:
        return FrameResult(hotspots=tuple(hotspots), targets=(), angles=None)

    angles = solver.solve(primary.final_pixel_aim_point, grid.shape,
                          current_azimuth, current_pitch)
    return FrameResult(hotspots=tuple(hotspots), targets=tuple(targets), angles=angles)
