"""
Thermal Hotspot Detection Module
Segments a temperature grid into fire regions and describes each region.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import cv2
import numpy as np

from suppression_config import DetectionConfig

logger = logging.getLogger(__name__)

MORPH_KERNEL_SIZE = (5, 5)


@dataclass(frozen=True)
class HotSpot:
    """A single above-threshold region in one frame."""
    id: int
    pixel_centroid: Tuple[float, float]
    world_position_approx: Tuple[float, float, float]
    pixel_area: float
    max_temperature: float
    contour: np.ndarray = field(compare=False, repr=False)


def is_valid_temperature_grid(grid: Optional[np.ndarray]) -> bool:
    """True for a non-empty, single-channel, finite floating-point grid."""
    if not isinstance(grid, np.ndarray):
        return False
    if grid.ndim != 2 or grid.size == 0:
        return False
    if not np.issubdtype(grid.dtype, np.floating):
        return False
    return bool(np.isfinite(grid).all())


def segment_temperature_grid(grid: np.ndarray, fire_temperature_threshold: float) -> np.ndarray:
    """
    Threshold the grid and clean the mask with one opening and one closing.

    Args:
        grid: Temperature grid in degrees Celsius.
        fire_temperature_threshold: Cells at or above this are foreground.

    Returns:
        uint8 mask (0 or 255) of the grid's shape, or an empty (0, 0) mask
        when the grid is invalid.
    """
    if not is_valid_temperature_grid(grid):
        return np.zeros((0, 0), dtype=np.uint8)

    mask = np.where(grid >= fire_temperature_threshold, 255, 0).astype(np.uint8)

    kernel = cv2.getStructuringElement(cv2.MORPH_ELLIPSE, MORPH_KERNEL_SIZE)
    mask = cv2.morphologyEx(mask, cv2.MORPH_OPEN, kernel)
    mask = cv2.morphologyEx(mask, cv2.MORPH_CLOSE, kernel)
    return mask


def _is_empty_matrix(camera_matrix: Optional[np.ndarray]) -> bool:
    return camera_matrix is None or np.asarray(camera_matrix).size == 0


def pixel_to_approx_world(pixel: Tuple[float, float],
                          camera_matrix: Optional[np.ndarray],
                          distance_to_plane: float) -> Tuple[float, float, float]:
    """
    Back-project a pixel onto a plane at a fixed distance (pinhole model).

    An empty or non-3x3 matrix or a zero focal length gives (px, py, 0.0);
    the zero Z marks the position as unusable for distance comparisons.
    """
    px, py = float(pixel[0]), float(pixel[1])
    if _is_empty_matrix(camera_matrix):
        return (px, py, 0.0)

    k = np.asarray(camera_matrix, dtype=np.float64)
    if k.shape != (3, 3):
        return (px, py, 0.0)
    fx, fy = k[0, 0], k[1, 1]
    cx, cy = k[0, 2], k[1, 2]
    if fx == 0 or fy == 0:
        return (px, py, 0.0)

    d = float(distance_to_plane)
    x = (px - cx) * d / fx
    y = (py - cy) * d / fy
    return (float(x), float(y), d)


def _max_temperature_inside(grid: np.ndarray, contour: np.ndarray) -> float:
    """Peak temperature among the cells covered by the filled contour."""
    x, y, w, h = cv2.boundingRect(contour)
    roi_mask = np.zeros((h, w), dtype=np.uint8)
    cv2.drawContours(roi_mask, [contour], -1, 255, cv2.FILLED, offset=(-x, -y))

    roi = grid[y:y + h, x:x + w]
    return float(np.max(roi[roi_mask > 0]))


def extract_hotspots(grid: np.ndarray,
                     mask: np.ndarray,
                     camera_matrix: Optional[np.ndarray],
                     assumed_distance_to_plane: float,
                     min_area_pixels: float) -> List[HotSpot]:
    """
    Describe every external region of the mask as a HotSpot.

    Args:
        grid: Temperature grid the mask was built from.
        mask: uint8 foreground mask of the same shape.
        camera_matrix: 3x3 intrinsics matrix; None, empty or non-3x3 gives no hotspots.
        assumed_distance_to_plane: Distance (m) used for back-projection.
        min_area_pixels: Regions smaller than this are dropped.

    Returns:
        HotSpots with ids 0..n-1 in contour discovery order.
    """
    if not is_valid_temperature_grid(grid):
        return []
    if not isinstance(mask, np.ndarray) or mask.dtype != np.uint8 or mask.shape != grid.shape:
        logger.debug("Mask is not a uint8 mask of the grid shape, no hotspots extracted")
        return []
    if _is_empty_matrix(camera_matrix) or np.asarray(camera_matrix).shape != (3, 3):
        logger.debug("Camera matrix is empty or not 3x3, no hotspots extracted")
        return []

    contours, _ = cv2.findContours(mask, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)

    hotspots = []
    for contour in contours:
        area = cv2.contourArea(contour)
        if area < min_area_pixels:
            continue

        moments = cv2.moments(contour)
        if moments["m00"] == 0:
            continue
        centroid = (moments["m10"] / moments["m00"], moments["m01"] / moments["m00"])

        hotspots.append(HotSpot(
            id=len(hotspots),
            pixel_centroid=centroid,
            world_position_approx=pixel_to_approx_world(
                centroid, camera_matrix, assumed_distance_to_plane),
            pixel_area=float(area),
            max_temperature=_max_temperature_inside(grid, contour),
            contour=contour,
        ))

    logger.debug("Extracted %d hotspots from %d contours", len(hotspots), len(contours))
    return hotspots


def detect_hotspots(grid: np.ndarray,
                    fire_temperature_threshold: float,
                    camera_matrix: Optional[np.ndarray],
                    assumed_distance_to_plane: float,
                    min_area_pixels: float) -> List[HotSpot]:
    """Segment the grid and extract its hotspots in one call."""
    mask = segment_temperature_grid(grid, fire_temperature_threshold)
    if mask.size == 0:
        return []
    return extract_hotspots(grid, mask, camera_matrix,
                            assumed_distance_to_plane, min_area_pixels)


class HotspotDetector:
    """Detects fire hotspots in temperature grids with fixed settings."""

    def __init__(self, config: DetectionConfig, camera_matrix: Optional[np.ndarray]):
        self._config = config
        self._camera_matrix = camera_matrix

    def detect(self, grid: np.ndarray) -> List[HotSpot]:
        """
        Detect hotspots above the configured fire temperature.

        Args:
            grid: Temperature grid in degrees Celsius.

        Returns:
            List of HotSpot objects
        """
        return detect_hotspots(
            grid,
            self._config.fire_temperature_threshold,
            self._camera_matrix,
            self._config.assumed_distance_to_fire_plane_meters,
            self._config.min_hotspot_area_pixels,
        )
