from typing import Optional, Sequence

import cv2
import numpy as np

from target_clusterer import SprayTarget
from thermal_detector import HotSpot


def render_temperature_grid(grid: np.ndarray) -> np.ndarray:
    """False-color BGR view of a temperature grid."""
    normalized = cv2.normalize(grid, None, 0, 255, cv2.NORM_MINMAX).astype(np.uint8)
    return cv2.applyColorMap(normalized, cv2.COLORMAP_JET)


def draw_results(image: np.ndarray, hotspots: Sequence[HotSpot],
                 targets: Sequence[SprayTarget],
                 grid: Optional[np.ndarray] = None,
                 threshold: Optional[float] = None) -> np.ndarray:
    """
    Draw hotspot contours and ranked aim points on a copy of the frame.

    When grid and threshold are given, the outlines of the raw thresholded
    regions (before opening/closing) are drawn in white as well, so the
    regions removed by the mask cleanup stay visible.
    """
    result = image.copy()
    by_id = {spot.id: spot for spot in hotspots}

    for spot in hotspots:
        cv2.drawContours(result, [spot.contour], -1, (0, 255, 0), 1)
        cx, cy = spot.pixel_centroid
        cv2.circle(result, (int(round(cx)), int(round(cy))), 3, (0, 0, 255), -1)

    if grid is not None and threshold is not None:
        raw_mask = np.where(grid >= threshold, 255, 0).astype(np.uint8)
        raw_contours, _ = cv2.findContours(raw_mask, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)
        cv2.drawContours(result, raw_contours, -1, (255, 255, 255), 1)

    for rank, target in enumerate(targets, start=1):
        ax, ay = target.final_pixel_aim_point
        aim = (int(round(ax)), int(round(ay)))
        cv2.circle(result, aim, 8, (255, 0, 255), 2)
        cv2.putText(result, f"T{rank}", (aim[0] + 10, aim[1]),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.6, (255, 255, 0), 2)

        for spot_id in target.source_hotspot_ids:
            spot = by_id.get(spot_id)
            if spot is None:
                continue
            x, y, w, h = cv2.boundingRect(spot.contour)
            cv2.rectangle(result, (x, y), (x + w, y + h), (0, 0, 0), 1)

    return result
