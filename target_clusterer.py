import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from thermal_detector import HotSpot

logger = logging.getLogger(__name__)

ZERO_WORLD_POINT = (0.0, 0.0, 0.0)


@dataclass(frozen=True)
class SprayTarget:
    """One or more nearby hotspots merged into a single aim point."""
    id: int
    final_pixel_aim_point: Tuple[float, float]
    final_world_aim_point_approx: Tuple[float, float, float]
    source_hotspot_ids: Tuple[int, ...]
    severity: float


def world_distance(p1: Sequence[float], p2: Sequence[float]) -> float:
    """Euclidean distance, infinite when either point has no valid projection (Z == 0)."""
    if p1[2] == 0 or p2[2] == 0:
        return math.inf
    return math.sqrt((p1[0] - p2[0]) ** 2 + (p1[1] - p2[1]) ** 2 + (p1[2] - p2[2]) ** 2)


def _build_target(target_id: int, members: List[HotSpot]) -> SprayTarget:
    n = len(members)
    sum_px = sum(h.pixel_centroid[0] for h in members)
    sum_py = sum(h.pixel_centroid[1] for h in members)
    sum_world = [sum(h.world_position_approx[k] for h in members) for k in range(3)]

    if n > 0 and sum_world[2] != 0:
        world_aim = (sum_world[0] / n, sum_world[1] / n, sum_world[2] / n)
    else:
        world_aim = ZERO_WORLD_POINT

    return SprayTarget(
        id=target_id,
        final_pixel_aim_point=(sum_px / n, sum_py / n),
        final_world_aim_point_approx=world_aim,
        source_hotspot_ids=tuple(h.id for h in members),
        severity=float(sum(h.pixel_area * h.max_temperature for h in members)),
    )


def rank_targets(targets: List[SprayTarget]) -> List[SprayTarget]:
    """Most severe first; equal severities keep ascending target id."""
    return sorted(targets, key=lambda t: (-t.severity, t.id))


def cluster_hotspots(hotspots: Sequence[HotSpot], max_grouping_distance: float) -> List[SprayTarget]:
    """
    Merge hotspots into spray targets by single-link distance to a seed.

    Each hotspot not yet owned seeds a new target and absorbs every later
    unowned hotspot strictly closer than max_grouping_distance to the seed.

    Args:
        hotspots: Hotspots of one frame.
        max_grouping_distance: World-space distance (m) below which hotspots merge.

    Returns:
        Targets sorted by descending severity.
    """
    ordered = sorted(hotspots, key=lambda h: h.id)
    owner: List[Optional[int]] = [None] * len(ordered)

    targets = []
    for i, seed in enumerate(ordered):
        if owner[i] is not None:
            continue

        target_id = len(targets)
        owner[i] = target_id
        members = [seed]

        for j in range(i + 1, len(ordered)):
            if owner[j] is not None:
                continue
            candidate = ordered[j]
            if world_distance(seed.world_position_approx, candidate.world_position_approx) < max_grouping_distance:
                owner[j] = target_id
                members.append(candidate)

        targets.append(_build_target(target_id, members))

    logger.debug("Grouped %d hotspots into %d targets", len(ordered), len(targets))
    return rank_targets(targets)


def select_primary_target(targets: Sequence[SprayTarget]) -> Optional[SprayTarget]:
    """The most severe target of a ranked list, or None."""
    return targets[0] if targets else None


class TargetClusterer:
    def __init__(self, max_grouping_distance: float = 1.0):
        self._max_grouping_distance = max_grouping_distance

    def cluster(self, hotspots: Sequence[HotSpot]) -> List[SprayTarget]:
        return cluster_hotspots(hotspots, self._max_grouping_distance)
