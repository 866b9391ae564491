from typing import Iterable, Tuple

import numpy as np
import pytest

from suppression_config import Settings

AMBIENT_TEMP = 20.0
GRID_SHAPE = (480, 640)


def make_grid(disks: Iterable[Tuple[int, int, int, float]] = (),
              shape: Tuple[int, int] = GRID_SHAPE) -> np.ndarray:
    """Cold float32 grid with hot disks given as (cx, cy, radius, temperature)."""
    grid = np.full(shape, AMBIENT_TEMP, dtype=np.float32)
    yy, xx = np.ogrid[:shape[0], :shape[1]]
    for cx, cy, r, temp in disks:
        grid[(xx - cx) ** 2 + (yy - cy) ** 2 <= r ** 2] = temp
    return grid


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def camera_matrix(settings: Settings) -> np.ndarray:
    return settings.camera.intrinsics.as_matrix()
