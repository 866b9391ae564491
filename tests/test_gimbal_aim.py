"""Tests for pixel to gimbal pose conversion."""

import pytest

from gimbal_aim import GimbalAimSolver, GimbalAngles, calculate_gimbal_angles
from suppression_config import CameraConfig, GimbalConfig

WIDTH, HEIGHT = 640, 480
HFOV, VFOV = 60.0, 45.0


def _angles(pixel, current=(10.0, -5.0), nozzle=(1.5, -0.5), **kwargs):
    params = dict(image_width=WIDTH, image_height=HEIGHT, hfov_degrees=HFOV, vfov_degrees=VFOV)
    params.update(kwargs)
    return calculate_gimbal_angles(
        pixel,
        current_azimuth_degrees=current[0],
        current_pitch_degrees=current[1],
        nozzle_offset_azimuth_degrees=nozzle[0],
        nozzle_offset_pitch_degrees=nozzle[1],
        **params,
    )


def test_center_pixel_only_applies_nozzle_offset():
    angles = _angles((WIDTH / 2, HEIGHT / 2))
    assert angles == GimbalAngles(10.0 - 1.5, -5.0 - (-0.5))


def test_right_edge_is_half_hfov():
    angles = _angles((WIDTH, HEIGHT / 2), current=(0.0, 0.0), nozzle=(0.0, 0.0))
    assert angles.target_azimuth_degrees == pytest.approx(HFOV / 2)
    assert angles.target_pitch_degrees == pytest.approx(0.0)


def test_offset_is_linear_in_pixels():
    angles = _angles((WIDTH * 0.25, HEIGHT * 0.75), current=(0.0, 0.0), nozzle=(0.0, 0.0))
    assert angles.target_azimuth_degrees == pytest.approx(-HFOV / 4)
    assert angles.target_pitch_degrees == pytest.approx(VFOV / 4)


def test_negative_pitch_sign_inverts_pitch_only():
    down = _angles((WIDTH * 0.75, HEIGHT), current=(0.0, 0.0), nozzle=(0.0, 0.0))
    inverted = _angles((WIDTH * 0.75, HEIGHT), current=(0.0, 0.0), nozzle=(0.0, 0.0), pitch_sign=-1)
    assert down.target_pitch_degrees == pytest.approx(VFOV / 2)
    assert inverted.target_pitch_degrees == pytest.approx(-VFOV / 2)
    assert inverted.target_azimuth_degrees == down.target_azimuth_degrees


def test_no_wrapping_or_clamping():
    angles = _angles((WIDTH, HEIGHT), current=(170.0, 80.0), nozzle=(0.0, 0.0))
    assert angles.target_azimuth_degrees == pytest.approx(200.0)
    assert angles.target_pitch_degrees == pytest.approx(102.5)


@pytest.mark.parametrize("overrides", [
    {"image_width": 0},
    {"image_height": -10},
    {"hfov_degrees": 0.0},
    {"vfov_degrees": -45.0},
])
def test_invalid_geometry_keeps_current_pose(overrides):
    angles = _angles((100.0, 100.0), **overrides)
    assert angles == GimbalAngles(10.0, -5.0)


def test_solver_uses_config_and_frame_shape():
    solver = GimbalAimSolver(
        CameraConfig(hfov_degrees=HFOV, vfov_degrees=VFOV),
        GimbalConfig(nozzle_offset_azimuth_degrees=2.0, nozzle_offset_pitch_degrees=1.0, pitch_sign=-1),
    )
    angles = solver.solve((WIDTH, 0.0), (HEIGHT, WIDTH), current_azimuth=5.0, current_pitch=3.0)
    assert angles.target_azimuth_degrees == pytest.approx(5.0 + HFOV / 2 - 2.0)
    assert angles.target_pitch_degrees == pytest.approx(3.0 + VFOV / 2 - 1.0)
