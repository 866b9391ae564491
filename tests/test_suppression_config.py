"""Tests for YAML config loading and default fallback."""

import logging

import numpy as np
import pydantic
import pytest

from suppression_config import CameraIntrinsics, Settings, load_settings


def _write(tmp_path, text):
    path = tmp_path / "params.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults():
    settings = Settings()
    assert settings.detection.fire_temperature_threshold == 250.0
    assert settings.detection.min_hotspot_area_pixels == 30.0
    assert settings.detection.max_grouping_distance_meters == 1.0
    assert settings.detection.assumed_distance_to_fire_plane_meters == 8.0
    assert settings.camera.hfov_degrees == 60.0
    assert settings.camera.vfov_degrees == 45.0
    assert settings.gimbal.pitch_sign == 1


def test_intrinsics_matrix_layout():
    k = CameraIntrinsics(focal_length_x=400.0, focal_length_y=410.0,
                         principal_point_x=190.0, principal_point_y=140.0).as_matrix()
    np.testing.assert_array_equal(k, [[400.0, 0.0, 190.0], [0.0, 410.0, 140.0], [0.0, 0.0, 1.0]])


def test_settings_are_frozen():
    settings = Settings()
    with pytest.raises(pydantic.ValidationError):
        settings.detection.fire_temperature_threshold = 10.0


def test_no_path_uses_defaults(caplog):
    with caplog.at_level(logging.WARNING):
        assert load_settings(None) == Settings()
    assert "default" in caplog.text


def test_missing_file_uses_defaults(tmp_path, caplog):
    with caplog.at_level(logging.WARNING):
        settings = load_settings(tmp_path / "nope.yaml")
    assert settings == Settings()
    assert "not found" in caplog.text


def test_full_file_loads_without_warnings(tmp_path, caplog):
    path = _write(tmp_path, """
camera:
  intrinsics:
    focal_length_x: 450.0
    focal_length_y: 455.0
    principal_point_x: 192.0
    principal_point_y: 144.0
  hfov_degrees: 50.0
  vfov_degrees: 38.0
detection:
  fire_temperature_threshold: 180.0
  min_hotspot_area_pixels: 25
  max_grouping_distance_meters: 0.8
  assumed_distance_to_fire_plane_meters: 6.0
gimbal:
  nozzle_offset_azimuth_degrees: 1.2
  nozzle_offset_pitch_degrees: -0.7
  pitch_sign: -1
source:
  identifier: rtsp://10.0.0.2/stream
  min_temp: -20.0
  max_temp: 150.0
  image_width: 640
  image_height: 512
""")
    with caplog.at_level(logging.WARNING):
        settings = load_settings(path)

    assert caplog.records == []
    assert settings.camera.intrinsics.focal_length_x == 450.0
    assert settings.detection.fire_temperature_threshold == 180.0
    assert settings.gimbal.pitch_sign == -1
    assert settings.source.identifier == "rtsp://10.0.0.2/stream"


def test_partial_file_warns_per_missing_value(tmp_path, caplog):
    path = _write(tmp_path, """
detection:
  fire_temperature_threshold: 200.0
""")
    with caplog.at_level(logging.WARNING):
        settings = load_settings(path)

    assert settings.detection.fire_temperature_threshold == 200.0
    assert settings.detection.min_hotspot_area_pixels == 30.0
    assert settings.camera == Settings().camera
    assert "'detection.min_hotspot_area_pixels'" in caplog.text
    assert "'camera'" in caplog.text
    assert "'detection.fire_temperature_threshold'" not in caplog.text


def test_invalid_value_falls_back_to_defaults(tmp_path, caplog):
    path = _write(tmp_path, """
gimbal:
  pitch_sign: 3
""")
    with caplog.at_level(logging.WARNING):
        settings = load_settings(path)
    assert settings == Settings()
    assert "Invalid config" in caplog.text


@pytest.mark.parametrize("text", ["camera: [1, 2\n", "- just\n- a list\n"])
def test_unusable_yaml_falls_back_to_defaults(tmp_path, text):
    assert load_settings(_write(tmp_path, text)) == Settings()


def test_empty_file_uses_defaults(tmp_path):
    assert load_settings(_write(tmp_path, "")) == Settings()


def test_shipped_config_matches_defaults():
    from pathlib import Path
    path = Path(__file__).parent.parent / "config" / "params.yaml"
    assert load_settings(path) == Settings()
