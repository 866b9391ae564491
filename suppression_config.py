"""
Pydantic models for validating the fire suppression YAML config file.
"""
import logging
from pathlib import Path
from typing import Any, Dict, Literal, Optional, Type, Union

import numpy as np
import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True)

# --- Camera ---

class CameraIntrinsics(_FrozenModel):
    focal_length_x: float = 500.0
    focal_length_y: float = 500.0
    principal_point_x: float = 320.0
    principal_point_y: float = 240.0

    def as_matrix(self) -> np.ndarray:
        """3x3 camera matrix in OpenCV layout."""
        return np.array([
            [self.focal_length_x, 0.0, self.principal_point_x],
            [0.0, self.focal_length_y, self.principal_point_y],
            [0.0, 0.0, 1.0],
        ], dtype=np.float64)

class CameraConfig(_FrozenModel):
    intrinsics: CameraIntrinsics = Field(default_factory=CameraIntrinsics)
    hfov_degrees: float = 60.0
    vfov_degrees: float = 45.0

# --- Detection ---

class DetectionConfig(_FrozenModel):
    fire_temperature_threshold: float = 250.0
    min_hotspot_area_pixels: float = 30.0
    max_grouping_distance_meters: float = 1.0
    # Strong assumption: every hotspot lies on one plane at this distance
    assumed_distance_to_fire_plane_meters: float = 8.0

# --- Gimbal / nozzle ---

class GimbalConfig(_FrozenModel):
    nozzle_offset_azimuth_degrees: float = 0.0
    nozzle_offset_pitch_degrees: float = 0.0
    # +1: pixel rows increasing downwards raise the pitch command, -1 inverts it
    pitch_sign: Literal[1, -1] = 1

# --- Frame source ---

class SourceConfig(_FrozenModel):
    identifier: str = "0"
    min_temp: float = 0.0
    max_temp: float = 550.0
    image_width: int = 384
    image_height: int = 288

# --- Top-Level Settings Model ---

class Settings(_FrozenModel):
    """The root model for the whole config file."""
    camera: CameraConfig = Field(default_factory=CameraConfig)
    detection: DetectionConfig = Field(default_factory=DetectionConfig)
    gimbal: GimbalConfig = Field(default_factory=GimbalConfig)
    source: SourceConfig = Field(default_factory=SourceConfig)


def _warn_missing(model: Type[BaseModel], data: Dict[str, Any], prefix: str = "") -> None:
    """Log one warning per field absent from the raw config mapping."""
    for name, info in model.model_fields.items():
        key = f"{prefix}{name}"
        if name not in data:
            logger.warning("Config value '%s' not found, using default", key)
            continue
        sub_model = info.annotation
        if isinstance(sub_model, type) and issubclass(sub_model, BaseModel):
            if isinstance(data[name], dict):
                _warn_missing(sub_model, data[name], prefix=f"{key}.")


def load_settings(config_path: Optional[Union[str, Path]] = None) -> Settings:
    """
    Load and validate the configuration file.

    Missing files, malformed YAML and invalid values never raise: a warning
    is logged and the hardcoded defaults are used instead.
    """
    if config_path is None:
        logger.warning("No config file given, using default parameters")
        return Settings()

    config_file = Path(config_path)
    try:
        with open(config_file, "r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f)
    except FileNotFoundError:
        logger.warning("Config file not found at %s, using default parameters", config_file)
        return Settings()
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Could not read config file %s (%s), using default parameters", config_file, e)
        return Settings()

    if config_data is None:
        config_data = {}
    if not isinstance(config_data, dict):
        logger.warning("Config file %s is not a mapping, using default parameters", config_file)
        return Settings()

    _warn_missing(Settings, config_data)

    try:
        settings = Settings(**config_data)
    except ValidationError as e:
        logger.warning("Invalid config file %s, using default parameters:\n%s", config_file, e)
        return Settings()

    logger.info("Parameters loaded from %s", config_file)
    return settings
