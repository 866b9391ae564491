"""
Thermal frame sources: live camera / RTSP stream and still thermal images.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional, Tuple

import cv2
import numpy as np

logger = logging.getLogger(__name__)

# Placeholder radiometry: linear 8-bit to Celsius until the vendor SDK is wired in
DEFAULT_MIN_TEMP = 0.0
DEFAULT_MAX_TEMP = 550.0
DEFAULT_IMAGE_SIZE = (384, 288)


def convert_to_temperature(frame: Optional[np.ndarray],
                           min_temp: float = DEFAULT_MIN_TEMP,
                           max_temp: float = DEFAULT_MAX_TEMP) -> Optional[np.ndarray]:
    """Map an 8-bit gray or BGR frame linearly onto [min_temp, max_temp] (float32)."""
    if frame is None or frame.size == 0:
        return None

    if len(frame.shape) == 3:
        gray = cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)
    else:
        gray = frame

    scale = (max_temp - min_temp) / 255.0
    return gray.astype(np.float32) * np.float32(scale) + np.float32(min_temp)


class FrameSource(ABC):
    """Abstract source of temperature grids."""

    @abstractmethod
    def open(self, identifier: Optional[str] = None) -> bool:
        """Open the source"""
        pass

    @abstractmethod
    def is_open(self) -> bool:
        pass

    @abstractmethod
    def read_frame(self) -> Tuple[Optional[np.ndarray], bool]:
        """Read the next temperature grid"""
        pass

    @abstractmethod
    def close(self) -> bool:
        pass


class ThermalCameraStream(FrameSource):
    """Reads frames from a camera index or an RTSP/URL stream."""

    def __init__(self, identifier: str = "0",
                 min_temp: float = DEFAULT_MIN_TEMP, max_temp: float = DEFAULT_MAX_TEMP):
        self._identifier = identifier
        self._min_temp = min_temp
        self._max_temp = max_temp
        self._cap: Optional[cv2.VideoCapture] = None

    def open(self, identifier: Optional[str] = None) -> bool:
        """Open a device index (digit string) or a stream URL."""
        if identifier is not None:
            self._identifier = identifier

        target = int(self._identifier) if self._identifier.isdigit() else self._identifier
        logger.info("Opening thermal camera %s...", self._identifier)
        self._cap = cv2.VideoCapture(target)
        if not self._cap.isOpened():
            logger.error("Failed to open thermal camera %s", self._identifier)
            self._cap = None
            return False
        return True

    def is_open(self) -> bool:
        return self._cap is not None and self._cap.isOpened()

    def read_frame(self) -> Tuple[Optional[np.ndarray], bool]:
        if not self.is_open():
            logger.error("Camera not opened!")
            return None, False

        ok, frame = self._cap.read()
        if not ok or frame is None or frame.size == 0:
            logger.error("Failed to capture frame.")
            return None, False

        return convert_to_temperature(frame, self._min_temp, self._max_temp), True

    def close(self) -> bool:
        if self._cap is not None:
            self._cap.release()
        self._cap = None
        logger.info("Thermal camera closed.")
        return True


class ThermalImageSource(FrameSource):
    """Serves the same grayscale thermal image as every frame."""

    def __init__(self, image_path: str,
                 min_temp: float = DEFAULT_MIN_TEMP, max_temp: float = DEFAULT_MAX_TEMP,
                 target_size: Tuple[int, int] = DEFAULT_IMAGE_SIZE):
        self._image_path = image_path
        self._min_temp = min_temp
        self._max_temp = max_temp
        self._target_size = target_size
        self._opened = False

    @property
    def image_path(self) -> str:
        return self._image_path

    def open(self, identifier: Optional[str] = None) -> bool:
        if identifier is not None:
            self._image_path = identifier
        self._opened = True
        return True

    def is_open(self) -> bool:
        return self._opened

    def read_frame(self) -> Tuple[Optional[np.ndarray], bool]:
        if not self._opened:
            logger.error("Image source not opened!")
            return None, False

        gray = cv2.imread(self._image_path, cv2.IMREAD_GRAYSCALE)
        if gray is None:
            logger.error("Could not load image from %s", self._image_path)
            return None, False

        resized = cv2.resize(gray, self._target_size, interpolation=cv2.INTER_LINEAR)
        return convert_to_temperature(resized, self._min_temp, self._max_temp), True

    def close(self) -> bool:
        self._opened = False
        return True
