"""
Webcam capture component for the Staff Face Check capture client.

Owns the front-facing camera device: checks that it can be opened (the
camera permission) and grabs single JPEG stills for submission.
"""

import base64
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import cv2
import numpy as np

logger = logging.getLogger(__name__)


@dataclass
class CaptureConfig:
    """Configuration for webcam capture."""
    width: int = 640
    height: int = 480
    device_id: int = 0  # front-facing camera
    jpeg_quality: int = 85
    warmup_frames: int = 3  # frames discarded while exposure settles


@dataclass
class CapturedFrame:
    """A still taken for authentication."""
    image: np.ndarray  # BGR
    base64: str


class WebcamCapture:
    """
    Manages webcam access and still capture.

    This component handles:
    - Checking camera access once (permission)
    - Opening/closing the webcam device
    - Capturing a single frame and encoding it as base64 JPEG
    """

    def __init__(self, config: Optional[CaptureConfig] = None):
        self.config = config or CaptureConfig()
        self._cap: Optional[cv2.VideoCapture] = None

    def request_permission(self) -> bool:
        """
        Check that the camera device can be opened.

        The device is released again straight away.

        Returns:
            True if access is granted, False otherwise.
        """
        granted = self.open()
        self.close()
        logger.info(f"Camera {self.config.device_id} access {'granted' if granted else 'denied'}")
        return granted

    def open(self) -> bool:
        """
        Open the webcam device.

        Returns:
            True if webcam opened successfully, False otherwise.
        """
        if self._cap is not None:
            self.close()

        self._cap = cv2.VideoCapture(self.config.device_id)

        if not self._cap.isOpened():
            logger.warning(f"Failed to open camera {self.config.device_id}")
            self._cap.release()
            self._cap = None
            return False

        self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.config.width)
        self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.config.height)
        return True

    def close(self) -> None:
        """Release the webcam device."""
        if self._cap is not None:
            self._cap.release()
            self._cap = None

    def read_frame(self) -> Tuple[bool, Optional[np.ndarray]]:
        """
        Read a single frame from the webcam.

        Returns:
            Tuple of (success, frame) where frame is BGR numpy array or None.
        """
        if self._cap is None:
            return False, None

        ret, frame = self._cap.read()
        if not ret:
            return False, None

        return True, frame

    def capture_still(self) -> Optional[CapturedFrame]:
        """
        Open the camera, take one still and release the camera.

        Returns:
            CapturedFrame, or None if the camera could not deliver or encode a frame.
        """
        with self:
            if not self.is_open:
                return None

            for _ in range(self.config.warmup_frames):
                self.read_frame()

            success, frame = self.read_frame()
            if not success or frame is None:
                logger.warning("Camera returned no frame")
                return None

        try:
            encoded = self.frame_to_base64(frame, quality=self.config.jpeg_quality)
        except (cv2.error, ValueError) as e:
            logger.error(f"Could not encode captured frame: {e}")
            return None

        return CapturedFrame(image=frame, base64=encoded)

    @staticmethod
    def frame_to_base64(frame: np.ndarray, quality: int = 85) -> str:
        """
        Convert a frame to a base64-encoded JPEG string.

        Args:
            frame: BGR numpy array
            quality: JPEG quality (0-100)

        Returns:
            Base64-encoded string of the image.
        """
        success, buffer = cv2.imencode(".jpg", frame, [int(cv2.IMWRITE_JPEG_QUALITY), quality])
        if not success:
            raise ValueError("Failed to encode frame")

        return base64.b64encode(buffer).decode("utf-8")

    @property
    def is_open(self) -> bool:
        """Check if webcam is currently open."""
        return self._cap is not None and self._cap.isOpened()

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
