"""
Frontend UI components for the Staff Face Check capture client.
"""

from .webcam_capture import WebcamCapture, CaptureConfig, CapturedFrame
from .result_screens import ResultScreen, SUCCESS_SCREEN, FAILURE_SCREEN, RESULT_SCREENS

__all__ = [
    "WebcamCapture", "CaptureConfig", "CapturedFrame",
    "ResultScreen", "SUCCESS_SCREEN", "FAILURE_SCREEN", "RESULT_SCREENS",
]
