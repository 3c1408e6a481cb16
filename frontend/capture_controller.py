"""
Capture controller for the Staff Face Check capture client.

Drives one authentication attempt end to end: camera permission, still
capture, submission to the match endpoint and navigation to a result
screen.

States:
    permission: IDLE -> REQUESTING -> GRANTED | DENIED   (asked once)
    capture:    READY -> CAPTURING -> SUBMITTING -> READY
"""

import logging
import threading
from enum import Enum
from typing import Optional, Protocol

from frontend.api_client import (
    Authenticated,
    MatchClient,
    MatchOutcome,
    NotAuthenticated,
    RequestFailed,
)
from frontend.components.webcam_capture import CapturedFrame
from frontend.router import NavEvent, Router, Screen, event_for_outcome

logger = logging.getLogger(__name__)

NO_CAMERA_MESSAGE = "No access to camera"


class PermissionState(Enum):
    IDLE = "idle"
    REQUESTING = "requesting"
    GRANTED = "granted"
    DENIED = "denied"


class CaptureState(Enum):
    READY = "ready"
    CAPTURING = "capturing"
    SUBMITTING = "submitting"


class CameraUnavailableError(RuntimeError):
    """Capture was attempted without camera access."""


class Camera(Protocol):
    def request_permission(self) -> bool: ...

    def capture_still(self) -> Optional[CapturedFrame]: ...


class CaptureController:
    """
    Runs capture -> submit -> navigate for the capture screen.

    Only one attempt runs at a time. A tap that arrives while an attempt is
    in flight is ignored; the check and the claim happen under one lock.
    """

    def __init__(self, camera: Camera, client: MatchClient, router: Optional[Router] = None):
        self.camera = camera
        self.client = client
        self.router = router or Router()
        self.permission = PermissionState.IDLE
        self.state = CaptureState.READY
        self.last_frame: Optional[CapturedFrame] = None
        self.last_outcome: Optional[MatchOutcome] = None
        self._busy = threading.Lock()

    def request_permission(self) -> PermissionState:
        """
        Ask for camera access. Only the first call reaches the camera;
        later calls return the recorded answer.
        """
        if self.permission in (PermissionState.GRANTED, PermissionState.DENIED):
            return self.permission

        self.permission = PermissionState.REQUESTING
        granted = self.camera.request_permission()
        self.permission = PermissionState.GRANTED if granted else PermissionState.DENIED
        return self.permission

    @property
    def is_busy(self) -> bool:
        return self.state is not CaptureState.READY

    def capture_and_submit(self) -> Screen:
        """
        Take one still, submit it and navigate on the verdict.

        Returns:
            The screen shown after the attempt (unchanged if the tap was
            ignored because an attempt was already running).

        Raises:
            CameraUnavailableError: If camera access was not granted.
        """
        if self.permission is not PermissionState.GRANTED:
            raise CameraUnavailableError(NO_CAMERA_MESSAGE)

        if not self._busy.acquire(blocking=False):
            logger.warning("Capture already in progress, ignoring request")
            return self.router.current

        try:
            self.state = CaptureState.CAPTURING
            outcome: MatchOutcome
            try:
                captured = self.camera.capture_still()
            except Exception as e:
                logger.exception("Camera capture failed")
                captured = None
                outcome = RequestFailed(reason=f"Camera capture failed: {type(e).__name__}: {e}")
            else:
                if captured is None:
                    outcome = RequestFailed(reason="Camera returned no frame")
                else:
                    self.state = CaptureState.SUBMITTING
                    outcome = self.client.authenticate(captured.base64)
            self.last_frame = captured

            self.last_outcome = outcome
            self._log_outcome(outcome)
            return self.router.dispatch(event_for_outcome(outcome))
        finally:
            self.state = CaptureState.READY
            self._busy.release()

    def go_back(self) -> Screen:
        """The single action of both result screens."""
        return self.router.dispatch(NavEvent.GO_BACK)

    @staticmethod
    def _log_outcome(outcome: MatchOutcome) -> None:
        if isinstance(outcome, Authenticated):
            logger.info(f"Authenticated (staff_id={outcome.staff_id})")
        elif isinstance(outcome, NotAuthenticated):
            logger.info("Not authenticated: no matching face")
        elif isinstance(outcome, RequestFailed):
            logger.warning(f"Authentication request failed: {outcome.reason}")
