"""
Screen router for the Staff Face Check capture client.

Navigation is a small finite-state machine: a Screen enum, a NavEvent enum
and a transition table. It holds no UI objects, so the whole flow can be
driven and tested without rendering anything.
"""

import logging
from enum import Enum
from typing import Dict, Optional, Tuple

from frontend.api_client import Authenticated, MatchOutcome

logger = logging.getLogger(__name__)


class Screen(Enum):
    """Screens of the capture client."""
    CAPTURE = "capture"
    AUTH_SUCCESS = "auth_success"
    AUTH_FAILURE = "auth_failure"


class NavEvent(Enum):
    """Things that move the client between screens."""
    AUTHENTICATED = "authenticated"
    REJECTED = "rejected"
    GO_BACK = "go_back"


class InvalidTransitionError(ValueError):
    """Raised when an event is not allowed on the current screen."""


TRANSITIONS: Dict[Tuple[Screen, NavEvent], Screen] = {
    (Screen.CAPTURE, NavEvent.AUTHENTICATED): Screen.AUTH_SUCCESS,
    (Screen.CAPTURE, NavEvent.REJECTED): Screen.AUTH_FAILURE,
    (Screen.AUTH_SUCCESS, NavEvent.GO_BACK): Screen.CAPTURE,
    (Screen.AUTH_FAILURE, NavEvent.GO_BACK): Screen.CAPTURE,
}

INITIAL_SCREEN = Screen.CAPTURE


def transition(screen: Screen, event: NavEvent) -> Screen:
    """
    Return the screen reached by applying event on screen.

    Raises:
        InvalidTransitionError: If the pair is not in TRANSITIONS.
    """
    try:
        return TRANSITIONS[(screen, event)]
    except KeyError:
        raise InvalidTransitionError(
            f"No transition from {screen.value} on {event.value}"
        ) from None


def event_for_outcome(outcome: Optional[MatchOutcome]) -> NavEvent:
    """
    Map an authentication outcome to a navigation event.

    Only a positive verdict authenticates; an explicit rejection, a failed
    request or no outcome at all (capture failed) are all REJECTED.
    """
    if isinstance(outcome, Authenticated):
        return NavEvent.AUTHENTICATED
    return NavEvent.REJECTED


class Router:
    """Holds the current screen and applies transitions to it."""

    def __init__(self, initial: Screen = INITIAL_SCREEN):
        self._current = initial

    @property
    def current(self) -> Screen:
        return self._current

    def dispatch(self, event: NavEvent) -> Screen:
        """Apply event to the current screen and return the new screen."""
        new_screen = transition(self._current, event)
        logger.info(f"Navigate {self._current.value} -> {new_screen.value} ({event.value})")
        self._current = new_screen
        return new_screen

    def reset(self) -> None:
        """Return to the initial screen unconditionally."""
        self._current = INITIAL_SCREEN
