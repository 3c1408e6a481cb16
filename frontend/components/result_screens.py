"""
Result screens for the Staff Face Check capture client.

Two static views, one per verdict. Each shows a fixed message and has a
single action that goes back to the capture screen. The matched staff ID
is deliberately not shown.
"""

from dataclasses import dataclass
from typing import Dict

from frontend.router import NavEvent, Screen


@dataclass(frozen=True)
class ResultScreen:
    """A terminal screen with one message and one action."""
    screen: Screen
    message: str
    action_label: str
    text_color: str
    background_color: str
    action: NavEvent = NavEvent.GO_BACK

    def to_html(self) -> str:
        return (
            f'<div style="background:{self.background_color};padding:48px;'
            f'text-align:center;border-radius:8px">'
            f'<span style="font-size:24px;color:{self.text_color}">{self.message}</span>'
            f"</div>"
        )


SUCCESS_SCREEN = ResultScreen(
    screen=Screen.AUTH_SUCCESS,
    message="Welcome, AAUA Staff!",
    action_label="Go Back",
    text_color="green",
    background_color="#e0ffe0",
)

FAILURE_SCREEN = ResultScreen(
    screen=Screen.AUTH_FAILURE,
    message="Authentication Failed!",
    action_label="Try Again",
    text_color="red",
    background_color="#ffe0e0",
)

RESULT_SCREENS: Dict[Screen, ResultScreen] = {
    SUCCESS_SCREEN.screen: SUCCESS_SCREEN,
    FAILURE_SCREEN.screen: FAILURE_SCREEN,
}
