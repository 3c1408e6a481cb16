"""
Gradio capture client for the Staff Face Check service.

Kiosk-style UI: the capture screen takes a still from the front camera and
submits it; the verdict switches to the success or failure screen, each of
which has one button back to capture.

Run with: python -m frontend.app_gradio
"""

import logging
from typing import List

import cv2
import gradio as gr

from core.config import get_camera_config, get_client_config, get_frontend_config
from frontend.api_client import DEFAULT_ENDPOINT_URL, MatchClient
from frontend.capture_controller import (
    NO_CAMERA_MESSAGE,
    CaptureController,
    PermissionState,
)
from frontend.components.result_screens import FAILURE_SCREEN, SUCCESS_SCREEN
from frontend.components.webcam_capture import CaptureConfig, WebcamCapture
from frontend.router import Screen

logger = logging.getLogger(__name__)

READY_MESSAGE = "Look at the camera and press **Capture**."
PROCESSING_MESSAGE = "Processing..."

# Order matters: matches the view columns built in create_demo()
SCREEN_ORDER = (Screen.CAPTURE, Screen.AUTH_SUCCESS, Screen.AUTH_FAILURE)


def build_controller() -> CaptureController:
    """Wire camera and match client from config.yaml."""
    camera_config = get_camera_config()
    client_config = get_client_config()

    camera = WebcamCapture(CaptureConfig(
        width=int(camera_config.get("width", 640)),
        height=int(camera_config.get("height", 480)),
        device_id=int(camera_config.get("device_id", 0)),
    ))
    client = MatchClient(
        endpoint_url=client_config.get("endpoint_url") or DEFAULT_ENDPOINT_URL,
        timeout_sec=float(client_config.get("timeout_sec", 30.0)),
    )
    logger.info(f"Match endpoint: {client.endpoint_url}")
    return CaptureController(camera, client)


def screen_visibility(screen: Screen) -> List[dict]:
    """Visibility updates for the three view columns."""
    return [gr.update(visible=(s is screen)) for s in SCREEN_ORDER]


def create_demo(controller: CaptureController) -> gr.Blocks:
    """Create the Gradio interface around a capture controller."""

    # Asked once, when the UI is built
    permission = controller.request_permission()

    with gr.Blocks(title="Staff Face Check") as demo:
        gr.Markdown("# Staff Face Check")

        if permission is not PermissionState.GRANTED:
            gr.Markdown(NO_CAMERA_MESSAGE)
        else:
            # ==================== CAPTURE ====================
            with gr.Column(visible=True) as capture_view:
                preview = gr.Image(label="Last Capture", interactive=False)
                capture_status = gr.Markdown(READY_MESSAGE)
                capture_btn = gr.Button("Capture", variant="primary")

            # ==================== RESULTS ====================
            with gr.Column(visible=False) as success_view:
                gr.HTML(SUCCESS_SCREEN.to_html())
                success_btn = gr.Button(SUCCESS_SCREEN.action_label)

            with gr.Column(visible=False) as failure_view:
                gr.HTML(FAILURE_SCREEN.to_html())
                failure_btn = gr.Button(FAILURE_SCREEN.action_label)

            views = [capture_view, success_view, failure_view]

            def begin_capture():
                return gr.update(interactive=False), PROCESSING_MESSAGE

            def run_capture():
                screen = controller.capture_and_submit()
                frame = controller.last_frame
                image = cv2.cvtColor(frame.image, cv2.COLOR_BGR2RGB) if frame is not None else None
                return [*screen_visibility(screen), image]

            def end_capture():
                return gr.update(interactive=not controller.is_busy), READY_MESSAGE

            def go_back():
                return screen_visibility(controller.go_back())

            capture_btn.click(
                fn=begin_capture,
                inputs=[],
                outputs=[capture_btn, capture_status],
            ).then(
                fn=run_capture,
                inputs=[],
                outputs=[*views, preview],
            ).then(
                fn=end_capture,
                inputs=[],
                outputs=[capture_btn, capture_status],
            )

            success_btn.click(fn=go_back, inputs=[], outputs=views)
            failure_btn.click(fn=go_back, inputs=[], outputs=views)

    return demo


# ============================================================
# Entry Point
# ============================================================

if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    frontend_config = get_frontend_config()
    demo = create_demo(build_controller())
    demo.launch(
        server_name=frontend_config.get("server_name", "0.0.0.0"),
        server_port=int(frontend_config.get("server_port", 7860)),
        show_error=True,
    )
