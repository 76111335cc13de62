"""
Tests for Display Host, Render Surface and Status Panel
========================================================
"""

import asyncio
from unittest.mock import patch

import numpy as np
import pytest

from handstate.core.types import HandState
from handstate.ui.host import KEY_SPACE, DisplayHost
from handstate.ui.status import ENABLE_LABEL, StatusPanel
from handstate.ui.surface import RenderSurface, VisualizerConfig

from helpers import fist, open_hand


class TestDisplayHost:

    def test_callbacks_run_once(self):
        host = DisplayHost()
        calls = []
        host.request_animation_frame(lambda: calls.append(1))

        assert host.run_animation_frames() == 1
        assert host.run_animation_frames() == 0
        assert calls == [1]

    def test_callback_requested_during_refresh_runs_next_refresh(self):
        host = DisplayHost()
        calls = []

        def tick():
            calls.append(len(calls))
            host.request_animation_frame(tick)

        host.request_animation_frame(tick)
        host.run_animation_frames()
        assert calls == [0]
        host.run_animation_frames()
        assert calls == [0, 1]

    def test_cancel(self):
        host = DisplayHost()
        calls = []
        handle = host.request_animation_frame(lambda: calls.append(1))

        host.cancel_animation_frame(handle)
        host.cancel_animation_frame(None)

        assert host.run_animation_frames() == 0
        assert calls == []

    def test_failing_callback_does_not_break_refresh(self):
        host = DisplayHost()
        calls = []

        def broken():
            raise RuntimeError("boom")

        host.request_animation_frame(broken)
        host.request_animation_frame(lambda: calls.append(1))

        assert host.run_animation_frames() == 2
        assert calls == [1]

    def test_dispatch_plain_key_handler(self):
        host = DisplayHost()
        pressed = []
        host.bind_key([KEY_SPACE], lambda: pressed.append(KEY_SPACE))

        assert host.dispatch_key(KEY_SPACE)
        assert not host.dispatch_key(ord("x"))
        assert pressed == [KEY_SPACE]

    def test_dispatch_coroutine_key_handler(self):
        host = DisplayHost()
        pressed = []

        async def handler():
            pressed.append(True)

        host.bind_key([KEY_SPACE], handler)

        async def scenario():
            host.dispatch_key(KEY_SPACE)
            await asyncio.sleep(0.01)

        asyncio.run(scenario())
        assert pressed == [True]

    def test_run_loop_until_stopped(self):
        host = DisplayHost(refresh_hz=200)
        frames = []

        def tick():
            frames.append(1)
            if len(frames) >= 3:
                host.stop()
            else:
                host.request_animation_frame(tick)

        host.request_animation_frame(tick)

        with patch("handstate.ui.host.cv2") as mock_cv2:
            mock_cv2.waitKey.return_value = 0xFF
            asyncio.run(host.run(lambda: np.zeros((4, 4, 3), dtype=np.uint8)))

        assert len(frames) == 3
        assert mock_cv2.imshow.call_count == 3
        mock_cv2.destroyAllWindows.assert_called_once()
        assert not host.running


class TestRenderSurface:

    def test_resize_and_clear(self):
        surface = RenderSurface()
        surface.resize(32, 24)
        backdrop = np.full((24, 32, 3), 7, dtype=np.uint8)

        surface.clear(backdrop)
        assert surface.canvas.shape == (24, 32, 3)
        assert int(surface.canvas[0, 0, 0]) == 7

        surface.clear()
        assert not surface.canvas.any()

    def test_draw_hands_marks_canvas(self):
        surface = RenderSurface()
        surface.resize(200, 200)
        surface.clear()

        surface.draw_hands([open_hand(), fist()])

        assert surface.canvas.any()

    def test_draw_without_canvas_is_noop(self):
        surface = RenderSurface()
        surface.draw_hands([open_hand()])
        assert surface.canvas is None

    def test_detach_drops_canvas(self):
        surface = RenderSurface()
        surface.attach(object())
        surface.resize(10, 10)

        surface.detach()

        assert not surface.attached
        assert surface.canvas is None

    def test_render_placeholder_with_status(self):
        config = VisualizerConfig(placeholder_width=320, placeholder_height=240)
        surface = RenderSurface(config)

        image = surface.render(StatusPanel())

        assert image.shape == (240, 320, 3)
        assert image.any()

    def test_config_from_dict(self):
        config = VisualizerConfig.from_dict({
            "connection_width": 3,
            "colors": {"landmarks": [255, 0, 0]},
        })

        assert config.connection_width == 3
        assert config.landmark_color == (255, 0, 0)
        assert config.connection_color == (0, 255, 0)


class TestStatusPanel:

    def test_defaults(self):
        status = StatusPanel()

        assert status.hand_state == HandState.NO_HAND_DETECTED
        assert status.button_label == ENABLE_LABEL
        assert status.hand_state_text == "Hand state: No hand detected"

    def test_lines(self):
        status = StatusPanel()
        status.set_status("Webcam active.")
        status.set_hand_state(HandState.FIST)

        lines = status.lines()

        assert lines[0] == "Hand state: Fist"
        assert "Webcam active." in lines


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
