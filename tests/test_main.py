"""
Tests for Application Wiring and CLI
=====================================
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from handstate.config import create_app_config
from handstate.core.types import SessionState
from handstate.main import HandStateApp, main
from handstate.ui.host import KEY_ESC, KEY_SPACE

from helpers import FakeMediaSource


@pytest.fixture
def app():
    return HandStateApp(create_app_config({}))


class TestHandStateApp:

    def test_model_ready_status(self, app):
        app.lifecycle.initialize = AsyncMock(return_value=MagicMock())

        asyncio.run(app.load_model())

        assert app.status.status == "Hand model ready. Press SPACE to enable webcam."

    def test_model_failed_status(self, app):
        app.lifecycle.initialize = AsyncMock(return_value=None)

        asyncio.run(app.load_model())

        assert app.status.status.startswith("Hand model failed to load.")

    def test_quit_keys_stop_host(self, app):
        app.host._running = True

        assert app.host.dispatch_key(KEY_ESC)
        assert not app.host.running

    def test_space_toggles_session(self):
        with patch("handstate.main.SessionController.toggle", new_callable=AsyncMock) as toggle:
            app = HandStateApp(create_app_config({}))

        async def scenario():
            assert app.host.dispatch_key(KEY_SPACE)
            await asyncio.sleep(0)

        asyncio.run(scenario())
        toggle.assert_awaited_once()

    def test_quit_while_requesting_releases_stream(self, app):
        app.lifecycle.initialize = AsyncMock(return_value=None)
        states = []

        async def run_until_quit(present):
            gate = asyncio.Event()
            app.session.media_source = FakeMediaSource(gate=gate)
            app.host.dispatch_key(KEY_SPACE)
            await asyncio.sleep(0)
            states.append(app.session.state)
            app.request_quit()
            asyncio.get_running_loop().call_soon(gate.set)

        app.host.run = run_until_quit
        asyncio.run(app.run())

        stream = app.session.media_source.streams[0]
        assert states == [SessionState.REQUESTING]
        assert [t.stop_count for t in stream.tracks] == [1, 1]
        assert app.session.stream is None
        assert app.session.state == SessionState.STOPPED

    def test_shutdown_closes_detector(self, app):
        capability = MagicMock()
        app.lifecycle.handle = MagicMock(capability=capability)

        app.shutdown()

        capability.close.assert_called_once()
        assert app.lifecycle.handle is None


class TestMain:

    def test_default_config_read_from_working_directory(self, tmp_path, monkeypatch):
        (tmp_path / "config").mkdir()
        (tmp_path / "config" / "config.yaml").write_text("camera:\n  device_id: 5\n")
        monkeypatch.chdir(tmp_path)

        with patch("handstate.main.HandStateApp") as app_cls, \
                patch("handstate.main.asyncio.run"), \
                patch("handstate.main.setup_logging"):
            main([])

        assert app_cls.call_args[0][0].camera.device_id == 5

    def test_cli_overrides(self, tmp_path):
        with patch("handstate.main.HandStateApp") as app_cls, \
                patch("handstate.main.asyncio.run") as run, \
                patch("handstate.main.setup_logging") as setup_logging:
            main([
                "--config", str(tmp_path / "missing.yaml"),
                "--camera", "2",
                "--model", "custom.task",
                "--debug",
            ])

        config = app_cls.call_args[0][0]
        assert config.camera.device_id == 2
        assert config.mediapipe.model_path == "custom.task"
        assert setup_logging.call_args.kwargs["level"] == "DEBUG"
        run.assert_called_once()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
