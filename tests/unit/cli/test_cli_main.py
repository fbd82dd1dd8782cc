"""
Tests for the subgate CLI.

The container is patched in each command module, so no database is touched.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

from subgate import __version__
from subgate.cli.commands.api import APP_PATH
from subgate.cli.main import app
from subgate.exceptions import FlagStoreError, UnknownSettingError
from subgate.models.flags import VideoFlags
from subgate.plugin.settings import default_settings
from subgate.services.flag_store import FlagStore
from subgate.services.settings_manager import DatabaseSettingsManager

runner = CliRunner()

VIDEO_UUID = "9c1f6a0e-0002-4000-8000-000000000002"


@pytest.fixture
def flag_store() -> AsyncMock:
    store = AsyncMock(spec=FlagStore)
    store.get.return_value = None
    return store


@pytest.fixture
def flag_container(flag_store: AsyncMock):
    container = MagicMock()
    container.create_flag_store.return_value = flag_store
    with patch("subgate.cli.flag_commands.container", container):
        yield container


@pytest.fixture
def settings_manager() -> AsyncMock:
    manager = AsyncMock(spec=DatabaseSettingsManager)
    manager.get_all_settings.return_value = default_settings()
    manager.update_settings.return_value = {
        **default_settings(),
        "global-subscriber-only": True,
    }
    return manager


@pytest.fixture
def settings_container(settings_manager: AsyncMock):
    container = MagicMock()
    container.settings_manager = settings_manager
    with patch("subgate.cli.settings_commands.container", container):
        yield container


class TestVersion:
    """Tests for version output."""

    def test_version_command(self) -> None:
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_version_option(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"subgate v{__version__}" in result.stdout


class TestFlagCommands:
    """Tests for `subgate flags`."""

    def test_show_unset(self, flag_container: MagicMock, flag_store: AsyncMock) -> None:
        result = runner.invoke(app, ["flags", "show", VIDEO_UUID])

        assert result.exit_code == 0
        assert "No flags stored" in result.stdout
        flag_store.get.assert_awaited_once_with(VIDEO_UUID)

    def test_show_stored(self, flag_container: MagicMock, flag_store: AsyncMock) -> None:
        flag_store.get.return_value = VideoFlags(subscriber_only=True, deny_download=None)

        result = runner.invoke(app, ["flags", "show", VIDEO_UUID])

        assert result.exit_code == 0
        assert "subscriber-only" in result.stdout
        assert "unset" in result.stdout

    def test_set(self, flag_container: MagicMock, flag_store: AsyncMock) -> None:
        result = runner.invoke(
            app, ["flags", "set", VIDEO_UUID, "--subscriber-only", "--no-deny-download"]
        )

        assert result.exit_code == 0
        assert "Flags stored" in result.stdout
        flag_store.set.assert_awaited_once_with(
            VIDEO_UUID, VideoFlags(subscriber_only=True, deny_download=False)
        )

    def test_store_failure(self, flag_container: MagicMock, flag_store: AsyncMock) -> None:
        flag_store.set.side_effect = FlagStoreError("database is locked")

        result = runner.invoke(app, ["flags", "set", VIDEO_UUID, "--deny-download"])

        assert result.exit_code == 1
        assert "database is locked" in result.stdout


class TestSettingsCommands:
    """Tests for `subgate settings`."""

    def test_show(self, settings_container: MagicMock) -> None:
        result = runner.invoke(app, ["settings", "show"])

        assert result.exit_code == 0
        assert "Plugin Settings" in result.stdout

    def test_set(
        self, settings_container: MagicMock, settings_manager: AsyncMock
    ) -> None:
        result = runner.invoke(app, ["settings", "set", "global-subscriber-only", "on"])

        assert result.exit_code == 0
        settings_manager.update_settings.assert_awaited_once_with(
            {"global-subscriber-only": True}
        )

    def test_invalid_value(
        self, settings_container: MagicMock, settings_manager: AsyncMock
    ) -> None:
        result = runner.invoke(app, ["settings", "set", "global-subscriber-only", "maybe"])

        assert result.exit_code == 1
        assert "Invalid value" in result.stdout
        settings_manager.update_settings.assert_not_awaited()

    def test_unknown_setting(
        self, settings_container: MagicMock, settings_manager: AsyncMock
    ) -> None:
        settings_manager.update_settings.side_effect = UnknownSettingError("bogus")

        result = runner.invoke(app, ["settings", "set", "bogus", "on"])

        assert result.exit_code == 1
        assert "Unknown setting: bogus" in result.stdout
        assert "global-deny-download" in result.stdout


class TestApiCommands:
    """Tests for the api command group."""

    def test_start_development(self) -> None:
        with patch("uvicorn.run") as run:
            result = runner.invoke(app, ["api", "start", "--port", "9000"])

        assert result.exit_code == 0
        run.assert_called_once()
        args, kwargs = run.call_args
        assert args == (APP_PATH,)
        assert kwargs["port"] == 9000
        assert kwargs["host"] == "127.0.0.1"
        assert kwargs["reload"] is True
        assert "workers" not in kwargs

    def test_start_production(self) -> None:
        with patch("uvicorn.run") as run:
            result = runner.invoke(
                app, ["api", "start", "--host", "0.0.0.0", "--production"]
            )

        assert result.exit_code == 0
        kwargs = run.call_args.kwargs
        assert kwargs["host"] == "0.0.0.0"
        assert kwargs["workers"] == 2
        assert kwargs["log_level"] == "warning"
        assert "reload" not in kwargs
