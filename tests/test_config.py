"""Unit tests for settings, preferences and CLI wiring helpers."""
from pathlib import Path

import pytest
import typer
from fakes import FakeModelClient
from rich.console import Console

from cliagent.agent import ConfigurationError
from cliagent.cli.providers import build_bridge, require_settings, resolve_model
from cliagent.config import Preferences, Settings, load_preferences, load_settings
from cliagent.prompts import clear_cache, get_system_prompt, load_prompt


class TestLoadSettings:
    def test_missing_key(self):
        with pytest.raises(ConfigurationError, match="GOOGLE_API_KEY environment variable is required"):
            load_settings({})

    def test_defaults(self):
        settings = load_settings({"GOOGLE_API_KEY": "key"})

        assert settings.api_key == "key"
        assert settings.model == "gemini-2.5-flash"
        assert settings.turn_timeout == 300
        assert settings.confirmation_timeout == 30
        assert settings.preferences_path.name == "preferences.json"

    def test_gemini_key_fallback(self):
        assert load_settings({"GEMINI_API_KEY": "alt"}).api_key == "alt"

    def test_overrides(self, tmp_path):
        settings = load_settings(
            {
                "GOOGLE_API_KEY": "key",
                "GOOGLE_MODEL": "gemini-2.5-pro",
                "CLIAGENT_TURN_TIMEOUT": "60",
                "CLIAGENT_CONFIRM_TIMEOUT": "5.5",
                "CLIAGENT_CONFIG_DIR": str(tmp_path),
            }
        )

        assert settings.model == "gemini-2.5-pro"
        assert settings.turn_timeout == 60
        assert settings.confirmation_timeout == 5.5
        assert settings.preferences_path == tmp_path / "preferences.json"

    @pytest.mark.parametrize("value", ["0", "-1", "soon"])
    def test_invalid_timeout(self, value):
        with pytest.raises(ConfigurationError, match="Invalid configuration"):
            load_settings({"GOOGLE_API_KEY": "key", "CLIAGENT_TURN_TIMEOUT": value})

    def test_key_hidden_from_repr(self):
        assert "secret" not in repr(load_settings({"GOOGLE_API_KEY": "secret"}))


class TestPreferences:
    def test_round_trip(self, tmp_path):
        path = tmp_path / "nested" / "preferences.json"
        prefs = Preferences(selected_model="gemini-2.5-pro", require_tool_confirmation=False)

        prefs.save(path)

        assert load_preferences(path) == prefs

    def test_missing_file_gives_defaults(self, tmp_path):
        prefs = load_preferences(tmp_path / "absent.json")

        assert prefs.selected_model == "gemini-2.5-flash"
        assert prefs.require_tool_confirmation is True
        assert prefs.enable_thinking_mode is False

    @pytest.mark.parametrize("content", ["{not json", "[1, 2]", '{"require_tool_confirmation": "maybe"}'])
    def test_corrupt_file_gives_defaults(self, tmp_path, content):
        path = tmp_path / "preferences.json"
        path.write_text(content)

        assert load_preferences(path) == Preferences()

    def test_partial_file_keeps_known_fields(self, tmp_path):
        path = tmp_path / "preferences.json"
        path.write_text('{"enable_thinking_mode": true}')

        prefs = load_preferences(path)

        assert prefs.enable_thinking_mode is True
        assert prefs.selected_model == "gemini-2.5-flash"


class TestResolveModel:
    def make_settings(self, tmp_path: Path, **kwargs) -> Settings:
        return Settings(api_key="key", config_dir=tmp_path, **kwargs)

    def test_override_wins(self, tmp_path):
        settings = self.make_settings(tmp_path)
        Preferences(selected_model="gemini-2.5-pro").save(settings.preferences_path)

        assert resolve_model(settings, Preferences(selected_model="gemini-2.5-pro"), "custom") == "custom"

    def test_saved_preference(self, tmp_path):
        settings = self.make_settings(tmp_path, model="gemini-2.0-flash")
        prefs = Preferences(selected_model="gemini-2.5-pro")
        prefs.save(settings.preferences_path)

        assert resolve_model(settings, prefs) == "gemini-2.5-pro"

    def test_environment_without_preferences_file(self, tmp_path):
        settings = self.make_settings(tmp_path, model="gemini-2.0-flash")

        assert resolve_model(settings, Preferences()) == "gemini-2.0-flash"


class TestRequireSettings:
    def test_exits_without_key(self, monkeypatch):
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        console = Console(record=True, width=120)

        with pytest.raises(typer.Exit) as exc_info:
            require_settings(console)

        assert exc_info.value.exit_code == 1
        assert "GOOGLE_API_KEY environment variable is required" in console.export_text()


class TestBuildBridge:
    def test_wires_engine_and_tools(self, tmp_path):
        settings = Settings(api_key="key", config_dir=tmp_path)

        bridge = build_bridge(FakeModelClient([]), settings, "gemini-2.5-pro", base_path=tmp_path)

        assert bridge.engine.model == "gemini-2.5-pro"
        assert "run_shell_command" in bridge.engine.registry
        assert not bridge.busy


class TestPrompts:
    @pytest.fixture(autouse=True)
    def fresh_cache(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        clear_cache()
        yield
        clear_cache()

    def test_packaged_system_prompt(self):
        assert get_system_prompt().startswith("You are a helpful AI coding assistant")

    def test_project_override(self, tmp_path):
        (tmp_path / "prompts").mkdir()
        (tmp_path / "prompts" / "system_prompt.txt").write_text("Answer in haiku.\n")

        assert get_system_prompt() == "Answer in haiku."

    def test_missing_prompt(self):
        with pytest.raises(FileNotFoundError, match="Prompt 'absent' not found"):
            load_prompt("absent")
