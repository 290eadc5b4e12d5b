"""
Tests for configuration system.
"""

import pytest
from web_replay.config import (
    Settings,
    BrowserSettings,
    CaptureSettings,
    ReplaySettings,
    MessagingSettings,
    ConfigLoader,
    load_config,
    read_config_file,
    get_settings,
    reset_settings,
)
from web_replay.exceptions import ConfigurationError


class TestSettings:
    """Test the Settings classes."""

    def test_default_settings(self):
        """Test default settings are created correctly."""
        settings = Settings()

        assert settings.browser.browser_type == "chromium"
        assert settings.capture.typing_debounce_ms == 1000
        assert settings.capture.xpath_max_depth == 5
        assert settings.replay.navigation_settle_ms == 3000
        assert settings.messaging.retry_delay_ms == 1000
        assert settings.messaging.resolve_timeout_ms == 5000

    def test_default_typing_delays(self):
        """Test the human typing delay defaults."""
        replay = ReplaySettings()

        assert replay.typing_base_delay_ms == 50
        assert replay.typing_space_delay_ms == 100
        assert replay.typing_punctuation_delay_ms == 200
        assert replay.typing_newline_delay_ms == 150
        assert replay.typing_jitter_ms == 30

    def test_default_capture_lists(self):
        """Test special keys and heuristics defaults."""
        capture = CaptureSettings()

        assert "Enter" in capture.special_keys
        assert "ArrowDown" in capture.special_keys
        assert capture.navigation_heuristics == ["same-chat-thread", "after-key-press"]
        assert capture.semantic_locators == ["web-search", "composer-plus"]

    def test_override_settings(self):
        """Test overriding settings."""
        settings = Settings(
            browser=BrowserSettings(browser_type="firefox", headless=True),
            replay=ReplaySettings(navigation_settle_ms=0),
        )

        assert settings.browser.browser_type == "firefox"
        assert settings.browser.headless is True
        assert settings.replay.navigation_settle_ms == 0

    def test_merge_with_overrides(self):
        """Test merging settings with overrides."""
        settings = Settings()
        new_settings = settings.merge_with({
            "browser": {"headless": True},
            "capture": {"typing_debounce_ms": 250},
        })

        assert new_settings.browser.headless is True
        assert new_settings.capture.typing_debounce_ms == 250
        # Other settings should remain default
        assert new_settings.browser.browser_type == "chromium"
        assert new_settings.capture.xpath_max_depth == 5

    def test_browser_settings_validation(self):
        """Test validation of browser settings."""
        settings = BrowserSettings(timeout_ms=5000)
        assert settings.timeout_ms == 5000

        # Invalid timeout (below minimum)
        with pytest.raises(ValueError):
            BrowserSettings(timeout_ms=100)

    def test_messaging_settings_validation(self):
        """Test validation of messaging settings."""
        with pytest.raises(ValueError):
            MessagingSettings(resolve_timeout_ms=0)

    def test_env_override(self, monkeypatch):
        """Test nested environment variables."""
        monkeypatch.setenv("WEB_REPLAY__REPLAY__NAVIGATION_SETTLE_MS", "500")
        settings = Settings()
        assert settings.replay.navigation_settle_ms == 500


class TestConfigLoader:
    """Test loading configuration files."""

    def test_load_yaml(self, tmp_path, monkeypatch):
        """Test values from a YAML file are applied."""
        monkeypatch.chdir(tmp_path)
        config_file = tmp_path / "custom.yaml"
        config_file.write_text("capture:\n  typing_debounce_ms: 400\n")

        settings = load_config(config_path=config_file)

        assert settings.capture.typing_debounce_ms == 400

    def test_overrides_beat_file(self, tmp_path, monkeypatch):
        """Test explicit overrides take precedence over the file."""
        monkeypatch.chdir(tmp_path)
        config_file = tmp_path / "custom.yaml"
        config_file.write_text("replay:\n  navigation_settle_ms: 100\n")

        settings = load_config(config_path=config_file, replay={"navigation_settle_ms": 5})

        assert settings.replay.navigation_settle_ms == 5

    def test_environment_beats_file(self, tmp_path, monkeypatch):
        """Test WEB_REPLAY__* variables win over file values, field by field."""
        monkeypatch.chdir(tmp_path)
        config_file = tmp_path / "custom.yaml"
        config_file.write_text(
            "replay:\n  navigation_settle_ms: 500\n  typing_base_delay_ms: 20\n"
        )
        monkeypatch.setenv("WEB_REPLAY__REPLAY__NAVIGATION_SETTLE_MS", "5000")

        settings = load_config(config_path=config_file)

        assert settings.replay.navigation_settle_ms == 5000
        assert settings.replay.typing_base_delay_ms == 20

    def test_overrides_beat_environment(self, tmp_path, monkeypatch):
        """Test explicit overrides win over the environment."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("WEB_REPLAY__BROWSER__HEADLESS", "false")

        settings = load_config(browser={"headless": True})

        assert settings.browser.headless is True

    def test_missing_explicit_file(self, tmp_path):
        """Test an explicit but missing config file is an error."""
        with pytest.raises(ConfigurationError):
            ConfigLoader(tmp_path / "nope.yaml").find_config_file()

    def test_invalid_yaml(self, tmp_path, monkeypatch):
        """Test malformed YAML is reported as a configuration error."""
        monkeypatch.chdir(tmp_path)
        config_file = tmp_path / "bad.yaml"
        config_file.write_text("capture: [unclosed\n")

        with pytest.raises(ConfigurationError):
            load_config(config_path=config_file)

    def test_invalid_values(self, tmp_path, monkeypatch):
        """Test out-of-range values are reported as a configuration error."""
        monkeypatch.chdir(tmp_path)
        config_file = tmp_path / "bad.yaml"
        config_file.write_text("messaging:\n  retry_delay_ms: -5\n")

        with pytest.raises(ConfigurationError):
            load_config(config_path=config_file)

    def test_config_env_var(self, tmp_path, monkeypatch):
        """Test WEB_REPLAY_CONFIG names the file when no path is given."""
        monkeypatch.chdir(tmp_path)
        config_file = tmp_path / "elsewhere.yaml"
        config_file.write_text("replay:\n  navigation_settle_ms: 42\n")
        monkeypatch.setenv("WEB_REPLAY_CONFIG", str(config_file))

        assert load_config().replay.navigation_settle_ms == 42

    def test_config_env_var_missing_file(self, tmp_path, monkeypatch):
        """Test a WEB_REPLAY_CONFIG pointing nowhere is an error."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("WEB_REPLAY_CONFIG", str(tmp_path / "gone.yaml"))

        with pytest.raises(ConfigurationError):
            load_config()

    def test_search_path(self, tmp_path, monkeypatch):
        """Test web-replay.yaml in the working directory is found."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("WEB_REPLAY_CONFIG", raising=False)
        (tmp_path / "web-replay.yaml").write_text("capture:\n  max_css_classes: 1\n")

        assert ConfigLoader().find_config_file().name == "web-replay.yaml"
        assert load_config().capture.max_css_classes == 1

    def test_empty_file(self, tmp_path):
        """Test an empty config file contributes nothing."""
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")

        assert read_config_file(config_file) == {}

    def test_non_mapping(self, tmp_path):
        """Test a YAML list is rejected."""
        config_file = tmp_path / "list.yaml"
        config_file.write_text("- a\n- b\n")

        with pytest.raises(ConfigurationError, match="must contain a mapping"):
            read_config_file(config_file)


class TestGlobalSettings:
    """Test the settings singleton."""

    def test_singleton(self, tmp_path, monkeypatch):
        """Test get_settings returns the same instance until reset."""
        monkeypatch.delenv("WEB_REPLAY_CONFIG", raising=False)
        monkeypatch.chdir(tmp_path)
        reset_settings()
        try:
            first = get_settings()
            assert get_settings() is first
            reset_settings()
            assert get_settings() is not first
        finally:
            reset_settings()
