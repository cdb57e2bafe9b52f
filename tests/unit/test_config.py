"""Tests for helper configuration and scoped overrides."""

import pytest

from webactor.config import ConfigScope, HelperConfig
from webactor.exceptions import ConfigurationError
from webactor.models import PopupAction


class TestHelperConfig:
    def test_defaults(self) -> None:
        config = HelperConfig()
        assert config.wait_for_timeout == 1.0
        assert config.smart_wait == 0
        assert config.poll_interval == 0.2
        assert config.default_popup_action is PopupAction.ACCEPT
        assert config.window_dimensions is None

    def test_window_dimensions(self) -> None:
        assert HelperConfig(window_size="500x700").window_dimensions == (500, 700)

    def test_bad_window_size(self) -> None:
        with pytest.raises(ConfigurationError, match="window_size"):
            HelperConfig.build(window_size="wide")

    def test_negative_timeout_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            HelperConfig.build(wait_for_timeout=-1)

    def test_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("WEBACTOR_URL", "http://localhost:8000")
        monkeypatch.setenv("WEBACTOR_SMART_WAIT", "2.5")
        monkeypatch.setenv("WEBACTOR_DEFAULT_POPUP_ACTION", "cancel")
        config = HelperConfig.from_env()
        assert config.url == "http://localhost:8000"
        assert config.smart_wait == 2.5
        assert config.default_popup_action is PopupAction.CANCEL

    def test_from_env_invalid(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("WEBACTOR_POLL_INTERVAL", "0")
        with pytest.raises(ConfigurationError):
            HelperConfig.from_env()


class TestConfigScope:
    def test_override_restores(self) -> None:
        scope = ConfigScope(HelperConfig(smart_wait=0))
        with scope.override(smart_wait=3) as config:
            assert config.smart_wait == 3
            assert scope.current.smart_wait == 3
        assert scope.current.smart_wait == 0

    def test_override_restores_on_error(self) -> None:
        scope = ConfigScope()
        with pytest.raises(RuntimeError):
            with scope.override(wait_for_timeout=5):
                raise RuntimeError("boom")
        assert scope.current.wait_for_timeout == 1.0

    def test_nested_overrides(self) -> None:
        scope = ConfigScope()
        with scope.override(smart_wait=1):
            with scope.override(wait_for_timeout=4):
                assert scope.current.smart_wait == 1
                assert scope.current.wait_for_timeout == 4
            assert scope.current.wait_for_timeout == 1.0

    def test_invalid_override_leaves_stack(self) -> None:
        scope = ConfigScope()
        with pytest.raises(ConfigurationError):
            with scope.override(poll_interval=-1):
                pass
        assert scope.current.poll_interval == 0.2
