"""Tests for configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from ideenpool.config import Config

_ENV = (
    "IDEENPOOL_HOME",
    "DATAVERSE_URL",
    "DATAVERSE_ACCESS_TOKEN",
    "MOCK_USER_NAME",
    "MOCK_USER_EMAIL",
    "IDEENPOOL_LOG_LEVEL",
    "IDEENPOOL_DEMO_MODE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV:
        monkeypatch.delenv(name, raising=False)


def test_defaults(tmp_path: Path) -> None:
    config = Config.load(tmp_path)
    assert config.home == tmp_path
    assert config.platform_url == ""
    assert config.demo_mode is False
    assert config.is_configured is False
    assert config.token_missing is False


def test_yaml_file(tmp_path: Path) -> None:
    (tmp_path / "config.yaml").write_text(
        yaml.dump(
            {"platform_url": "https://org.crm17.dynamics.com", "demo_mode": "yes", "timeout": 5}
        )
    )
    config = Config.load(tmp_path)
    assert config.platform_url == "https://org.crm17.dynamics.com"
    assert config.demo_mode is True
    assert config.timeout == 5.0
    assert config.token_missing is True


def test_env_overrides_yaml(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / "config.yaml").write_text(yaml.dump({"platform_url": "https://a.example.com"}))
    monkeypatch.setenv("DATAVERSE_URL", "https://b.example.com")
    monkeypatch.setenv("DATAVERSE_ACCESS_TOKEN", "secret")
    monkeypatch.setenv("MOCK_USER_NAME", "Erika Muster")
    config = Config.load(tmp_path)
    assert config.platform_url == "https://b.example.com"
    assert config.demo_user_name == "Erika Muster"
    assert config.is_configured is True


def test_home_from_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("IDEENPOOL_HOME", str(tmp_path))
    assert Config.load().home == tmp_path


@pytest.mark.parametrize(("value", "expected"), [("1", True), ("true", True), ("0", False)])
def test_demo_mode_env(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, value: str, expected: bool
) -> None:
    monkeypatch.setenv("IDEENPOOL_DEMO_MODE", value)
    assert Config.load(tmp_path).demo_mode is expected


def test_api_base_url() -> None:
    config = Config(platform_url="https://org.crm17.dynamics.com/")
    assert config.api_base_url == "https://org.crm17.dynamics.com/api/data/v9.2/"


def test_save_never_writes_the_token(tmp_path: Path) -> None:
    config = Config(
        home=tmp_path, platform_url="https://org.crm17.dynamics.com", access_token="secret"
    )
    config.save()
    text = config.config_path.read_text()
    assert "secret" not in text
    assert Config.load(tmp_path).platform_url == "https://org.crm17.dynamics.com"
