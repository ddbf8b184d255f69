"""Ideenpool configuration management."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class Config:
    """Ideenpool configuration."""

    home: Path = field(default_factory=lambda: Path.home() / ".ideenpool")
    platform_url: str = ""
    access_token: str = ""
    api_version: str = "v9.2"
    table_name: str = "cr6df_sgsw_digitalisierungsvorhabens"
    demo_mode: bool = False
    demo_user_name: str = "Demo User"
    demo_user_email: str = "demo@example.com"
    timeout: float = 30.0
    log_level: str = "INFO"

    @classmethod
    def load(cls, home: Path | None = None) -> Config:
        """Load config from defaults, then YAML file, then env vars."""
        config = cls()

        env_home = os.environ.get("IDEENPOOL_HOME")
        if home:
            config.home = home
        elif env_home:
            config.home = Path(env_home)

        # Load YAML config if exists
        config_file = config.config_path
        if config_file.exists():
            with open(config_file) as f:
                data = yaml.safe_load(f) or {}
            for key, value in data.items():
                if key == "home" or not hasattr(config, key):
                    continue
                expected_type = type(getattr(config, key))
                if expected_type is bool:
                    setattr(config, key, _as_bool(value))
                else:
                    setattr(config, key, expected_type(value))

        # Override from env
        env_map = {
            "DATAVERSE_URL": "platform_url",
            "DATAVERSE_ACCESS_TOKEN": "access_token",
            "MOCK_USER_NAME": "demo_user_name",
            "MOCK_USER_EMAIL": "demo_user_email",
            "IDEENPOOL_LOG_LEVEL": "log_level",
        }
        for env_name, attr in env_map.items():
            value = os.environ.get(env_name)
            if value:
                setattr(config, attr, value)

        env_demo = os.environ.get("IDEENPOOL_DEMO_MODE")
        if env_demo:
            config.demo_mode = _as_bool(env_demo)

        return config

    @property
    def config_path(self) -> Path:
        return self.home / "config.yaml"

    @property
    def token_path(self) -> Path:
        return self.home / "token"

    @property
    def api_base_url(self) -> str:
        return f"{self.platform_url.rstrip('/')}/api/data/{self.api_version}/"

    @property
    def is_configured(self) -> bool:
        """True when both the platform URL and a deployment token are set."""
        return bool(self.platform_url) and bool(self.access_token)

    @property
    def token_missing(self) -> bool:
        """True when the URL is set but no deployment token is."""
        return bool(self.platform_url) and not self.access_token

    def save(self) -> None:
        """Save current config to YAML. The access token is never written."""
        self.home.mkdir(parents=True, exist_ok=True)
        data = {
            "platform_url": self.platform_url,
            "api_version": self.api_version,
            "table_name": self.table_name,
            "demo_mode": self.demo_mode,
            "demo_user_name": self.demo_user_name,
            "demo_user_email": self.demo_user_email,
            "timeout": self.timeout,
            "log_level": self.log_level,
        }
        with open(self.config_path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, allow_unicode=True)


def _as_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE_VALUES
