"""Application configuration (Pydantic v2). Load from study_config.yml with optional env override."""

import os
from pathlib import Path
from typing import Any, Literal, Mapping

import yaml
from pydantic import BaseModel, field_validator

DEFAULT_CONFIG_ENV_VAR = "STUDY_CONFIG"
DEFAULT_CONFIG_FILENAME = "study_config.yml"
API_KEY_ENV_VAR = "GEMINI_API_KEY"

DEFAULT_MODEL_NAME = "gemini-2.5-flash"
DEFAULT_GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"
DEFAULT_API_BASE_URL = "http://localhost:3000"
DEFAULT_CREDENTIALS_PATH = str(Path.home() / ".study_partner" / "credentials.yml")


class Settings(BaseModel):
    """
    Service and client config loaded from YAML.

    When loading the default config, GEMINI_API_KEY from the environment overrides
    gemini_api_key (but not when an explicit config_path is provided).
    """

    model_config = {"extra": "ignore", "protected_namespaces": ()}

    gemini_api_key: str | None = None
    analyzer: Literal["gemini", "mock"] = "gemini"
    model_name: str = DEFAULT_MODEL_NAME
    gemini_base_url: str = DEFAULT_GEMINI_BASE_URL
    request_timeout_seconds: float = 90.0
    client_timeout_seconds: float = 120.0
    api_base_url: str = DEFAULT_API_BASE_URL
    credentials_path: str = DEFAULT_CREDENTIALS_PATH
    log_level: str = "WARNING"
    forensics_dir: str = "logs/forensics"
    forensic_dump_on_failure: bool = False

    @field_validator("gemini_api_key", mode="before")
    @classmethod
    def blank_key_is_none(cls, v: Any) -> str | None:
        if v is not None and str(v).strip() != "":
            return str(v).strip()
        return None

    @field_validator("api_base_url", "gemini_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


_config: Settings | None = None


class ConfigLoader:
    """
    Helper responsible for loading Settings from YAML and environment.

    - load_from_yaml(path, apply_env_override): read a YAML file and optionally apply env overrides.
    - load_default(): resolve the default config path from STUDY_CONFIG / study_config.yml and
      apply the GEMINI_API_KEY override when present.
    """

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        self._env: Mapping[str, str] = env if env is not None else os.environ

    def load_from_yaml(self, path: Path, apply_env_override: bool) -> Settings:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            data = yaml.safe_load(f)
        if not data:
            data = {}
        if apply_env_override and self._env.get(API_KEY_ENV_VAR):
            data["gemini_api_key"] = self._env[API_KEY_ENV_VAR]
        return Settings.model_validate(data)

    def load_default(self) -> Settings:
        """Load the default Settings, using STUDY_CONFIG or study_config.yml when present."""
        path = Path(self._env.get(DEFAULT_CONFIG_ENV_VAR) or DEFAULT_CONFIG_FILENAME)
        if path.exists():
            return self.load_from_yaml(path, apply_env_override=True)
        return Settings(gemini_api_key=self._env.get(API_KEY_ENV_VAR))


_loader = ConfigLoader()


def get_config(config_path: str | Path | None = None) -> Settings:
    """
    Return singleton config.

    - If config_path is given, load from it (without env overrides) and update the cache.
    - Otherwise, return the cached config if available, or load via ConfigLoader.load_default().
    """
    global _config
    if config_path is not None:
        _config = _loader.load_from_yaml(Path(config_path), apply_env_override=False)
        return _config
    if _config is not None:
        return _config
    _config = _loader.load_default()
    return _config


def reset_config() -> None:
    """Clear cached config (for tests)."""
    global _config
    _config = None
