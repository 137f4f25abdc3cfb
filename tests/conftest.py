"""Pytest fixtures: isolated config, a call-counting model stub, and an API client wired to it."""

import logging

import pytest
from fastapi.testclient import TestClient

from study_partner.ai.model_base import MockVisionModel
from study_partner.core.config import Settings
from study_partner.core.errors import InvocationFailure


class FailingModel(MockVisionModel):
    """Stub whose call fails with upstream detail that must not reach the caller."""

    def generate(self, image, prompt, credential):
        self.calls.append((image, prompt, credential))
        raise InvocationFailure(f"Gemini API error: 403 bad key {credential}", status_code=403)


def clear_app_caches() -> None:
    """Clear cached config and the API's cached model so each test sees its own settings."""
    from study_partner.api.main import _get_vision_model
    from study_partner.core import config as config_module

    config_module._config = None  # type: ignore[attr-defined]
    _get_vision_model.cache_clear()


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point config loading at a missing file, drop any ambient API key, and restore root logging afterwards."""
    monkeypatch.setenv("STUDY_CONFIG", str(tmp_path / "missing_config.yml"))
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    clear_app_caches()
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    yield
    for h in root.handlers[:]:
        root.removeHandler(h)
    for h in saved_handlers:
        root.addHandler(h)
    root.setLevel(saved_level)
    clear_app_caches()


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings with a default credential and a throwaway forensics dir."""
    return Settings(
        gemini_api_key="server-default-key",
        analyzer="mock",
        forensics_dir=str(tmp_path / "forensics"),
        credentials_path=str(tmp_path / "credentials.yml"),
    )


@pytest.fixture
def stub_model() -> MockVisionModel:
    return MockVisionModel(reply="stub reply")


@pytest.fixture
def failing_model() -> FailingModel:
    return FailingModel()


@pytest.fixture
def api_client(stub_model, settings):
    """TestClient whose analyze route uses stub_model and settings."""
    from study_partner.api.main import _get_vision_model, app
    from study_partner.core import config as config_module

    config_module._config = settings  # type: ignore[attr-defined]
    app.dependency_overrides[_get_vision_model] = lambda: stub_model
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(_get_vision_model, None)
