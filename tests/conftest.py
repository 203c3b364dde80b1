from __future__ import annotations

import pytest

_RELAY_ENV_VARS = (
    "SILICONFLOW_API_KEY",
    "SILICONFLOW_BASE_URL",
    "SILICONFLOW_CHAT_MODEL",
    "SILICONFLOW_RECOMMEND_MODEL",
    "SILICONFLOW_AUDIT_MODEL",
    "SILICONFLOW_TIMEOUT_SECONDS",
    "MAX_REQUEST_BODY_MB",
)


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    # Tests must never reach the real provider: start every test without an API key.
    for name in _RELAY_ENV_VARS:
        monkeypatch.delenv(name, raising=False)

    # Settings are cached via @lru_cache; clear so each test sees its own environment.
    from app.core.settings import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def client():
    from fastapi.testclient import TestClient

    from app.main import create_app

    app = create_app()
    with TestClient(app) as c:
        yield c
