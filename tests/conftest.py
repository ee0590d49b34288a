"""Shared test fixtures."""

import pytest

ENV_VARS = (
    "CARTSMASH_API_URL",
    "CARTSMASH_LOG_LEVEL",
    "KROGER_CLIENT_ID",
    "KROGER_CLIENT_SECRET",
    "FIREBASE_PROJECT_ID",
    "FIREBASE_DATABASE_URL",
    "FIREBASE_CREDENTIALS",
    "FIREBASE_STORAGE_BUCKET",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def base_url() -> str:
    return "https://x.test"


@pytest.fixture()
def user_id() -> str:
    return "test-user-001"


@pytest.fixture()
def client_id() -> str:
    return "test-client-id"


@pytest.fixture()
def client_secret() -> str:
    return "test-client-secret"
