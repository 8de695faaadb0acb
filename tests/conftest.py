import pytest


@pytest.fixture(autouse=True)
def _isolate_gogen_env(monkeypatch):
    # Settings are read from the environment; keep the developer's overrides out of tests.
    for key in ("GOGEN_GO", "GOGEN_FORMATTER", "GOGEN_LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)
    yield
