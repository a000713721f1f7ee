import importlib

import pytest


@pytest.fixture
def reload_vars(monkeypatch):
    import page_relay.vars as vars_module

    yield lambda: importlib.reload(vars_module)

    monkeypatch.undo()
    importlib.reload(vars_module)


def test_allowlist_parsing(monkeypatch, reload_vars):
    monkeypatch.setenv("ALLOWLIST", " Example.com , ,api.test,")

    vars_module = reload_vars()

    assert vars_module.ALLOWLIST == ["example.com", "api.test"]


def test_defaults(monkeypatch, reload_vars):
    for name in ("API_KEY", "ALLOWLIST", "PROXY_PATH", "PUBLIC_URL", "PROXY_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)

    vars_module = reload_vars()

    assert vars_module.API_KEY == ""
    assert vars_module.ALLOWLIST == []
    assert vars_module.PROXY_PATH == "/api/proxy"
    assert vars_module.PROXY_TIMEOUT == 30.0
    assert vars_module.FORWARD_REQUEST_HEADERS == ["accept", "accept-language", "user-agent"]


def test_load_config_reads_environment(monkeypatch, reload_vars):
    monkeypatch.setenv("API_KEY", "k")
    monkeypatch.setenv("ALLOWLIST", "example.com")
    monkeypatch.setenv("PUBLIC_URL", "https://relay.example.com/")
    monkeypatch.setenv("PROXY_TIMEOUT", "2.5")
    reload_vars()

    from page_relay.config import load_config

    config = load_config()

    assert config.api_key == "k"
    assert config.allowlist == ("example.com",)
    assert config.public_url == "https://relay.example.com"
    assert config.proxy_timeout == 2.5
