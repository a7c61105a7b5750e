import os

import pytest

from storefront_server import cli, http_server
from storefront_server.config import Settings


@pytest.fixture
def served(monkeypatch):
    monkeypatch.setenv("STOREFRONT_LOG_LEVEL", "INFO")
    monkeypatch.setenv("STOREFRONT_API_URL", "http://shop.local")
    calls = []
    monkeypatch.setattr(http_server, "run_http_server", lambda **kwargs: calls.append(kwargs))
    return calls


def test_http_mode_passes_host_and_port(served):
    cli.main(["--mode", "http", "--host", "127.0.0.1", "--port", "9000"])

    assert served == [{"host": "127.0.0.1", "port": 9000}]
    assert os.environ["STOREFRONT_LOG_LEVEL"] == "INFO"


def test_overrides_reach_settings(served):
    cli.main(["--mode", "http", "--log-level", "debug", "--api-url", "http://api.local"])

    settings = Settings.from_env()
    assert settings.log_level == "DEBUG"
    assert settings.api_url == "http://api.local"


def test_unknown_log_level_is_rejected(served):
    with pytest.raises(SystemExit):
        cli.main(["--log-level", "loud"])

    assert served == []
