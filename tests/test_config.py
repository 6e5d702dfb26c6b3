# Tests for config.py
# Created: 2026-10-17

import pytest
from pydantic import ValidationError

from jiraproxy.config import Settings, get_settings

_ENV_VARS = ("JIRA_BASE_URL", "JIRA_EMAIL", "JIRA_API_TOKEN", "WEB_PORT", "HTTP_TIMEOUT_SECONDS")


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSettings:
    def test_defaults(self):
        settings = Settings.load()
        assert settings.jira_base_url == "https://your-domain.atlassian.net"
        assert settings.web_port == 8888
        assert settings.has_basic_auth is False

    def test_reads_unprefixed_env(self, monkeypatch):
        monkeypatch.setenv("JIRA_BASE_URL", "https://acme.atlassian.net")
        monkeypatch.setenv("JIRA_EMAIL", "bot@acme.test")
        monkeypatch.setenv("JIRA_API_TOKEN", "secret")

        settings = Settings.load()

        assert settings.jira_base_url == "https://acme.atlassian.net"
        assert settings.has_basic_auth is True

    def test_reads_dotenv(self, tmp_path):
        (tmp_path / ".env").write_text("JIRA_EMAIL=dot@acme.test\nJIRA_API_TOKEN=t\n")
        assert Settings.load().jira_email == "dot@acme.test"

    def test_rejects_bad_timeout(self, monkeypatch):
        monkeypatch.setenv("HTTP_TIMEOUT_SECONDS", "0")
        with pytest.raises(ValidationError):
            Settings.load()

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()
