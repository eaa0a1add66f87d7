import pytest

from helpdesk.config import get_settings


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    path = tmp_path / "config.yaml"
    path.write_text(
        "store:\n"
        "  url: sqlite+aiosqlite:///from-yaml.db\n"
        "  max_attempts: 7\n"
        "pagination:\n"
        "  default_per_page: 20\n"
        "log_level: WARNING\n"
    )
    monkeypatch.setenv("HELPDESK_CONFIG", str(path))
    for name in (
        "HELPDESK_STORE_URL",
        "HELPDESK_STORE_MAX_ATTEMPTS",
        "HELPDESK_PAGINATION_DEFAULT_PER_PAGE",
        "HELPDESK_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    return path


def test_yaml_values_override_defaults(config_file):
    settings = get_settings()
    assert settings.store.url == "sqlite+aiosqlite:///from-yaml.db"
    assert settings.store.max_attempts == 7
    assert settings.pagination.default_per_page == 20
    assert settings.pagination.max_per_page == 50
    assert settings.log_level == "WARNING"


def test_environment_overrides_yaml(config_file, monkeypatch):
    monkeypatch.setenv("HELPDESK_STORE_URL", "sqlite+aiosqlite:///from-env.db")
    monkeypatch.setenv("HELPDESK_PAGINATION_DEFAULT_PER_PAGE", "5")
    monkeypatch.setenv("HELPDESK_LOG_LEVEL", "DEBUG")
    settings = get_settings()
    assert settings.store.url == "sqlite+aiosqlite:///from-env.db"
    assert settings.pagination.default_per_page == 5
    assert settings.log_level == "DEBUG"
    # Keys without an env var still come from the file.
    assert settings.store.max_attempts == 7


def test_missing_config_file_uses_defaults(tmp_path, monkeypatch):
    monkeypatch.setenv("HELPDESK_CONFIG", str(tmp_path / "absent.yaml"))
    monkeypatch.delenv("HELPDESK_STORE_URL", raising=False)
    assert get_settings().store.url == "sqlite+aiosqlite:///data/helpdesk.db"
