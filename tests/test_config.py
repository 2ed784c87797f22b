"""Tests for configuration loading and session construction from config."""

import json
from unittest.mock import patch

import pydantic
import pytest
import structlog

from pocketbase_client import config, credentials


def _write(tmp_path, data: dict) -> str:
    path = tmp_path / "pocketbase.json"
    path.write_text(json.dumps(data))
    return str(path)


def test_load_config_applies_defaults(tmp_path):
    cfg = config.load_config(_write(tmp_path, {"base_url": "http://localhost:8090"}))

    assert cfg.base_url == "http://localhost:8090"
    assert cfg.timeout == config.DEFAULT_TIMEOUT
    assert isinstance(cfg.credentials(), credentials.Anonymous)


def test_load_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError, match="not found"):
        config.load_config(str(tmp_path / "absent.json"))


def test_admin_credentials_mapped():
    cfg = config.ClientConfig(
        base_url="http://localhost:8090",
        admin_email="admin@example.com",
        admin_password="secret",
    )

    assert cfg.credentials() == credentials.AdminEmailPassword("admin@example.com", "secret")
    assert "secret" not in repr(cfg)


def test_token_credentials_mapped():
    cfg = config.ClientConfig(base_url="http://localhost:8090", token="tok")
    assert cfg.credentials() == credentials.Token("tok")


def test_email_without_password_rejected():
    with pytest.raises(pydantic.ValidationError, match="set together"):
        config.ClientConfig(base_url="http://localhost:8090", admin_email="admin@example.com")


def test_token_and_admin_credentials_exclusive():
    with pytest.raises(pydantic.ValidationError, match="mutually exclusive"):
        config.ClientConfig(
            base_url="http://localhost:8090",
            admin_email="admin@example.com",
            admin_password="secret",
            token="tok",
        )


@pytest.mark.parametrize("timeout", [0, -1.5])
def test_non_positive_timeout_rejected(timeout):
    with pytest.raises(pydantic.ValidationError):
        config.ClientConfig(base_url="http://localhost:8090", timeout=timeout)


def test_empty_base_url_rejected():
    with pytest.raises(pydantic.ValidationError):
        config.ClientConfig(base_url="")


def test_create_session_from_env(tmp_path, monkeypatch):
    path = _write(
        tmp_path,
        {"base_url": "http://localhost:8090/", "token": "tok"},
    )
    monkeypatch.setenv(config.CONFIG_ENV_VAR, path)

    with config.create_session() as s:
        assert s.base_url == "http://localhost:8090"
        assert s.token == "tok"


def test_create_session_explicit_path_wins(tmp_path, monkeypatch):
    monkeypatch.setenv(config.CONFIG_ENV_VAR, str(tmp_path / "absent.json"))
    path = _write(tmp_path, {"base_url": "http://example.test"})

    with config.create_session(path) as s:
        assert s.base_url == "http://example.test"
        assert isinstance(s.credentials, credentials.Anonymous)


def test_create_session_leaves_logging_to_caller(tmp_path):
    path = _write(tmp_path, {"base_url": "http://example.test"})

    with patch.object(config.structlog, "configure") as configure:
        with config.create_session(path):
            pass

    configure.assert_not_called()


# ---------------------------------------------------------------------------
# Secrets from the environment
# ---------------------------------------------------------------------------


def test_env_password_overrides_file(tmp_path, monkeypatch):
    path = _write(
        tmp_path,
        {"base_url": "http://localhost:8090", "admin_email": "admin@example.com"},
    )
    monkeypatch.setenv("POCKETBASE_ADMIN_PASSWORD", "from-env")

    cfg = config.load_config(path)

    assert cfg.credentials() == credentials.AdminEmailPassword("admin@example.com", "from-env")


def test_env_token_overrides_file(tmp_path, monkeypatch):
    path = _write(tmp_path, {"base_url": "http://localhost:8090", "token": "from-file"})
    monkeypatch.setenv("POCKETBASE_TOKEN", "from-env")

    assert config.load_config(path).token == "from-env"


def test_env_override_is_revalidated(tmp_path, monkeypatch):
    path = _write(
        tmp_path,
        {
            "base_url": "http://localhost:8090",
            "admin_email": "admin@example.com",
            "admin_password": "secret",
        },
    )
    monkeypatch.setenv("POCKETBASE_TOKEN", "from-env")

    with pytest.raises(pydantic.ValidationError, match="mutually exclusive"):
        config.load_config(path)


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


@pytest.fixture
def restore_structlog():
    saved = structlog.get_config()
    yield
    structlog.configure(**saved)


@pytest.mark.usefixtures("restore_structlog")
def test_configure_logging_logfmt(capsys):
    config.configure_logging("DEBUG")

    structlog.get_logger("test").info("Created session", base_url="http://x")

    out = capsys.readouterr().out
    assert "level=info" in out
    assert 'msg="Created session"' in out
    assert "base_url=http://x" in out


@pytest.mark.usefixtures("restore_structlog")
def test_configure_logging_json_filters_level(capsys):
    config.configure_logging("warning", json_output=True)

    log = structlog.get_logger("test")
    log.info("dropped")
    log.warning("kept", operation="list")

    (line,) = capsys.readouterr().out.splitlines()
    assert json.loads(line) | {"timestamp": None} == {
        "level": "warning",
        "msg": "kept",
        "operation": "list",
        "timestamp": None,
    }
