import json

import pytest

from sentry_envelope.config import DEFAULT_HOST, SessionConfig, insecure_from_env
from sentry_envelope.errors import InvalidArgumentError

_ENV_VARS = (
  "SENTRY_KEY",
  "SENTRY_PROJECT",
  "SENTRY_HOST",
  "SENTRY_DSN",
  "SENTRY_NO_CERTIFICATE_CHECK",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
  for name in _ENV_VARS:
    monkeypatch.delenv(name, raising=False)
  monkeypatch.chdir(tmp_path)


def write_config_file(tmp_path, data):
  config_dir = tmp_path / "_sentry"
  config_dir.mkdir(exist_ok=True)
  (config_dir / "config.json").write_text(json.dumps(data))


def test_defaults_leave_key_and_project_unset():
  config = SessionConfig.from_params_or_env()

  assert config.api_key is None
  assert config.project_id is None
  assert config.host == DEFAULT_HOST == "sentry.io"
  assert config.insecure is False
  assert config.is_complete is False


def test_envelope_url():
  config = SessionConfig(api_key="KEY", project_id="42", host="bugsink.example.net")

  assert config.envelope_url == "https://bugsink.example.net/api/42/envelope/"


def test_explicit_params_take_precedence_over_env(monkeypatch):
  monkeypatch.setenv("SENTRY_KEY", "env-key")
  monkeypatch.setenv("SENTRY_PROJECT", "7")

  config = SessionConfig.from_params_or_env(api_key="param-key", project_id="42")

  assert config.api_key == "param-key"
  assert config.project_id == "42"


def test_env_vars_are_used(monkeypatch):
  monkeypatch.setenv("SENTRY_KEY", "env-key")
  monkeypatch.setenv("SENTRY_PROJECT", "7")
  monkeypatch.setenv("SENTRY_HOST", "errors.internal")

  config = SessionConfig.from_params_or_env()

  assert (config.api_key, config.project_id, config.host) == ("env-key", "7", "errors.internal")
  assert config.is_complete is True


def test_dsn_env_var_fills_missing_fields(monkeypatch):
  monkeypatch.setenv("SENTRY_DSN", "https://419595dd76021@o4506231.ingest.us.sentry.io/4508864683371")
  monkeypatch.setenv("SENTRY_PROJECT", "99")

  config = SessionConfig.from_params_or_env()

  assert config.api_key == "419595dd76021"
  assert config.project_id == "99"
  assert config.host == "o4506231.ingest.us.sentry.io"


def test_config_file_is_read_when_env_is_empty(tmp_path):
  write_config_file(tmp_path, {"apiKey": "file-key", "project_id": 3, "host": "file.host"})

  config = SessionConfig.from_params_or_env()

  assert config.api_key == "file-key"
  assert config.project_id == "3"
  assert config.host == "file.host"


def test_env_var_takes_precedence_over_config_file(tmp_path, monkeypatch):
  write_config_file(tmp_path, {"api_key": "file-key", "project_id": "3"})
  monkeypatch.setenv("SENTRY_KEY", "env-key")

  config = SessionConfig.from_params_or_env()

  assert config.api_key == "env-key"
  assert config.project_id == "3"


def test_invalid_config_file_is_ignored(tmp_path):
  config_dir = tmp_path / "_sentry"
  config_dir.mkdir()
  (config_dir / "config.json").write_text("{invalid json}")

  config = SessionConfig.from_params_or_env()

  assert config.api_key is None


def test_from_dsn_with_port_and_path_prefix():
  config = SessionConfig.from_dsn("https://abc@sentry.example.com:9000/prefix/12")

  assert config.api_key == "abc"
  assert config.host == "sentry.example.com:9000"
  assert config.project_id == "12"


@pytest.mark.parametrize(
  "dsn",
  ["", "not-a-url", "https://sentry.io/12", "https://abc@sentry.io/", "https://abc@/12"],
)
def test_from_dsn_rejects_incomplete_dsn(dsn):
  with pytest.raises(InvalidArgumentError):
    SessionConfig.from_dsn(dsn)


def test_invalid_dsn_error_does_not_leak_key():
  with pytest.raises(InvalidArgumentError) as excinfo:
    SessionConfig.from_dsn("https://secretkey@sentry.io/")

  assert "secretkey" not in str(excinfo.value)


@pytest.mark.parametrize(
  "raw, expected",
  [("", True), ("1", True), ("yes", True), ("0", False), ("false", False), ("OFF", False)],
)
def test_insecure_flag_from_env(monkeypatch, raw, expected):
  monkeypatch.setenv("SENTRY_NO_CERTIFICATE_CHECK", raw)

  assert insecure_from_env() is expected
  assert SessionConfig.from_params_or_env().insecure is expected


def test_explicit_insecure_wins_over_env(monkeypatch):
  monkeypatch.setenv("SENTRY_NO_CERTIFICATE_CHECK", "1")

  assert SessionConfig.from_params_or_env(insecure=False).insecure is False


def test_config_is_immutable():
  config = SessionConfig(api_key="KEY", project_id="42")

  with pytest.raises(Exception):
    config.api_key = "other"  # type: ignore[misc]


def test_malformed_dsn_env_is_ignored_when_key_and_project_are_given(monkeypatch):
  monkeypatch.setenv("SENTRY_DSN", "not-a-dsn")

  config = SessionConfig.from_params_or_env(api_key="KEY", project_id="42")

  assert (config.api_key, config.project_id, config.host) == ("KEY", "42", DEFAULT_HOST)


def test_malformed_dsn_env_is_reported_when_it_is_needed(monkeypatch):
  monkeypatch.setenv("SENTRY_DSN", "not-a-dsn")

  with pytest.raises(InvalidArgumentError):
    SessionConfig.from_params_or_env(api_key="KEY")
