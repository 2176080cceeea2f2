from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import urlparse

from .errors import InvalidArgumentError

DEFAULT_HOST = "sentry.io"
CONFIG_FILE = Path("_sentry/config.json")


@dataclass(frozen=True)
class SessionConfig:
  """
  Connection settings shared by every event a client emits.

  Instances are immutable; re-initialising a client swaps the whole object.
  """

  api_key: str | None = None
  project_id: str | None = None
  host: str = DEFAULT_HOST
  insecure: bool = False

  @property
  def is_complete(self) -> bool:
    return bool(self.api_key) and bool(self.project_id)

  @property
  def envelope_url(self) -> str:
    return f"https://{self.host}/api/{self.project_id}/envelope/"

  @classmethod
  def from_dsn(cls, dsn: str, insecure: bool = False) -> "SessionConfig":
    """
    Build configuration from a Data Source Name.

    Example DSN:
      https://419595dd76021@o4506231.ingest.us.sentry.io/4508864683371
              ^^^^^^^^^^^^^                              ^^^^^^^^^^^^^
                  key                                     project ID
    """
    parsed = urlparse(dsn or "")
    key = parsed.username
    host = parsed.hostname
    if host and parsed.port:
      host = f"{host}:{parsed.port}"
    project = parsed.path.strip("/").rsplit("/", 1)[-1] if parsed.path else ""

    if not key or not host or not project:
      raise InvalidArgumentError(
        f"Invalid DSN '{_redact(dsn)}'. "
        "Expected a URL like https://<key>@<host>/<project>."
      )

    return cls(api_key=key, project_id=project, host=host, insecure=insecure)

  @classmethod
  def from_params_or_env(
    cls,
    api_key: Optional[str] = None,
    project_id: Optional[str] = None,
    host: Optional[str] = None,
    insecure: Optional[bool] = None,
  ) -> "SessionConfig":
    """
    Build configuration from explicit parameters, falling back to the environment.

    Priority:
      1. Explicit function arguments
      2. Environment variables (SENTRY_KEY, SENTRY_PROJECT, SENTRY_HOST, SENTRY_DSN)
      3. Config file (_sentry/config.json)
      4. Defaults (host sentry.io; key and project stay unset)
    """
    key = api_key or os.getenv("SENTRY_KEY")
    project = project_id or os.getenv("SENTRY_PROJECT")

    # SENTRY_DSN is only parsed when key or project is still missing.
    dsn_config: Optional[SessionConfig] = None
    dsn = os.getenv("SENTRY_DSN")
    if dsn and not (key and project):
      dsn_config = cls.from_dsn(dsn)

    file_config = _read_config_file()

    key = (
      key
      or (dsn_config.api_key if dsn_config else None)
      or file_config.get("api_key")
      or file_config.get("apiKey")
    )
    project = (
      project
      or (dsn_config.project_id if dsn_config else None)
      or file_config.get("project_id")
      or file_config.get("projectId")
    )
    server = (
      host
      or os.getenv("SENTRY_HOST")
      or (dsn_config.host if dsn_config else None)
      or file_config.get("host")
      or DEFAULT_HOST
    )

    if insecure is None:
      insecure = insecure_from_env()

    return cls(
      api_key=str(key) if key else None,
      project_id=str(project) if project else None,
      host=str(server),
      insecure=insecure,
    )


def _read_config_file() -> Dict[str, Any]:
  if not CONFIG_FILE.exists():
    return {}
  try:
    data = json.loads(CONFIG_FILE.read_text(encoding="utf-8"))
  except (OSError, ValueError):
    return {}
  return data if isinstance(data, dict) else {}


def insecure_from_env() -> bool:
  """
  Determine whether TLS certificate checks are disabled.

  Any value of SENTRY_NO_CERTIFICATE_CHECK turns the check off, including an
  empty string, except the explicit falsey strings 0/false/no/off.
  """
  raw = os.getenv("SENTRY_NO_CERTIFICATE_CHECK")
  if raw is None:
    return False
  return raw.strip().lower() not in ("0", "false", "no", "off")


def _redact(dsn: str) -> str:
  parsed = urlparse(dsn or "")
  if parsed.username:
    return dsn.replace(parsed.username, "***", 1)
  return dsn
