"""
Read-only facts about the host, gathered once per emitted event.

Nothing here keeps state; each call reflects the environment at that moment.
"""

from __future__ import annotations

import logging
import os
import platform
import socket
import subprocess
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from .models import clean_text

logger = logging.getLogger(__name__)

# Variables that must never be reported as extra context. SENTRY_ covers this
# library's own settings, including the API key.
DENIED_PREFIXES = ("SENTRY_", "BASH_", "JSON_", "KEYS_", "KEY_", "TYPE_", "VALUE_")
DENIED_NAMES = frozenset({"LS_COLORS"})

UNKNOWN_REVISION = "unknown"


@dataclass(frozen=True)
class HostContext:
  server_name: str
  arch: str
  os_name: str
  os_version: str
  kernel_version: str
  release: str = UNKNOWN_REVISION
  extra: Dict[str, Any] = field(default_factory=dict)


def hostname() -> str:
  return os.getenv("HOSTNAME") or socket.gethostname()


def git_revision(cwd: Optional[str] = None) -> str:
  """
  Return the current commit hash, or "unknown" outside a git checkout.
  """
  try:
    result = subprocess.run(
      ["git", "rev-parse", "HEAD"],
      cwd=cwd,
      capture_output=True,
      text=True,
      timeout=5,
      check=False,
    )
  except (OSError, subprocess.SubprocessError) as exc:
    logger.debug("git revision lookup failed: %s", exc)
    return UNKNOWN_REVISION

  revision = result.stdout.strip()
  if result.returncode != 0 or not revision:
    return UNKNOWN_REVISION
  return revision


def is_denied(name: str) -> bool:
  return name in DENIED_NAMES or name.startswith(DENIED_PREFIXES)


def environment_extra(environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
  """
  Ambient variables for the event's "extra" block, wrapped as {"environ": {...}}.
  """
  source = os.environ if environ is None else environ
  return {
    "environ": {
      clean_text(name): clean_text(value)
      for name, value in sorted(source.items())
      if not is_denied(name)
    }
  }


def collect_host_context(environ: Optional[Mapping[str, str]] = None) -> HostContext:
  uname = platform.uname()
  return HostContext(
    server_name=hostname(),
    arch=uname.machine,
    os_name=uname.system,
    os_version=uname.release,
    kernel_version=uname.version,
    release=git_revision(),
    extra=environment_extra(environ),
  )
