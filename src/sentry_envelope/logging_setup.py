from __future__ import annotations

import logging
from logging import Handler, LogRecord
from typing import Optional

from .client import SentryClient
from .errors import SentryClientError

# Loggers used while delivering an event; their records never become
# breadcrumbs or events.
_IGNORED_LOGGERS = ("sentry_envelope", "httpx", "httpcore")

_SEVERITIES = (
  (logging.CRITICAL, "fatal"),
  (logging.ERROR, "error"),
  (logging.WARNING, "warning"),
  (logging.INFO, "info"),
)


def _is_ignored(name: str) -> bool:
  return any(name == prefix or name.startswith(prefix + ".") for prefix in _IGNORED_LOGGERS)


def severity_for(levelno: int) -> str:
  for threshold, severity in _SEVERITIES:
    if levelno >= threshold:
      return severity
  return "debug"


class SentryHandler(Handler):
  """
  Logging handler that turns records into breadcrumbs, and records at or
  above `event_level` into events.
  """

  def __init__(self, client: SentryClient, event_level: int = logging.ERROR) -> None:
    super().__init__()
    self._client = client
    self.event_level = event_level

  def emit(self, record: LogRecord) -> None:
    if _is_ignored(record.name):
      return

    try:
      message = record.getMessage()
      if not message:
        return

      if record.levelno >= self.event_level:
        try:
          self._client.emit_event(message, severity_for(record.levelno))
        except SentryClientError as exc:
          logging.getLogger(__name__).warning("Could not report log record: %s", exc)
      else:
        self._client.record_breadcrumb(message, record.name)
    except Exception:
      # Never break application logging.
      self.handleError(record)


def setup_logging(
  client: SentryClient,
  logger: Optional[logging.Logger] = None,
  *,
  event_level: int = logging.ERROR,
) -> SentryHandler:
  """
  Attach a SentryHandler to a logger (the root logger by default).

  Existing handlers are kept. Calling this twice for the same logger
  returns the handler already attached.
  """
  target_logger = logger or logging.getLogger()

  for existing in target_logger.handlers:
    if isinstance(existing, SentryHandler):
      return existing

  handler = SentryHandler(client, event_level=event_level)
  target_logger.addHandler(handler)
  return handler
