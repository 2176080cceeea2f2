from __future__ import annotations

import logging
from typing import Optional

from .breadcrumbs import BreadcrumbBuffer
from .config import DEFAULT_HOST, SessionConfig, insecure_from_env
from .envelope import encode_event
from .event import Collector, EventBuilder
from .models import Breadcrumb
from .transport import HttpTransport

logger = logging.getLogger(__name__)


class SentryClient:
  """
  Holds one session configuration and one breadcrumb buffer.

  Breadcrumbs accumulate until the next emitted event consumes them. Every
  emit_* call raises a SentryClientError subclass on failure:
  MissingConfigurationError, InvalidArgumentError, SerializationError or
  DeliveryError.
  """

  def __init__(
    self,
    config: Optional[SessionConfig] = None,
    transport: Optional[HttpTransport] = None,
    collector: Optional[Collector] = None,
  ) -> None:
    self._config = config
    self._buffer = BreadcrumbBuffer()
    self._builder = EventBuilder(self._buffer, collector=collector)
    self._transport = transport or HttpTransport()

  @property
  def config(self) -> Optional[SessionConfig]:
    return self._config

  @property
  def breadcrumbs(self) -> BreadcrumbBuffer:
    return self._buffer

  def init(
    self,
    api_key: str,
    project_id: str,
    host: Optional[str] = None,
    insecure: Optional[bool] = None,
  ) -> SessionConfig:
    """
    Replace the session configuration as a whole.

    `insecure` falls back to SENTRY_NO_CERTIFICATE_CHECK when not given.
    """
    if insecure is None:
      insecure = insecure_from_env()
    self._config = SessionConfig(
      api_key=api_key or None,
      project_id=str(project_id) if project_id else None,
      host=host or DEFAULT_HOST,
      insecure=insecure,
    )
    return self._config

  def record_breadcrumb(self, message: str, category: Optional[str] = None) -> Breadcrumb:
    return self._buffer.record(message, category)

  def emit_event(self, message: str, severity: Optional[str] = None) -> str:
    """
    Build, frame and send one event. Returns the event id.
    """
    config = self._config
    event = self._builder.build(config, message, severity)
    payload = encode_event(event)
    logger.debug("Sending event %s (%d byte item)", event.event_id, event.length)
    self._transport.send(payload, config)  # type: ignore[arg-type]
    return event.event_id

  def emit_message(self, title: str, message: str, severity: Optional[str] = None) -> str:
    # title is accepted for call-shape compatibility but not reported
    return self.emit_event(message, severity)

  def emit_exception(self, title: str, message: str, severity: Optional[str] = None) -> str:
    # same as emit_message: exceptions are reported as plain events
    return self.emit_event(message, severity)


def init(
  api_key: str,
  project_id: str,
  host: Optional[str] = None,
  insecure: Optional[bool] = None,
  transport: Optional[HttpTransport] = None,
) -> SentryClient:
  """
  Create a configured client.

    >>> client = init("83105fca2e2e2351b01", "4508410146651")
    >>> client.record_breadcrumb("mutex 11Ti08")
    >>> client.emit_event("failed to read mutex", "error")
  """
  client = SentryClient(transport=transport)
  client.init(api_key, project_id, host=host, insecure=insecure)
  return client
