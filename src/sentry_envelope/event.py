from __future__ import annotations

import json
import logging
import secrets
from dataclasses import dataclass
from typing import Callable, Optional

from pydantic import ValidationError
from pydantic_core import PydanticSerializationError

from .breadcrumbs import BreadcrumbBuffer, utc_timestamp
from .config import SessionConfig
from .context import UNKNOWN_REVISION, HostContext, collect_host_context
from .errors import InvalidArgumentError, MissingConfigurationError, SerializationError
from .models import (
  BreadcrumbValues,
  Contexts,
  DeviceContext,
  EventDocument,
  LogEntry,
  OsContext,
  clean_text,
)

logger = logging.getLogger(__name__)

Collector = Callable[[], HostContext]


@dataclass(frozen=True)
class BuiltEvent:
  """
  A serialized event ready for framing.

  `length` is the byte count of `body`, the exact bytes that get transmitted.
  """

  event_id: str
  body: bytes
  length: int


def new_event_id() -> str:
  return secrets.token_hex(16)


class EventBuilder:
  """
  Assembles one event document from a message, the pending breadcrumbs and
  a snapshot of the host context.
  """

  def __init__(
    self,
    buffer: BreadcrumbBuffer,
    collector: Optional[Collector] = None,
  ) -> None:
    self._buffer = buffer
    self._collector: Collector = collector or collect_host_context

  def build(
    self,
    config: Optional[SessionConfig],
    message: str,
    severity: Optional[str] = None,
  ) -> BuiltEvent:
    if config is None or not config.is_complete:
      raise MissingConfigurationError(
        "Sentry key or project missing. Call init() first."
      )
    if not isinstance(message, str):
      raise InvalidArgumentError("Event message must be a string")
    if not message:
      raise InvalidArgumentError("Event message must not be empty")

    # Severity is passed through as given; only the default is resolved here.
    level = severity or "info"
    event_id = new_event_id()
    host = self._collector()

    crumbs = self._buffer.snapshot_and_clear()

    try:
      document = EventDocument(
        event_id=event_id,
        logentry=LogEntry(message=clean_text(message)),
        timestamp=utc_timestamp(),
        server_name=host.server_name,
        level=level,
        contexts=Contexts(
          device=DeviceContext(arch=host.arch),
          os=OsContext(
            name=host.os_name,
            version=host.os_version,
            kernel_version=host.kernel_version,
          ),
        ),
        breadcrumbs=BreadcrumbValues(values=crumbs) if crumbs is not None else None,
        extra=host.extra,
        release=host.release or UNKNOWN_REVISION,
      )
      body = document.model_dump_json(exclude_none=True).encode("utf-8")
    except (ValidationError, PydanticSerializationError, UnicodeEncodeError) as exc:
      raise SerializationError(f"Event document could not be serialized: {exc}") from exc

    _validate_body(body)

    logger.debug("Built event %s (%d bytes)", event_id, len(body))
    return BuiltEvent(event_id=event_id, body=body, length=len(body))


def _validate_body(body: bytes) -> None:
  """Reject anything that is not a single-line JSON object."""
  if not body or b"\n" in body:
    raise SerializationError("Event document is empty or spans several lines")
  try:
    decoded = json.loads(body)
  except ValueError as exc:
    raise SerializationError(f"Event document is not valid JSON: {exc}") from exc
  if not isinstance(decoded, dict):
    raise SerializationError("Event document is not a JSON object")
