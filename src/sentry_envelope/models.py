from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from . import __version__

SDK_NAME = "sentry-envelope-python"
SDK_VERSION = __version__

# Canonical severities understood by the collector. The builder does not
# enforce membership; see EventBuilder.build.
LEVELS = ("fatal", "error", "warning", "info", "debug")


def clean_text(value: str) -> str:
  """
  Make a string encodable as UTF-8.

  Undecodable bytes that os.environ or sys.argv carry as lone surrogates
  become U+FFFD instead of breaking serialization of the whole event.
  """
  return value.encode("utf-8", "surrogatepass").decode("utf-8", "replace")


class Breadcrumb(BaseModel):
  """
  One timestamped diagnostic note attached to the next event.
  """

  timestamp: str = Field(..., description="UTC instant, e.g. 2024-01-31T12:00:00Z")
  message: str
  category: str = "log"


class BreadcrumbValues(BaseModel):
  values: List[Breadcrumb]


class LogEntry(BaseModel):
  message: str


class DeviceContext(BaseModel):
  type: str = "device"
  arch: str


class OsContext(BaseModel):
  type: str = "os"
  name: str
  version: str
  kernel_version: str


class Contexts(BaseModel):
  device: DeviceContext
  os: OsContext


class SdkInfo(BaseModel):
  name: str = SDK_NAME
  version: str = SDK_VERSION


class EventDocument(BaseModel):
  """
  Event payload as sent to the collector.

  Field order is the key order of the serialized document. `breadcrumbs`
  stays None when nothing was recorded so the key is omitted entirely.
  """

  event_id: str
  platform: str = "native"
  logentry: LogEntry
  timestamp: str
  server_name: str
  environment: str = "production"
  level: str = "info"
  contexts: Contexts
  breadcrumbs: Optional[BreadcrumbValues] = None
  extra: Dict[str, Any] = Field(default_factory=dict)
  release: str = "unknown"
  sdk: SdkInfo = Field(default_factory=SdkInfo)


class EnvelopeHeader(BaseModel):
  event_id: str


class ItemHeader(BaseModel):
  type: str = "event"
  length: int
