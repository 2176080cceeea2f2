from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import List, Optional

from .errors import InvalidArgumentError
from .models import Breadcrumb, clean_text

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def utc_timestamp(now: Optional[datetime] = None) -> str:
  """Second-precision ISO-8601 UTC timestamp with a trailing 'Z'."""
  moment = now or datetime.now(timezone.utc)
  return moment.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


class BreadcrumbBuffer:
  """
  Ordered, append-only log of breadcrumbs waiting for the next event.

  The buffer does not exist until the first breadcrumb is recorded; a
  snapshot taken before that returns None rather than an empty list, which
  lets the event omit its breadcrumbs block entirely. Recording and
  snapshotting share one lock so a snapshot never splits a concurrent append.
  """

  def __init__(self) -> None:
    self._values: Optional[List[Breadcrumb]] = None
    self._lock = threading.Lock()

  def record(self, message: str, category: Optional[str] = None) -> Breadcrumb:
    if not isinstance(message, str) or (category is not None and not isinstance(category, str)):
      raise InvalidArgumentError("Breadcrumb message and category must be strings")
    if not message:
      raise InvalidArgumentError("Breadcrumb message must not be empty")

    crumb = Breadcrumb(
      timestamp=utc_timestamp(),
      message=clean_text(message),
      category=clean_text(category or "log"),
    )
    with self._lock:
      if self._values is None:
        self._values = []
      self._values.append(crumb)
    return crumb

  def snapshot_and_clear(self) -> Optional[List[Breadcrumb]]:
    with self._lock:
      values, self._values = self._values, None
    return values

  def reset(self) -> None:
    with self._lock:
      self._values = None

  @property
  def exists(self) -> bool:
    with self._lock:
      return self._values is not None

  def __len__(self) -> int:
    with self._lock:
      return len(self._values) if self._values is not None else 0
