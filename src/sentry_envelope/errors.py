from __future__ import annotations

from typing import Optional


class SentryClientError(Exception):
  """
  Base class for every failure surfaced by the envelope client.
  """


class MissingConfigurationError(SentryClientError):
  """Raised when an event is emitted before an API key and project are set."""


class InvalidArgumentError(SentryClientError, ValueError):
  """Raised when a required argument (message, DSN part) is empty."""


class SerializationError(SentryClientError):
  """
  Raised when the event document cannot be encoded as valid JSON.

  No network call is made once this is raised.
  """


class DeliveryError(SentryClientError):
  """
  Raised when the collector could not be reached or answered with a
  non-success status.
  """

  def __init__(self, message: str, status_code: Optional[int] = None) -> None:
    super().__init__(message)
    self.status_code = status_code
