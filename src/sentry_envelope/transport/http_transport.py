from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from ..config import SessionConfig
from ..errors import DeliveryError
from ..models import SDK_NAME, SDK_VERSION

_logger = logging.getLogger("sentry_envelope.transport")


def auth_header(api_key: str) -> str:
  return (
    f"Sentry sentry_version=7, sentry_key={api_key}, "
    f"sentry_client={SDK_NAME}/{SDK_VERSION}"
  )


@dataclass
class HttpTransport:
  """
  Single-shot HTTP transport that posts one envelope to the collector.

  Delivery is at-most-once: there is no retry loop and no timeout override
  beyond httpx's default. Failures are logged at WARNING level and raised
  as DeliveryError so the caller can fall back to local logging.

  `http_transport` lets callers (and tests) plug in any httpx transport,
  e.g. httpx.MockTransport.
  """

  http_transport: Optional[httpx.BaseTransport] = None

  def send(self, payload: bytes, config: SessionConfig) -> int:
    url = config.envelope_url
    headers = {
      "Content-Type": "application/x-sentry-envelope",
      "X-Sentry-Auth": auth_header(config.api_key or ""),
    }

    if config.insecure:
      _logger.debug("TLS certificate verification disabled for %s", config.host)

    try:
      with httpx.Client(
        verify=not config.insecure,
        transport=self.http_transport,
      ) as client:
        response = client.post(url, content=payload, headers=headers)
    except httpx.HTTPError as exc:
      _logger.warning("sentry_envelope HTTP transport failed to reach %s: %s", url, exc)
      raise DeliveryError(f"Could not reach {url}: {exc}") from exc

    if not response.is_success:
      _logger.warning(
        "sentry_envelope HTTP transport got status %s from %s",
        response.status_code,
        url,
      )
      raise DeliveryError(
        f"Collector answered {response.status_code} for {url}",
        status_code=response.status_code,
      )

    _logger.debug("Delivered %d bytes to %s (status %s)", len(payload), url, response.status_code)
    return response.status_code
