"""
sentry_envelope

Minimal Sentry client: accumulate breadcrumbs, then emit one event framed
as an envelope and delivered with a single HTTP POST.
"""

__version__ = "0.2.0"

from .client import SentryClient, init  # noqa: E402
from .config import SessionConfig  # noqa: E402
from .errors import (  # noqa: E402
  DeliveryError,
  InvalidArgumentError,
  MissingConfigurationError,
  SentryClientError,
  SerializationError,
)
from .hooks import install_excepthook, uninstall_excepthook  # noqa: E402
from .logging_setup import setup_logging  # noqa: E402

__all__ = [
  "DeliveryError",
  "InvalidArgumentError",
  "MissingConfigurationError",
  "SentryClient",
  "SentryClientError",
  "SerializationError",
  "SessionConfig",
  "init",
  "install_excepthook",
  "setup_logging",
  "uninstall_excepthook",
]
