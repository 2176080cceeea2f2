"""
Automatic reporting of uncaught exceptions.

install_excepthook() wraps sys.excepthook and threading.excepthook so an
uncaught error is sent as an event before the previous hook runs.
"""

from __future__ import annotations

import logging
import os
import sys
import threading
import traceback
from types import TracebackType
from typing import Any, Callable, Optional, Type

from .client import SentryClient
from .errors import SentryClientError

logger = logging.getLogger(__name__)

FAILURE_TITLE = "Python exit"

_previous_excepthook: Optional[Callable[..., Any]] = None
_previous_threading_hook: Optional[Callable[..., Any]] = None


def describe_failure(
  exc_type: Type[BaseException],
  exc: Optional[BaseException],
  tb: Optional[TracebackType],
) -> str:
  """
  Summarise where an exception was raised, e.g.
  "Error on line 12 in job.py: KeyError: 'name'".
  """
  summary = "".join(traceback.format_exception_only(exc_type, exc)).strip()
  frames = traceback.extract_tb(tb) if tb is not None else []
  if not frames:
    return f"Error: {summary}"
  last = frames[-1]
  return f"Error on line {last.lineno} in {os.path.basename(last.filename)}: {summary}"


def _report(
  client: SentryClient,
  exc_type: Type[BaseException],
  exc: Optional[BaseException],
  tb: Optional[TracebackType],
) -> None:
  if issubclass(exc_type, KeyboardInterrupt):
    return
  try:
    client.emit_exception(FAILURE_TITLE, describe_failure(exc_type, exc, tb), "error")
  except SentryClientError as err:
    logger.warning("Could not report uncaught %s: %s", exc_type.__name__, err)


def install_excepthook(client: SentryClient) -> None:
  global _previous_excepthook, _previous_threading_hook

  if _previous_excepthook is not None:
    uninstall_excepthook()

  previous = sys.excepthook
  previous_threading = threading.excepthook

  def _excepthook(exc_type, exc, tb):
    _report(client, exc_type, exc, tb)
    previous(exc_type, exc, tb)

  def _threading_excepthook(args):
    if args.exc_type is not SystemExit:
      _report(client, args.exc_type, args.exc_value, args.exc_traceback)
    previous_threading(args)

  _previous_excepthook = previous
  _previous_threading_hook = previous_threading
  sys.excepthook = _excepthook
  threading.excepthook = _threading_excepthook


def uninstall_excepthook() -> None:
  global _previous_excepthook, _previous_threading_hook

  if _previous_excepthook is not None:
    sys.excepthook = _previous_excepthook
  if _previous_threading_hook is not None:
    threading.excepthook = _previous_threading_hook
  _previous_excepthook = None
  _previous_threading_hook = None
