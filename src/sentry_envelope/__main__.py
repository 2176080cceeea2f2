from __future__ import annotations

import argparse
import shlex
import subprocess
import sys
from typing import Callable, List, NoReturn

from .client import SentryClient
from .config import SessionConfig, insecure_from_env
from .errors import (
  DeliveryError,
  InvalidArgumentError,
  MissingConfigurationError,
  SentryClientError,
  SerializationError,
)
from .models import LEVELS

COMMANDS = ("event", "message", "exception", "run")


def main(argv: list[str] | None = None) -> NoReturn:
  argv = list(sys.argv[1:] if argv is None else argv)

  if not argv or argv[0] not in COMMANDS:
    print("Usage: sentry-envelope {event|message|exception|run}", file=sys.stderr)
    print("  event       - Send MESSAGE [SEVERITY]", file=sys.stderr)
    print("  message     - Send TITLE MESSAGE [SEVERITY]", file=sys.stderr)
    print("  exception   - Send TITLE MESSAGE [SEVERITY]", file=sys.stderr)
    print("  run         - Run a command and report it if it fails", file=sys.stderr)
    sys.exit(1)

  if argv[0] == "run":
    _run_command(argv[1:])
  else:
    _run_send(argv[0], argv[1:])


def _add_common_options(parser: argparse.ArgumentParser) -> None:
  parser.add_argument("--key", default=None, help="API key (default: $SENTRY_KEY)")
  parser.add_argument("--project", default=None, help="Project ID (default: $SENTRY_PROJECT)")
  parser.add_argument("--host", default=None, help="Collector host (default: sentry.io)")
  parser.add_argument("--dsn", default=None, help="Data Source Name, instead of key/project/host")
  parser.add_argument(
    "--insecure",
    action="store_true",
    help="Accept any TLS certificate from the collector",
  )
  parser.add_argument(
    "--breadcrumb",
    "-b",
    action="append",
    default=[],
    metavar="MESSAGE",
    help="Breadcrumb to attach to the event; repeat to add more, in order",
  )
  parser.add_argument(
    "--category",
    default="log",
    help="Category of the --breadcrumb entries (default: log)",
  )


def _build_client(parsed: argparse.Namespace) -> SentryClient:
  insecure = True if parsed.insecure else None
  if parsed.dsn:
    config = SessionConfig.from_dsn(
      parsed.dsn,
      insecure=True if parsed.insecure else insecure_from_env(),
    )
  else:
    config = SessionConfig.from_params_or_env(
      api_key=parsed.key,
      project_id=parsed.project,
      host=parsed.host,
      insecure=insecure,
    )

  client = SentryClient(config)
  for crumb in parsed.breadcrumb:
    client.record_breadcrumb(crumb, parsed.category)
  return client


def _emit(send: Callable[[], str]) -> int:
  """Run one send and map failures to exit codes."""
  try:
    event_id = send()
  except (MissingConfigurationError, InvalidArgumentError) as exc:
    print(f"Error: {exc}", file=sys.stderr)
    return 1
  except (SerializationError, DeliveryError) as exc:
    print(f"Error: {exc}", file=sys.stderr)
    return 2

  print(event_id)
  return 0


def _run_send(command: str, args: list[str]) -> None:
  parser = argparse.ArgumentParser(
    prog=f"sentry-envelope {command}",
    description=f"Send one {command} to the collector",
  )
  if command != "event":
    parser.add_argument("title", help="Title (accepted for compatibility, not reported)")
  parser.add_argument("message", help="Event message")
  parser.add_argument(
    "severity",
    nargs="?",
    default=None,
    help=f"One of {', '.join(LEVELS)} (default: info)",
  )
  _add_common_options(parser)
  parsed = parser.parse_args(args)

  try:
    client = _build_client(parsed)
  except InvalidArgumentError as exc:
    print(f"Error: {exc}", file=sys.stderr)
    sys.exit(1)

  if command == "event":
    code = _emit(lambda: client.emit_event(parsed.message, parsed.severity))
  elif command == "message":
    code = _emit(lambda: client.emit_message(parsed.title, parsed.message, parsed.severity))
  else:
    code = _emit(lambda: client.emit_exception(parsed.title, parsed.message, parsed.severity))
  sys.exit(code)


def _run_command(args: list[str]) -> None:
  """
  Run a command and report an error event when it exits non-zero.

  Exits with the command's own exit code.
  """
  parser = argparse.ArgumentParser(
    prog="sentry-envelope run",
    description="Run COMMAND and report a failure to the collector",
  )
  _add_common_options(parser)
  parser.add_argument("command", nargs=argparse.REMAINDER, help="Command to run, after --")
  parsed = parser.parse_args(args)

  command: List[str] = list(parsed.command)
  if command and command[0] == "--":
    command = command[1:]
  if not command:
    parser.error("a command is required, e.g. sentry-envelope run -- make test")

  try:
    client = _build_client(parsed)
  except InvalidArgumentError as exc:
    print(f"Error: {exc}", file=sys.stderr)
    sys.exit(1)

  returncode = _execute(command)
  if returncode != 0:
    message = f"Command failed with exit code {returncode}: {shlex.join(command)}"
    try:
      client.emit_exception("Command exit", message, "error")
    except SentryClientError as exc:
      print(f"sentry-envelope: could not report failure: {exc}", file=sys.stderr)
  sys.exit(returncode)


def _execute(command: List[str]) -> int:
  try:
    return subprocess.run(command, check=False).returncode
  except FileNotFoundError:
    print(f"sentry-envelope: command not found: {command[0]}", file=sys.stderr)
    return 127
  except OSError as exc:
    print(f"sentry-envelope: could not run {command[0]}: {exc}", file=sys.stderr)
    return 126


if __name__ == "__main__":
  main()
