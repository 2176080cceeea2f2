import json
from typing import Any, Dict, List

import httpx
import pytest

from sentry_envelope.context import HostContext
from sentry_envelope.transport import HttpTransport  # type: ignore[import]


def fake_host_context() -> HostContext:
  return HostContext(
    server_name="build-01",
    arch="x86_64",
    os_name="Linux",
    os_version="6.1.0",
    kernel_version="#1 SMP PREEMPT_DYNAMIC",
    release="0123456789abcdef0123456789abcdef01234567",
    extra={"environ": {"HOME": "/root", "LANG": "C.UTF-8"}},
  )


class RecordingServer:
  """Captures every request and answers with a configurable status."""

  def __init__(self, status_code: int = 200) -> None:
    self.status_code = status_code
    self.requests: List[httpx.Request] = []

  def __call__(self, request: httpx.Request) -> httpx.Response:
    self.requests.append(request)
    return httpx.Response(self.status_code, json={"id": "ok"})

  def lines(self, index: int = -1) -> List[bytes]:
    return self.requests[index].content.split(b"\n")

  def event(self, index: int = -1) -> Dict[str, Any]:
    return json.loads(self.lines(index)[2])


@pytest.fixture
def server() -> RecordingServer:
  return RecordingServer()


@pytest.fixture
def transport(server: RecordingServer) -> HttpTransport:
  return HttpTransport(http_transport=httpx.MockTransport(server))
