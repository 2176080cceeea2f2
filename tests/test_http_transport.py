import logging
from unittest.mock import MagicMock, patch

import httpx
import pytest

from sentry_envelope.config import SessionConfig
from sentry_envelope.errors import DeliveryError
from sentry_envelope.models import SDK_NAME, SDK_VERSION
from sentry_envelope.transport import HttpTransport, auth_header  # type: ignore[import]

CONFIG = SessionConfig(api_key="KEY", project_id="42")


def test_auth_header_format():
  assert auth_header("KEY") == (
    f"Sentry sentry_version=7, sentry_key=KEY, sentry_client={SDK_NAME}/{SDK_VERSION}"
  )


def test_send_posts_payload_to_envelope_endpoint(server, transport):
  status = transport.send(b"line1\nline2\nline3", CONFIG)

  assert status == 200
  assert len(server.requests) == 1
  request = server.requests[0]
  assert request.method == "POST"
  assert str(request.url) == "https://sentry.io/api/42/envelope/"
  assert request.content == b"line1\nline2\nline3"
  assert request.headers["X-Sentry-Auth"] == auth_header("KEY")


def test_send_raises_delivery_error_on_error_status(server, transport):
  server.status_code = 429

  with pytest.raises(DeliveryError) as excinfo:
    transport.send(b"{}", CONFIG)

  assert excinfo.value.status_code == 429
  assert len(server.requests) == 1


def test_send_raises_and_logs_when_unreachable(caplog):
  calls = []

  def boom(request):
    calls.append(request)
    raise httpx.ConnectError("collector unavailable", request=request)

  transport = HttpTransport(http_transport=httpx.MockTransport(boom))

  with caplog.at_level(logging.WARNING, logger="sentry_envelope.transport"):
    with pytest.raises(DeliveryError):
      transport.send(b"{}", CONFIG)

  # no retry
  assert len(calls) == 1
  assert any("HTTP transport failed to reach" in msg for msg in caplog.text.splitlines())
  assert "KEY" not in caplog.text


@pytest.mark.parametrize("insecure, verify", [(False, True), (True, False)])
def test_insecure_config_disables_certificate_verification(insecure, verify):
  config = SessionConfig(api_key="KEY", project_id="42", insecure=insecure)

  with patch("sentry_envelope.transport.http_transport.httpx.Client") as mock_client:
    mock_response = MagicMock()
    mock_response.is_success = True
    mock_response.status_code = 200

    mock_instance = MagicMock()
    mock_instance.__enter__.return_value = mock_instance
    mock_instance.__exit__.return_value = None
    mock_instance.post.return_value = mock_response
    mock_client.return_value = mock_instance

    HttpTransport().send(b"{}", config)

  assert mock_client.call_args.kwargs["verify"] is verify
  mock_instance.post.assert_called_once()
