from .http_transport import HttpTransport, auth_header

__all__ = ["HttpTransport", "auth_header"]
