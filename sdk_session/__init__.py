"""Session-management core of the API client: bearer token lifecycle and background refresh."""

from .auth_manager import AuthManager, REFRESH_THRESHOLD
from .client_config import ClientConfig, load_config
from .errors import MalformedResponseError, ParameterError, SdkError, TransportError
from .http_client import HttpTransport, Request, Transport
from .refresh_scheduler import REFRESH_INTERVAL, RefreshScheduler, RepeatingTimer
from .session_state import SessionState
from .token_inspector import Claims, decode

__all__ = [
    "AuthManager",
    "REFRESH_THRESHOLD",
    "ClientConfig",
    "load_config",
    "SdkError",
    "ParameterError",
    "TransportError",
    "MalformedResponseError",
    "HttpTransport",
    "Request",
    "Transport",
    "REFRESH_INTERVAL",
    "RefreshScheduler",
    "RepeatingTimer",
    "SessionState",
    "Claims",
    "decode",
]
