"""Session lifecycle: login / logout / refresh / refresh_if_needed.

- Caller-initiated calls (login, refresh) raise; the caller handles the error.
- The background path (refresh_if_needed driven by RefreshScheduler) never raises
  transport failures; they go to `on_auto_refresh_error` instead.
- SessionState is only written under `self._lock`; transport calls happen outside it.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Mapping, Optional

from .client_config import ClientConfig
from .errors import MalformedResponseError, ParameterError, require
from .http_client import HttpTransport, Request, Transport
from .refresh_scheduler import (
    MAX_CONSECUTIVE_FAILURES,
    REFRESH_INTERVAL,
    RefreshScheduler,
    RepeatingTimer,
    TimerFactory,
)
from .session_state import DEFAULT_ENVIRONMENT, SessionState
from .token_inspector import Claims, decode, now_utc


REFRESH_THRESHOLD = timedelta(seconds=30)

AUTHENTICATE_PATH = "/auth/authenticate"
REFRESH_PATH = "/auth/refresh"

logger = logging.getLogger(__name__)


def extract_token(operation: str, response: Any) -> str:
    try:
        token = response["data"]["token"]
    except (KeyError, TypeError) as exc:
        raise MalformedResponseError(operation, response) from exc
    if not isinstance(token, str) or not token:
        raise MalformedResponseError(operation, response)
    return token


class AuthManager:
    def __init__(
        self,
        url: Optional[str] = None,
        *,
        environment: Optional[str] = DEFAULT_ENVIRONMENT,
        transport: Optional[Transport] = None,
        now_provider: Callable[[], datetime] = now_utc,
        refresh_threshold: timedelta = REFRESH_THRESHOLD,
        refresh_interval: timedelta = REFRESH_INTERVAL,
        max_consecutive_failures: Optional[int] = MAX_CONSECUTIVE_FAILURES,
        timer_factory: TimerFactory = RepeatingTimer,
        on_auto_refresh_error: Optional[Callable[[BaseException], None]] = None,
    ) -> None:
        self.state = SessionState(base_url=url, environment=environment)
        self.transport: Transport = transport or HttpTransport()
        self.now = now_provider
        self.refresh_threshold = refresh_threshold
        self.on_auto_refresh_error = on_auto_refresh_error
        self._lock = threading.RLock()
        self.scheduler = RefreshScheduler(
            self.state,
            self._on_timer_tick,
            interval=refresh_interval,
            timer_factory=timer_factory,
            max_consecutive_failures=max_consecutive_failures,
        )

    @classmethod
    def from_config(cls, config: ClientConfig, **kwargs: Any) -> "AuthManager":
        kwargs.setdefault("transport", HttpTransport(timeout=config.timeout))
        return cls(
            config.url,
            environment=config.environment,
            refresh_threshold=timedelta(seconds=config.refresh_threshold),
            refresh_interval=timedelta(seconds=config.refresh_interval),
            max_consecutive_failures=config.max_consecutive_failures,
            **kwargs,
        )

    # --- read-only views ---

    @property
    def token(self) -> Optional[str]:
        return self.state.token

    @property
    def url(self) -> Optional[str]:
        return self.state.base_url

    @property
    def environment(self) -> Optional[str]:
        return self.state.environment

    @property
    def payload(self) -> Claims:
        return decode(self.state.token)

    @property
    def logged_in(self) -> bool:
        if not self.state.is_complete():
            return False
        remaining = self.payload.seconds_until_expiry(self.now())
        return remaining is not None and remaining > 0

    # --- requests ---

    def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
        *,
        operation: str = "request",
    ) -> Dict[str, Any]:
        with self._lock:
            base_url = self.state.request_base_url()
            token = self.state.token
        if not base_url:
            raise ParameterError(operation, "url")
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        req = Request(
            method=method,
            url=path,
            base_url=base_url,
            params=dict(params or {}),
            data=dict(data or {}),
            headers=headers,
        )
        return self.transport.execute(req)

    # --- lifecycle ---

    def login(self, credentials: Optional[Mapping[str, Any]] = None) -> Dict[str, Optional[str]]:
        if credentials is None:
            raise ParameterError("login", "credentials")
        require("login", "credentials.email", credentials.get("email"))
        require("login", "credentials.password", credentials.get("password"))

        with self._lock:
            if credentials.get("url"):
                self.state.base_url = credentials["url"]
            if credentials.get("environment"):
                self.state.environment = credentials["environment"]
            if not self.state.base_url:
                raise ParameterError("login", "credentials.url")
            generation = self.state.generation

        response = self.request(
            "post",
            AUTHENTICATE_PATH,
            data={"email": credentials["email"], "password": credentials["password"]},
            operation="login",
        )
        token = extract_token("login", response)

        with self._lock:
            if self.state.generation != generation:
                # Logged out (or logged in again) while authenticating.
                logger.info("session changed during login, discarding token")
                return self.state.snapshot()
            self.state.token = token
            self.state.generation += 1
            result = self.state.snapshot()
        logger.info("logged in to %s (environment=%s)", result["url"], result["environment"])

        self.scheduler.record_success()
        if credentials.get("persist"):
            self.scheduler.start()
        return result

    def logout(self) -> None:
        self.scheduler.stop()
        with self._lock:
            was_logged_in = self.state.token is not None
            self.state.clear()
        if was_logged_in:
            logger.info("logged out")

    def close(self) -> None:
        """Stop background refresh, keeping the session values."""

        self.scheduler.stop()

    def refresh(self, token: Optional[str] = None) -> Dict[str, Any]:
        require("refresh", "token", token)
        return self.request("post", REFRESH_PATH, data={"token": token}, operation="refresh")

    def refresh_if_needed(self) -> None:
        self._refresh_if_needed()

    def _on_timer_tick(self) -> None:
        # Only timer-driven attempts count towards the consecutive failure bound.
        if self._refresh_if_needed(on_failure=self.scheduler.record_failure):
            self.scheduler.record_success()

    def _refresh_if_needed(self, on_failure: Optional[Callable[[], None]] = None) -> bool:
        """Returns True only when a new token was stored."""

        with self._lock:
            if not self.state.is_complete():
                return False
            token = self.state.token
            generation = self.state.generation

        remaining = decode(token).seconds_until_expiry(self.now())
        if remaining is None or remaining > self.refresh_threshold.total_seconds():
            return False

        logger.debug("token expires in %.1fs, refreshing", remaining)
        try:
            new_token = extract_token("refresh", self.refresh(token))
        except Exception as exc:  # noqa: BLE001
            logger.warning("background token refresh failed: %r", exc)
            if on_failure is not None:
                on_failure()
            self._report_auto_refresh_error(exc)
            return False

        with self._lock:
            if self.state.generation != generation:
                logger.debug("session changed during refresh, discarding new token")
                return False
            self.state.token = new_token
        return True

    def _report_auto_refresh_error(self, error: BaseException) -> None:
        callback = self.on_auto_refresh_error
        if callback is not None:
            callback(error)


__all__ = ["AuthManager", "REFRESH_THRESHOLD", "AUTHENTICATE_PATH", "REFRESH_PATH", "extract_token"]
