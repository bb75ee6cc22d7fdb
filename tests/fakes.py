"""Test doubles: recording transport, manual clock/timers, token factory."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

import jwt

from sdk_session.http_client import Request


UTC = timezone.utc
SECRET = "secret-string-used-only-by-the-test-suite"
BASE_TIME = datetime(2025, 1, 1, 0, 0, tzinfo=UTC)


def make_token(expires_in: Optional[timedelta] = None, now: datetime = BASE_TIME, **claims: Any) -> str:
    payload: Dict[str, Any] = {"foo": "bar", **claims}
    if expires_in is not None:
        payload["exp"] = int((now + expires_in).timestamp())
    return jwt.encode(payload, SECRET, algorithm="HS256")


def token_response(token: str = "abcdef") -> Dict[str, Any]:
    return {"data": {"token": token}}


class StubTransport:
    def __init__(self, response: Any = None) -> None:
        self.requests: List[Request] = []
        self.response = token_response() if response is None else response
        self.error: Optional[BaseException] = None
        self.before_return: Optional[Callable[[], None]] = None

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def execute(self, request: Request) -> Dict[str, Any]:
        self.requests.append(request)
        if self.before_return is not None:
            self.before_return()
        if self.error is not None:
            raise self.error
        return self.response


class ManualTimer:
    def __init__(self, clock: "FakeClock", interval: float, function: Callable[[], None]) -> None:
        self.clock = clock
        self.interval = interval
        self.function = function
        self.next_fire_at: Optional[datetime] = None
        self.cancelled = False

    def start(self) -> None:
        self.next_fire_at = self.clock.now + timedelta(seconds=self.interval)
        self.clock.timers.append(self)

    def cancel(self) -> None:
        self.cancelled = True


class FakeClock:
    """Manual time source; `advance` fires due ManualTimers in order."""

    def __init__(self, now: datetime = BASE_TIME) -> None:
        self.now = now
        self.timers: List[ManualTimer] = []

    def __call__(self) -> datetime:
        return self.now

    def timer_factory(self, interval: float, function: Callable[[], None]) -> ManualTimer:
        return ManualTimer(self, interval, function)

    def active_timers(self) -> List[ManualTimer]:
        return [t for t in self.timers if not t.cancelled]

    def advance(self, seconds: float) -> None:
        target = self.now + timedelta(seconds=seconds)
        while True:
            due = [t for t in self.active_timers() if t.next_fire_at is not None and t.next_fire_at <= target]
            if not due:
                break
            timer = min(due, key=lambda t: t.next_fire_at)
            self.now = timer.next_fire_at
            timer.next_fire_at = timer.next_fire_at + timedelta(seconds=timer.interval)
            timer.function()
        self.now = target


__all__ = [
    "UTC",
    "BASE_TIME",
    "make_token",
    "token_response",
    "StubTransport",
    "ManualTimer",
    "FakeClock",
]
