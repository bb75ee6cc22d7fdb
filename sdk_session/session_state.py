from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


DEFAULT_ENVIRONMENT = "_"


@dataclass
class SessionState:
    """Mutable session record owned by one AuthManager.

    `timer_handle` is only touched by RefreshScheduler. `generation` changes on
    every login and logout, so a refresh that started before either can tell
    that its result no longer belongs to the current session.
    """

    token: Optional[str] = None
    base_url: Optional[str] = None
    environment: Optional[str] = None
    timer_handle: Optional[Any] = None
    generation: int = 0

    def is_complete(self) -> bool:
        return bool(self.token and self.base_url and self.environment)

    def request_base_url(self) -> Optional[str]:
        if not self.base_url:
            return None
        root = self.base_url.rstrip("/")
        if self.environment:
            return f"{root}/{self.environment}/"
        return f"{root}/"

    def clear(self) -> None:
        self.token = None
        self.base_url = None
        self.environment = None
        self.generation += 1

    def snapshot(self) -> Dict[str, Optional[str]]:
        return {"url": self.base_url, "environment": self.environment, "token": self.token}


__all__ = ["SessionState", "DEFAULT_ENVIRONMENT"]
