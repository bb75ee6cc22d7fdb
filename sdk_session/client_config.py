from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Mapping, Optional

from .http_client import DEFAULT_TIMEOUT
from .refresh_scheduler import MAX_CONSECUTIVE_FAILURES
from .session_state import DEFAULT_ENVIRONMENT


CONFIG_FILENAME = "sdk-session.json"

ENV_URL = "SDK_URL"
ENV_ENVIRONMENT = "SDK_ENV"
ENV_TIMEOUT = "SDK_TIMEOUT"

logger = logging.getLogger(__name__)


@dataclass
class ClientConfig:
    url: Optional[str] = None
    environment: str = DEFAULT_ENVIRONMENT
    timeout: float = DEFAULT_TIMEOUT
    refresh_interval: float = 10.0
    refresh_threshold: float = 30.0
    max_consecutive_failures: Optional[int] = MAX_CONSECUTIVE_FAILURES

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ClientConfig":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def default_config_path() -> str:
    return os.path.join(os.getcwd(), CONFIG_FILENAME)


def load_config(path: Optional[str] = None, environ: Optional[Mapping[str, str]] = None) -> ClientConfig:
    """Read the JSON config file, then apply SDK_* environment overrides.

    A missing or unreadable file yields the defaults.
    """

    p = (path or "").strip() or default_config_path()
    data: Dict[str, Any] = {}
    try:
        with open(p, "r", encoding="utf-8") as f:
            loaded = json.load(f)
        data = loaded if isinstance(loaded, dict) else {}
    except FileNotFoundError:
        pass
    except (OSError, ValueError) as exc:
        logger.warning("ignoring unreadable config %s: %s", p, exc)

    env = os.environ if environ is None else environ
    if env.get(ENV_URL):
        data["url"] = env[ENV_URL]
    if env.get(ENV_ENVIRONMENT):
        data["environment"] = env[ENV_ENVIRONMENT]
    if env.get(ENV_TIMEOUT):
        try:
            data["timeout"] = float(env[ENV_TIMEOUT])
        except ValueError:
            logger.warning("ignoring invalid %s=%r", ENV_TIMEOUT, env[ENV_TIMEOUT])

    return ClientConfig.from_mapping(data)


def save_config(path: str, config: ClientConfig) -> None:
    p = (path or "").strip() or default_config_path()
    parent = os.path.dirname(p)
    if parent:
        os.makedirs(parent, exist_ok=True)

    tmp = p + ".tmp"
    with open(tmp, "w", encoding="utf-8") as f:
        json.dump(config.to_dict(), f, ensure_ascii=False, indent=2)
    os.replace(tmp, p)


__all__ = ["ClientConfig", "default_config_path", "load_config", "save_config"]
