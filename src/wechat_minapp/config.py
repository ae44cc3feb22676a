"""
Environment configuration.

Environment variables:
  - WECHAT_APP_ID            (required unless passed explicitly)
  - WECHAT_APP_SECRET        (required unless passed explicitly)
  - WECHAT_HTTP_TIMEOUT      (optional, seconds, default: 10)
  - WECHAT_USE_STABLE_TOKEN  (optional, default: true)
"""

import os
from dataclasses import dataclass, field
from typing import Optional

from .errors import ArgumentError
from .types import DEFAULT_TIMEOUT_SEC

_FALSE_VALUES = {"0", "false", "no", "off"}


def _get_env(name: str, default: Optional[str] = None) -> Optional[str]:
    """Get environment variable, stripped; return default if unset or empty."""
    value = os.getenv(name)
    if value is None:
        return default
    value = value.strip()
    return value or default


@dataclass(frozen=True)
class Settings:
    app_id: str
    app_secret: str = field(repr=False)
    timeout: float = DEFAULT_TIMEOUT_SEC
    use_stable_token: bool = True

    @classmethod
    def from_env(
        cls,
        app_id: Optional[str] = None,
        app_secret: Optional[str] = None,
    ) -> "Settings":
        """Explicit arguments win over the environment."""
        app_id = app_id or _get_env("WECHAT_APP_ID")
        app_secret = app_secret or _get_env("WECHAT_APP_SECRET")
        if not app_id:
            raise ArgumentError("WECHAT_APP_ID")
        if not app_secret:
            raise ArgumentError("WECHAT_APP_SECRET")

        raw_timeout = _get_env("WECHAT_HTTP_TIMEOUT")
        try:
            timeout = float(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT_SEC
        except ValueError:
            raise ArgumentError("WECHAT_HTTP_TIMEOUT", "must be a number")

        stable = _get_env("WECHAT_USE_STABLE_TOKEN", "true").lower()
        return cls(
            app_id=app_id,
            app_secret=app_secret,
            timeout=timeout,
            use_stable_token=stable not in _FALSE_VALUES,
        )
