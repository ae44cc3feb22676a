"""
WeChat mini-program credentials
Access-token issuance and login code exchange.
"""

import argparse
import json
import logging
import sys
from typing import Optional

import requests

from .config import Settings
from .errors import WechatError, parse_response
from .types import (
    ACCESS_TOKEN_PATH,
    API_BASE,
    CODE_TO_SESSION_PATH,
    DEFAULT_HEADERS,
    DEFAULT_TIMEOUT_SEC,
    STABLE_ACCESS_TOKEN_PATH,
    AccessToken,
    SessionCredential,
)

logger = logging.getLogger(__name__)


def _get(
    path: str, params: dict, timeout: float = DEFAULT_TIMEOUT_SEC
) -> requests.Response:
    return requests.get(
        f"{API_BASE}{path}",
        params=params,
        headers={**DEFAULT_HEADERS},
        timeout=timeout,
    )


def _post(
    path: str,
    headers: Optional[dict] = None,
    timeout: float = DEFAULT_TIMEOUT_SEC,
    **kwargs,
) -> requests.Response:
    merged = {**DEFAULT_HEADERS, "Content-Type": "application/json"}
    if headers:
        merged.update(headers)
    return requests.post(
        f"{API_BASE}{path}", headers=merged, timeout=timeout, **kwargs
    )


def fetch_access_token(
    app_id: str, secret: str, timeout: float = DEFAULT_TIMEOUT_SEC
) -> AccessToken:
    """Issue a regular access token."""
    logger.debug("requesting access token for %s", app_id)
    resp = _get(
        ACCESS_TOKEN_PATH,
        {"grant_type": "client_credential", "appid": app_id, "secret": secret},
        timeout=timeout,
    )
    return parse_response(resp, AccessToken.from_response)


def fetch_stable_access_token(
    app_id: str,
    secret: str,
    force_refresh: Optional[bool] = None,
    timeout: float = DEFAULT_TIMEOUT_SEC,
) -> AccessToken:
    """Issue a stable access token; force_refresh invalidates the old one upstream."""
    body: dict[str, object] = {
        "grant_type": "client_credential",
        "appid": app_id,
        "secret": secret,
    }
    if force_refresh is not None:
        body["force_refresh"] = force_refresh

    logger.debug(
        "requesting stable access token for %s (force_refresh=%s)",
        app_id,
        force_refresh,
    )
    resp = _post(STABLE_ACCESS_TOKEN_PATH, json=body, timeout=timeout)
    return parse_response(resp, AccessToken.from_response)


def code_to_session(
    app_id: str, secret: str, code: str, timeout: float = DEFAULT_TIMEOUT_SEC
) -> SessionCredential:
    """Exchange a wx.login() code for the user's session credential."""
    resp = _get(
        CODE_TO_SESSION_PATH,
        {
            "appid": app_id,
            "secret": secret,
            "js_code": code,
            "grant_type": "authorization_code",
        },
        timeout=timeout,
    )
    credential = parse_response(resp, SessionCredential.from_response)
    logger.debug("code2session ok: %r", credential)
    return credential


def main() -> None:
    """CLI entry point: fetch an access token and print it as JSON."""
    parser = argparse.ArgumentParser(description="Fetch a WeChat access token")
    parser.add_argument("--app-id")
    parser.add_argument("--app-secret")
    parser.add_argument("--stable", action="store_true")
    parser.add_argument("--force-refresh", action="store_true")
    args = parser.parse_args()

    try:
        settings = Settings.from_env(app_id=args.app_id, app_secret=args.app_secret)
        if args.stable or args.force_refresh:
            token = fetch_stable_access_token(
                settings.app_id,
                settings.app_secret,
                force_refresh=args.force_refresh or None,
                timeout=settings.timeout,
            )
        else:
            token = fetch_access_token(
                settings.app_id, settings.app_secret, timeout=settings.timeout
            )
    except (WechatError, requests.RequestException) as exc:
        print(json.dumps({"error": str(exc)}), file=sys.stderr)
        sys.exit(1)

    json.dump(token.to_dict(), sys.stdout, indent=2)
    print()
