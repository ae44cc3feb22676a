"""
WeChat mini-program API client
Token cache, login, user-data decryption, QR codes, content moderation.
"""

import argparse
import json
import logging
import sys
import threading
from typing import Optional, Union

import requests

from .auth import code_to_session, fetch_access_token, fetch_stable_access_token
from .config import Settings
from .crypto import (
    b64decode_ciphertext,
    b64decode_key,
    decrypt_phone_info,
    decrypt_user_info,
    session_signature,
)
from .errors import RemoteApiError, WechatError, check_response, parse_response
from .qr_code import EnvVersion, QrCode, QrCodeArgs
from .security import MsgSecCheckArgs, MsgSecCheckResult
from .types import (
    API_BASE,
    CHECK_SESSION_KEY_PATH,
    DEFAULT_HEADERS,
    DEFAULT_TIMEOUT_SEC,
    MSG_SEC_CHECK_PATH,
    PHONE_NUMBER_PATH,
    QR_CODE_PATH,
    RESET_SESSION_KEY_PATH,
    AccessToken,
    AppCredentials,
    PhoneInfo,
    SessionCredential,
    UserInfo,
)

logger = logging.getLogger(__name__)

SessionKey = Union[str, SessionCredential]


class WechatClient:
    """Mini-program server API client with a per-instance access-token cache."""

    def __init__(
        self,
        app_id: str,
        app_secret: str,
        use_stable_token: bool = True,
        timeout: float = DEFAULT_TIMEOUT_SEC,
    ):
        self._credentials = AppCredentials(app_id, app_secret)
        self._use_stable_token = use_stable_token
        self._timeout = timeout
        self._token: Optional[AccessToken] = None
        self._lock = threading.Lock()

    @classmethod
    def from_env(cls, **overrides) -> "WechatClient":
        settings = Settings.from_env(**overrides)
        return cls(
            settings.app_id,
            settings.app_secret,
            use_stable_token=settings.use_stable_token,
            timeout=settings.timeout,
        )

    @property
    def app_id(self) -> str:
        return self._credentials.app_id

    # ── Access token ──────────────────────────────────────

    def _cached(self) -> Optional[str]:
        token = self._token
        if token is not None and not token.is_expired():
            return token.access_token
        return None

    def _refresh(self, fetch, force: bool = False) -> str:
        with self._lock:
            # another caller may have refreshed while we waited
            if not force:
                cached = self._cached()
                if cached is not None:
                    return cached
            logger.debug("refreshing access token for %s", self.app_id)
            self._token = fetch()
            return self._token.access_token

    def access_token(self) -> str:
        """Cached regular access token, refreshed when within 5 minutes of expiry."""
        cached = self._cached()
        if cached is not None:
            return cached
        return self._refresh(
            lambda: fetch_access_token(
                self._credentials.app_id,
                self._credentials.app_secret,
                timeout=self._timeout,
            )
        )

    def stable_access_token(self, force_refresh: bool = False) -> str:
        """
        Stable access token. With force_refresh the cache is bypassed and the
        platform is asked to issue a new token.
        """
        if not force_refresh:
            cached = self._cached()
            if cached is not None:
                return cached
        return self._refresh(
            lambda: fetch_stable_access_token(
                self._credentials.app_id,
                self._credentials.app_secret,
                force_refresh=True if force_refresh else None,
                timeout=self._timeout,
            ),
            force=force_refresh,
        )

    def token(self) -> str:
        if self._use_stable_token:
            return self.stable_access_token()
        return self.access_token()

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        **kwargs,
    ) -> requests.Response:
        query = {"access_token": self.token(), **(params or {})}
        headers = {**DEFAULT_HEADERS}
        if "json" in kwargs:
            headers["Content-Type"] = "application/json"
        logger.debug("%s %s", method, path)
        return requests.request(
            method,
            f"{API_BASE}{path}",
            params=query,
            headers=headers,
            timeout=self._timeout,
            **kwargs,
        )

    # ── Login & session ───────────────────────────────────

    def login(self, code: str) -> SessionCredential:
        """Exchange the front end's wx.login() code for a session credential."""
        return code_to_session(
            self._credentials.app_id,
            self._credentials.app_secret,
            code,
            timeout=self._timeout,
        )

    def _session_query(self, session_key: SessionKey, open_id: str) -> dict:
        if isinstance(session_key, SessionCredential):
            session_key = session_key.session_key
        return {
            "openid": open_id,
            "signature": session_signature(session_key),
            "sig_method": "hmac_sha256",
        }

    def check_session_key(self, session_key: SessionKey, open_id: str) -> None:
        """Raise RemoteApiError if the platform no longer accepts session_key."""
        resp = self._request(
            "GET",
            CHECK_SESSION_KEY_PATH,
            params=self._session_query(session_key, open_id),
        )
        check_response(resp)

    def reset_session_key(
        self, session_key: SessionKey, open_id: str
    ) -> SessionCredential:
        resp = self._request(
            "GET",
            RESET_SESSION_KEY_PATH,
            params=self._session_query(session_key, open_id),
        )
        return parse_response(resp, SessionCredential.from_response)

    # ── Encrypted data ────────────────────────────────────

    def _envelope(self, session_key: SessionKey, encrypted_data: str, iv: str):
        if isinstance(session_key, SessionCredential):
            session_key = session_key.session_key
        return (
            b64decode_key(session_key, "session_key"),
            b64decode_key(iv, "iv"),
            b64decode_ciphertext(encrypted_data),
        )

    def decrypt(
        self, session_key: SessionKey, encrypted_data: str, iv: str
    ) -> UserInfo:
        """Decrypt wx.getUserInfo encryptedData; the watermark must name this app."""
        key, iv_bytes, ciphertext = self._envelope(session_key, encrypted_data, iv)
        return decrypt_user_info(key, iv_bytes, ciphertext, self.app_id)

    def decrypt_phone_number(
        self, session_key: SessionKey, encrypted_data: str, iv: str
    ) -> PhoneInfo:
        key, iv_bytes, ciphertext = self._envelope(session_key, encrypted_data, iv)
        return decrypt_phone_info(key, iv_bytes, ciphertext, self.app_id)

    # ── Phone number ──────────────────────────────────────

    def get_phone_number(self, code: str, open_id: Optional[str] = None) -> PhoneInfo:
        body = {"code": code}
        if open_id:
            body["openid"] = open_id
        resp = self._request("POST", PHONE_NUMBER_PATH, json=body)
        return parse_response(
            resp, lambda data: PhoneInfo.from_dict(data["phone_info"])
        )

    # ── QR code ───────────────────────────────────────────

    def qr_code(self, args: QrCodeArgs) -> QrCode:
        """Generate a mini-program code image. Errors come back as JSON."""
        resp = self._request("POST", QR_CODE_PATH, json=args.to_body())
        content_type = resp.headers.get("Content-Type", "")
        if content_type.startswith(("application/json", "text/plain")):
            check_response(resp)
            raise RemoteApiError(None, "expected image, got JSON", resp.status_code)
        if not 200 <= resp.status_code < 300:
            raise RemoteApiError(None, resp.text or "HTTP error", resp.status_code)
        return QrCode(buffer=resp.content)

    # ── Content security ──────────────────────────────────

    def msg_sec_check(self, args: MsgSecCheckArgs) -> MsgSecCheckResult:
        resp = self._request("POST", MSG_SEC_CHECK_PATH, json=args.to_body())
        return parse_response(resp, MsgSecCheckResult.from_dict)


# ── CLI ───────────────────────────────────────────────────


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="WeChat mini-program API client")
    parser.add_argument("--app-id")
    parser.add_argument("--app-secret")
    parser.add_argument("--verbose", action="store_true")

    # accepted after the subcommand too; SUPPRESS keeps the top-level value
    creds = argparse.ArgumentParser(add_help=False)
    creds.add_argument("--app-id", default=argparse.SUPPRESS)
    creds.add_argument("--app-secret", default=argparse.SUPPRESS)

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("login", parents=[creds])
    p.add_argument("--code", required=True)

    p = sub.add_parser("decrypt", parents=[creds])
    p.add_argument("--session-key", required=True)
    p.add_argument("--encrypted-data", required=True)
    p.add_argument("--iv", required=True)
    p.add_argument("--phone", action="store_true")

    p = sub.add_parser("check-session", parents=[creds])
    p.add_argument("--session-key", required=True)
    p.add_argument("--open-id", required=True)

    p = sub.add_parser("phone", parents=[creds])
    p.add_argument("--code", required=True)
    p.add_argument("--open-id")

    p = sub.add_parser("qrcode", parents=[creds])
    p.add_argument("--path", required=True)
    p.add_argument("--width", type=int)
    p.add_argument("--env-version", choices=[v.value for v in EnvVersion])
    p.add_argument("--output", default="qrcode.png")

    p = sub.add_parser("msg-sec-check", parents=[creds])
    p.add_argument("--content", required=True)
    p.add_argument("--scene", type=int, required=True)
    p.add_argument("--openid", required=True)
    p.add_argument("--title")
    p.add_argument("--nickname")
    p.add_argument("--signature")

    return parser


def _qrcode(c: WechatClient, a) -> dict:
    code = c.qr_code(
        QrCodeArgs(path=a.path, width=a.width, env_version=a.env_version)
    )
    return {"output": str(code.save(a.output)), "bytes": len(code.buffer)}


def _check_session(c: WechatClient, a) -> dict:
    c.check_session_key(a.session_key, a.open_id)
    return {"valid": True}


def _decrypt(c: WechatClient, a) -> dict:
    if a.phone:
        return c.decrypt_phone_number(a.session_key, a.encrypted_data, a.iv).to_dict()
    return c.decrypt(a.session_key, a.encrypted_data, a.iv).to_dict()


_DISPATCH = {
    "login": lambda c, a: c.login(a.code).to_dict(),
    "decrypt": _decrypt,
    "check-session": _check_session,
    "phone": lambda c, a: c.get_phone_number(a.code, a.open_id).to_dict(),
    "qrcode": _qrcode,
    "msg-sec-check": lambda c, a: c.msg_sec_check(
        MsgSecCheckArgs(
            content=a.content,
            scene=a.scene,
            openid=a.openid,
            title=a.title,
            nickname=a.nickname,
            signature=a.signature,
        )
    ).to_dict(),
}


def main() -> None:
    """CLI entry point for API operations."""
    args = _build_parser().parse_args()
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr)

    handler = _DISPATCH.get(args.command)
    if not handler:
        print("Unknown command", file=sys.stderr)
        sys.exit(1)

    try:
        client = WechatClient.from_env(app_id=args.app_id, app_secret=args.app_secret)
        result = handler(client, args)
        json.dump(result, sys.stdout, ensure_ascii=False, indent=2)
        print()
    except (WechatError, requests.RequestException) as exc:
        print(json.dumps({"error": str(exc)}, ensure_ascii=False), file=sys.stderr)
        sys.exit(1)
