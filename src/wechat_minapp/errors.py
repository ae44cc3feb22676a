"""
Error types for the WeChat mini-program client.

Remote failures (HTTP status or vendor errcode) raise RemoteApiError.
Local decryption failures raise a DecryptionError subclass, so callers can
tell an invalid payload apart from a failed remote call.
"""

from enum import IntEnum
from typing import Callable, Optional, TypeVar

import requests

T = TypeVar("T")


class ErrorCode(IntEnum):
    SYSTEM_BUSY = -1
    INVALID_CREDENTIAL = 40001
    INVALID_GRANT_TYPE = 40002
    INVALID_APP_ID = 40013
    INVALID_CODE = 40029
    INVALID_PARAMETER = 40097
    INVALID_SECRET = 40125
    FORBIDDEN_IP = 40164
    CODE_BLOCKED = 40226
    SECRET_FROZEN = 40243
    MISSING_ACCESS_TOKEN = 41001
    MISSING_APP_ID = 41002
    MISSING_SECRET = 41004
    MISSING_CODE = 41008
    REQUIRED_POST_METHOD = 43002
    DAILY_LIMIT_EXCEEDED = 45009
    RATE_LIMIT_EXCEEDED = 45011
    FORBIDDEN_TOKEN = 50004
    ACCOUNT_FROZEN = 50007
    THIRD_PARTY_TOKEN = 61024
    SESSION_KEY_EXPIRED = 87007
    INVALID_SIGNATURE_METHOD = 87008
    INVALID_SIGNATURE = 87009
    CONFIRM_REQUIRED = 89503
    REQUEST_DENIED_ONE_DAY = 89506
    REQUEST_DENIED_ONE_HOUR = 89507


ERROR_DESCRIPTIONS = {
    ErrorCode.SYSTEM_BUSY: "system busy, retry later",
    ErrorCode.INVALID_CREDENTIAL: "invalid AppSecret or access_token",
    ErrorCode.INVALID_GRANT_TYPE: "invalid grant type",
    ErrorCode.INVALID_APP_ID: "invalid AppID",
    ErrorCode.INVALID_CODE: "invalid or expired login code",
    ErrorCode.INVALID_PARAMETER: "invalid parameter",
    ErrorCode.INVALID_SECRET: "invalid AppSecret",
    ErrorCode.FORBIDDEN_IP: "caller IP is not whitelisted",
    ErrorCode.CODE_BLOCKED: "high-risk user, login blocked",
    ErrorCode.SECRET_FROZEN: "AppSecret is frozen",
    ErrorCode.MISSING_ACCESS_TOKEN: "missing access_token",
    ErrorCode.MISSING_APP_ID: "missing appid",
    ErrorCode.MISSING_SECRET: "missing secret",
    ErrorCode.MISSING_CODE: "missing code",
    ErrorCode.REQUIRED_POST_METHOD: "POST required",
    ErrorCode.DAILY_LIMIT_EXCEEDED: "daily quota exceeded",
    ErrorCode.RATE_LIMIT_EXCEEDED: "rate limit exceeded",
    ErrorCode.FORBIDDEN_TOKEN: "token endpoint forbidden",
    ErrorCode.ACCOUNT_FROZEN: "account frozen",
    ErrorCode.THIRD_PARTY_TOKEN: "third-party platform token required",
    ErrorCode.SESSION_KEY_EXPIRED: "session_key does not exist or expired",
    ErrorCode.INVALID_SIGNATURE_METHOD: "invalid sig_method",
    ErrorCode.INVALID_SIGNATURE: "invalid signature",
    ErrorCode.CONFIRM_REQUIRED: "administrator confirmation required",
    ErrorCode.REQUEST_DENIED_ONE_DAY: "request denied, retry in 24 hours",
    ErrorCode.REQUEST_DENIED_ONE_HOUR: "request denied, retry in 1 hour",
}


class WechatError(Exception):
    """Base class for every error raised by this package."""


class RemoteApiError(WechatError):
    """
    The platform rejected a call: non-2xx status, unusable body, or non-zero
    errcode. errcode is None when the vendor sent no errcode at all.
    """

    def __init__(
        self,
        errcode: Optional[int],
        errmsg: str,
        status_code: Optional[int] = None,
    ):
        self.errcode = errcode
        self.errmsg = errmsg
        self.status_code = status_code
        if errcode is None:
            super().__init__(f"[HTTP {status_code}] {errmsg}")
        else:
            super().__init__(f"[{errcode}] {errmsg}")

    @property
    def code(self) -> Optional[ErrorCode]:
        if self.errcode is None:
            return None
        try:
            return ErrorCode(self.errcode)
        except ValueError:
            return None

    @property
    def description(self) -> str:
        code = self.code
        if code is not None:
            return ERROR_DESCRIPTIONS[code]
        if self.errcode is None:
            return f"HTTP {self.status_code}: {self.errmsg}"
        return self.errmsg


class ArgumentError(WechatError, ValueError):
    """A request argument record failed validation."""

    def __init__(self, field: str, reason: str = "is required"):
        self.field = field
        super().__init__(f"{field} {reason}")


class DecryptionError(WechatError):
    """Base class for local envelope decryption failures."""


class InvalidKeyMaterial(DecryptionError):
    pass


class CipherFailure(DecryptionError):
    pass


class MalformedPayload(DecryptionError):
    pass


class PayloadMismatch(DecryptionError):
    """Watermark appid differs from the configured app: not issued for us."""

    def __init__(self, expected: str, actual: str):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"payload not issued for this application "
            f"(expected {expected!r}, got {actual!r})"
        )


def check_response(resp: requests.Response) -> dict:
    """Return the JSON body of a vendor response or raise RemoteApiError."""
    if not 200 <= resp.status_code < 300:
        raise RemoteApiError(None, resp.text or "HTTP error", resp.status_code)

    try:
        body = resp.json()
    except ValueError:
        raise RemoteApiError(None, "response is not JSON", resp.status_code)

    if not isinstance(body, dict):
        raise RemoteApiError(None, "response is not a JSON object", resp.status_code)

    errcode = body.get("errcode", 0)
    if errcode:
        raise RemoteApiError(errcode, body.get("errmsg", ""), resp.status_code)
    return body


def parse_response(resp: requests.Response, build: Callable[[dict], T]) -> T:
    """check_response, then build a result; a body of the wrong shape is remote."""
    body = check_response(resp)
    try:
        return build(body)
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise RemoteApiError(
            None, f"unexpected response shape: {exc!r}", resp.status_code
        ) from exc
