"""
wechat_minapp — WeChat mini-program server API client.
"""

from .auth import code_to_session, fetch_access_token, fetch_stable_access_token
from .client import WechatClient
from .crypto import decrypt_envelope, decrypt_user_info
from .errors import (
    ArgumentError,
    CipherFailure,
    DecryptionError,
    InvalidKeyMaterial,
    MalformedPayload,
    PayloadMismatch,
    RemoteApiError,
    WechatError,
)
from .qr_code import EnvVersion, QrCode, QrCodeArgs, Rgb
from .security import Label, MsgSecCheckArgs, MsgSecCheckResult, Scene, Suggest
from .types import AccessToken, PhoneInfo, SessionCredential, UserInfo, Watermark

__all__ = [
    "AccessToken",
    "ArgumentError",
    "CipherFailure",
    "DecryptionError",
    "EnvVersion",
    "InvalidKeyMaterial",
    "Label",
    "MalformedPayload",
    "MsgSecCheckArgs",
    "MsgSecCheckResult",
    "PayloadMismatch",
    "PhoneInfo",
    "QrCode",
    "QrCodeArgs",
    "RemoteApiError",
    "Rgb",
    "Scene",
    "SessionCredential",
    "Suggest",
    "UserInfo",
    "Watermark",
    "WechatClient",
    "WechatError",
    "code_to_session",
    "decrypt_envelope",
    "decrypt_user_info",
    "fetch_access_token",
    "fetch_stable_access_token",
]
__version__ = "0.1.0"
