"""
Shared types for the WeChat mini-program client.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional

API_BASE = "https://api.weixin.qq.com"

ACCESS_TOKEN_PATH = "/cgi-bin/token"
STABLE_ACCESS_TOKEN_PATH = "/cgi-bin/stable_token"
CODE_TO_SESSION_PATH = "/sns/jscode2session"
CHECK_SESSION_KEY_PATH = "/wxa/checksession"
RESET_SESSION_KEY_PATH = "/wxa/resetusersessionkey"
PHONE_NUMBER_PATH = "/wxa/business/getuserphonenumber"
QR_CODE_PATH = "/wxa/getwxacode"
MSG_SEC_CHECK_PATH = "/wxa/msg_sec_check"

DEFAULT_HEADERS = {
    "User-Agent": "wechat-minapp/0.1.0",
    "Accept": "application/json, */*",
}

DEFAULT_TIMEOUT_SEC = 10.0

# Tokens this close to expiry are refreshed early.
TOKEN_REFRESH_MARGIN = timedelta(minutes=5)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class AppCredentials:
    app_id: str
    app_secret: str = field(repr=False)


@dataclass(frozen=True)
class AccessToken:
    access_token: str = field(repr=False)
    expires_at: datetime

    @classmethod
    def from_response(cls, body: dict) -> "AccessToken":
        """Build from a token endpoint body, anchoring expires_in to now."""
        return cls(
            access_token=body["access_token"],
            expires_at=_utcnow() + timedelta(seconds=int(body["expires_in"])),
        )

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        now = now or _utcnow()
        return self.expires_at - now < TOKEN_REFRESH_MARGIN

    def to_dict(self) -> dict[str, str]:
        return {
            "access_token": self.access_token,
            "expires_at": self.expires_at.isoformat(),
        }


@dataclass(frozen=True)
class SessionCredential:
    open_id: str
    session_key: str = field(repr=False)
    union_id: Optional[str] = None

    @classmethod
    def from_response(cls, body: dict) -> "SessionCredential":
        return cls(
            open_id=body["openid"],
            session_key=body["session_key"],
            union_id=body.get("unionid"),
        )

    def to_dict(self) -> dict[str, Optional[str]]:
        result = {"open_id": self.open_id, "session_key": self.session_key}
        if self.union_id is not None:
            result["union_id"] = self.union_id
        return result


@dataclass(frozen=True)
class Watermark:
    app_id: str
    timestamp: int

    @classmethod
    def from_dict(cls, data: dict) -> "Watermark":
        return cls(app_id=data["appid"], timestamp=int(data["timestamp"]))


@dataclass(frozen=True)
class UserInfo:
    nickname: str
    gender: int
    watermark: Watermark
    avatar_url: str = ""
    country: str = ""
    province: str = ""
    city: str = ""
    language: str = ""

    @property
    def app_id(self) -> str:
        return self.watermark.app_id

    @property
    def timestamp(self) -> int:
        return self.watermark.timestamp

    @classmethod
    def from_dict(cls, data: dict) -> "UserInfo":
        return cls(
            nickname=data.get("nickName", ""),
            gender=int(data.get("gender", 0)),
            watermark=Watermark.from_dict(data["watermark"]),
            avatar_url=data.get("avatarUrl", ""),
            country=data.get("country", ""),
            province=data.get("province", ""),
            city=data.get("city", ""),
            language=data.get("language", ""),
        )

    def to_dict(self) -> dict:
        return {
            "nickName": self.nickname,
            "gender": self.gender,
            "avatarUrl": self.avatar_url,
            "country": self.country,
            "province": self.province,
            "city": self.city,
            "language": self.language,
            "watermark": {
                "appid": self.watermark.app_id,
                "timestamp": self.watermark.timestamp,
            },
        }


@dataclass(frozen=True)
class PhoneInfo:
    phone_number: str
    pure_phone_number: str
    country_code: str
    watermark: Watermark

    @classmethod
    def from_dict(cls, data: dict) -> "PhoneInfo":
        return cls(
            phone_number=data["phoneNumber"],
            pure_phone_number=data["purePhoneNumber"],
            country_code=str(data["countryCode"]),
            watermark=Watermark.from_dict(data["watermark"]),
        )

    def to_dict(self) -> dict:
        return {
            "phoneNumber": self.phone_number,
            "purePhoneNumber": self.pure_phone_number,
            "countryCode": self.country_code,
            "watermark": {
                "appid": self.watermark.app_id,
                "timestamp": self.watermark.timestamp,
            },
        }
