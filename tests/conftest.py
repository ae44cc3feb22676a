"""
Shared fixtures for wechat_minapp test suite.
"""

import base64
import json
from unittest.mock import MagicMock

import pytest
from Crypto.Cipher import AES
from Crypto.Util.Padding import pad

from wechat_minapp.client import WechatClient


# ── Credential fixtures ──────────────────────────────────────

@pytest.fixture
def app_id():
    return "wx123"


@pytest.fixture
def app_secret():
    return "secret-abc"


@pytest.fixture
def client(app_id, app_secret):
    return WechatClient(app_id, app_secret)


@pytest.fixture
def plain_client(app_id, app_secret):
    """Client using the regular (non-stable) token endpoint."""
    return WechatClient(app_id, app_secret, use_stable_token=False)


@pytest.fixture
def session_key_bytes():
    return bytes(range(16))


@pytest.fixture
def iv_bytes():
    return bytes(range(16, 32))


@pytest.fixture
def session_key(session_key_bytes):
    return base64.b64encode(session_key_bytes).decode()


@pytest.fixture
def iv(iv_bytes):
    return base64.b64encode(iv_bytes).decode()


# ── Envelope helpers ─────────────────────────────────────────

def encrypt_raw(key: bytes, iv: bytes, plaintext: bytes) -> bytes:
    return AES.new(key, AES.MODE_CBC, iv).encrypt(pad(plaintext, 16))


def encrypt_json(key: bytes, iv: bytes, payload) -> bytes:
    return encrypt_raw(key, iv, json.dumps(payload).encode("utf-8"))


@pytest.fixture
def user_payload(app_id):
    return {
        "nickName": "Band",
        "gender": 1,
        "language": "zh_CN",
        "city": "Guangzhou",
        "province": "Guangdong",
        "country": "CN",
        "avatarUrl": "https://thirdwx.qlogo.cn/mmopen/abc/132",
        "watermark": {"appid": app_id, "timestamp": 1477314187},
    }


@pytest.fixture
def phone_payload(app_id):
    return {
        "phoneNumber": "+86 13800138000",
        "purePhoneNumber": "13800138000",
        "countryCode": "86",
        "watermark": {"appid": app_id, "timestamp": 1637744274},
    }


# ── Mock response factories ──────────────────────────────────

def make_response(payload=None, status_code=200, content_type="application/json",
                  content=b""):
    resp = MagicMock()
    resp.status_code = status_code
    resp.headers = {"Content-Type": content_type}
    if payload is not None:
        resp.json.return_value = payload
        resp.text = json.dumps(payload)
        resp.content = resp.text.encode()
    else:
        resp.json.side_effect = ValueError("no json")
        resp.text = content.decode("latin-1")
        resp.content = content
    return resp


@pytest.fixture
def mock_token_response():
    return {"access_token": "ACCESS_TOKEN_1", "expires_in": 7200}


@pytest.fixture
def mock_session_response():
    return {
        "openid": "o-openid-001",
        "session_key": "tiihtNczf5v6AKRyjwEUhQ==",
        "unionid": "u-unionid-001",
    }


@pytest.fixture
def mock_msg_sec_check_response():
    return {
        "errcode": 0,
        "errmsg": "ok",
        "detail": [
            {
                "strategy": "content_model",
                "errcode": 0,
                "suggest": "pass",
                "label": 100,
                "prob": 90.5,
            }
        ],
        "result": {"suggest": "pass", "label": 100},
        "trace_id": "trace-001",
    }
