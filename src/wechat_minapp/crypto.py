"""
Encrypted user-data envelopes.

The platform hands the front end an AES-128-CBC ciphertext and IV; the key
is the user's session_key from code2session. Plaintext is PKCS#7 padded JSON
carrying a watermark with the issuing appid.
"""

import base64
import binascii
import hashlib
import hmac
import json
from typing import Union

from Crypto.Cipher import AES
from Crypto.Util.Padding import unpad

from .errors import CipherFailure, InvalidKeyMaterial, MalformedPayload, PayloadMismatch
from .types import PhoneInfo, UserInfo

KEY_SIZE = 16
BLOCK_SIZE = AES.block_size


def b64decode_key(value: Union[str, bytes], name: str) -> bytes:
    """Strict base64 decode for key material."""
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidKeyMaterial(f"{name} is not valid base64: {exc}") from exc


def b64decode_ciphertext(value: Union[str, bytes]) -> bytes:
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise CipherFailure(f"ciphertext is not valid base64: {exc}") from exc


def _check_lengths(session_key: bytes, iv: bytes, ciphertext: bytes) -> None:
    if len(session_key) != KEY_SIZE:
        raise InvalidKeyMaterial(
            f"session key must be {KEY_SIZE} bytes, got {len(session_key)}"
        )
    if len(iv) != BLOCK_SIZE:
        raise InvalidKeyMaterial(f"iv must be {BLOCK_SIZE} bytes, got {len(iv)}")
    if not ciphertext or len(ciphertext) % BLOCK_SIZE:
        raise CipherFailure(
            f"ciphertext length {len(ciphertext)} is not a positive "
            f"multiple of {BLOCK_SIZE}"
        )


def decrypt_envelope(
    session_key: bytes, iv: bytes, ciphertext: bytes, app_id: str
) -> dict:
    """
    Decrypt one envelope and verify its watermark.

    Returns the parsed plaintext object. Raises InvalidKeyMaterial,
    CipherFailure, MalformedPayload or PayloadMismatch.
    """
    _check_lengths(session_key, iv, ciphertext)

    padded = AES.new(session_key, AES.MODE_CBC, iv).decrypt(ciphertext)
    try:
        plaintext = unpad(padded, BLOCK_SIZE, style="pkcs7")
    except ValueError as exc:
        raise CipherFailure(f"bad padding: {exc}") from exc

    try:
        data = json.loads(plaintext.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as exc:
        raise MalformedPayload(f"plaintext is not JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise MalformedPayload("plaintext is not a JSON object")

    watermark = data.get("watermark")
    if not isinstance(watermark, dict) or not isinstance(
        watermark.get("appid"), str
    ):
        raise MalformedPayload("watermark.appid missing")

    if watermark["appid"] != app_id:
        raise PayloadMismatch(app_id, watermark["appid"])

    return data


def decrypt_user_info(
    session_key: bytes, iv: bytes, ciphertext: bytes, app_id: str
) -> UserInfo:
    data = decrypt_envelope(session_key, iv, ciphertext, app_id)
    try:
        return UserInfo.from_dict(data)
    except (KeyError, TypeError, ValueError) as exc:
        raise MalformedPayload(f"unexpected user info shape: {exc}") from exc


def decrypt_phone_info(
    session_key: bytes, iv: bytes, ciphertext: bytes, app_id: str
) -> PhoneInfo:
    data = decrypt_envelope(session_key, iv, ciphertext, app_id)
    try:
        return PhoneInfo.from_dict(data)
    except (KeyError, TypeError, ValueError) as exc:
        raise MalformedPayload(f"unexpected phone info shape: {exc}") from exc


def session_signature(session_key: str, payload: bytes = b"") -> str:
    """Hex HMAC-SHA256 of payload keyed by session_key (sig_method=hmac_sha256)."""
    return hmac.new(
        session_key.encode("utf-8"), payload, hashlib.sha256
    ).hexdigest()
