"""
Time-based one-time passwords (RFC 6238) for two-factor login.

Compatible with the usual authenticator apps: HMAC-SHA1, 6 digits,
30 second period, base32 secrets.
"""
from __future__ import annotations

import base64
import hashlib
import hmac
import re
import secrets
import struct
import time
from typing import Optional
from urllib.parse import quote

DIGITS = 6
PERIOD = 30


def _normalize_secret(secret: str) -> str:
    return re.sub(r'[^A-Z2-7]', '', secret.upper())


def _secret_bytes(secret: str) -> bytes:
    s = _normalize_secret(secret)
    s += '=' * (-len(s) % 8)
    return base64.b32decode(s)


def generate_secret(byte_length: int = 20) -> str:
    return base64.b32encode(secrets.token_bytes(byte_length)).decode('ascii').rstrip('=')


def counter_token(secret: str, counter: int, digits: int = DIGITS) -> str:
    digest = hmac.new(_secret_bytes(secret), struct.pack('>Q', counter), hashlib.sha1).digest()
    offset = digest[-1] & 0x0F
    code = struct.unpack('>I', digest[offset:offset + 4])[0] & 0x7FFFFFFF
    return str(code % 10 ** digits).zfill(digits)


def current_code(secret: str, at: Optional[float] = None) -> str:
    now = time.time() if at is None else at
    return counter_token(secret, int(now // PERIOD))


def verify_code(secret: str, code, window: int = 1, at: Optional[float] = None) -> bool:
    code = str(code or '').strip()
    if not re.fullmatch(r'\d{6}', code):
        return False
    now = time.time() if at is None else at
    counter = int(now // PERIOD)
    return any(
        hmac.compare_digest(counter_token(secret, c), code)
        for c in range(counter - window, counter + window + 1)
    )


def build_auth_uri(issuer: str, account: str, secret: str) -> str:
    issuer_q, account_q, secret_q = quote(issuer, safe=''), quote(account, safe=''), quote(secret, safe='')
    return (
        f'otpauth://totp/{issuer_q}:{account_q}?secret={secret_q}&issuer={issuer_q}'
        f'&algorithm=SHA1&digits={DIGITS}&period={PERIOD}'
    )
