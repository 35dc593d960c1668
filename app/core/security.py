"""
app/core/security.py

Purpose: Credential and session token helpers

- Salted password hashing and verification
- Session token encoding (base64 of {"uid": ...})
- Token decoding that never raises
"""

import base64
import binascii
import hashlib
import hmac
import json
import secrets
from typing import Optional

PBKDF2_ITERATIONS = 120_000

_URLSAFE_TO_STANDARD = str.maketrans("-_", "+/")


def hash_password(password: str, salt: Optional[str] = None) -> str:
    """
    Hashes a password as `salt$hexdigest` using PBKDF2-SHA256.
    """
    salt = salt or secrets.token_hex(8)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), PBKDF2_ITERATIONS)
    return salt + "$" + digest.hex()


def verify_password(password: str, stored: Optional[str]) -> bool:
    if not stored or "$" not in stored:
        return False
    salt, _ = stored.split("$", 1)
    return hmac.compare_digest(hash_password(password, salt), stored)


def encode_session_token(uid: str) -> str:
    """
    Encodes a session token for an identity.

    Args:
        uid: Identity id

    Returns:
        Unpadded URL-safe base64 of the JSON object {"uid": uid}. Every
        character is legal in a bare cookie value, so no quoting is applied.
    """
    payload = json.dumps({"uid": uid}, separators=(",", ":"))
    return base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii").rstrip("=")


def decode_session_token(token: Optional[str]) -> Optional[str]:
    """
    Decodes a session token back to its uid.

    Accepts the unpadded URL-safe form, padded standard base64 and
    cookie values still wrapped in double quotes.

    Returns:
        The uid, or None for a missing, malformed or foreign token
    """
    if not token:
        return None
    text = token.strip().strip('"').rstrip("=").translate(_URLSAFE_TO_STANDARD)
    text += "=" * (-len(text) % 4)
    try:
        payload = json.loads(base64.b64decode(text, validate=True).decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return None
    if not isinstance(payload, dict):
        return None
    uid = payload.get("uid")
    if not isinstance(uid, str) or not uid:
        return None
    return uid
