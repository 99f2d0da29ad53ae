from __future__ import annotations

import base64
import hashlib
import secrets

from cryptography.fernet import Fernet, InvalidToken
from flask import current_app
from passlib.context import CryptContext

from .errors import NotFound


pwd_context = CryptContext(
    schemes=["argon2"],
    deprecated="auto",
)


def generate_host_key(num_bytes: int = 24) -> str:
    return secrets.token_urlsafe(num_bytes)


def hash_host_key(host_key: str) -> str:
    """Store an argon2 hash of the host key; the key itself is shown once."""
    return pwd_context.hash(host_key)


def verify_host_key(host_key: str, stored_hash: str) -> bool:
    if not host_key or not stored_hash:
        return False
    return pwd_context.verify(host_key, stored_hash)


# ---------------------------------------------------------------------------
# Participant access tokens
#
# Status, assignment and chat links carry a Fernet token wrapping the
# participant id instead of the raw id, so links can't be guessed by counting.
# Anyone holding a link can act as that participant; treat it like a password.
# ---------------------------------------------------------------------------


def _participant_fernet() -> Fernet:
    """Returns a Fernet instance keyed by PARTICIPANT_TOKEN_KEY or derived from SECRET_KEY."""
    explicit = (current_app.config.get("PARTICIPANT_TOKEN_KEY") or "").strip()
    if explicit:
        # Expect a urlsafe base64-encoded 32-byte key.
        return Fernet(explicit.encode("utf-8"))

    # Derive a stable key from SECRET_KEY so links survive restarts.
    secret = (current_app.config.get("SECRET_KEY") or "").encode("utf-8")
    digest = hashlib.sha256(b"secretsanta-participants|" + secret).digest()
    return Fernet(base64.urlsafe_b64encode(digest))


def issue_participant_token(participant_id: int) -> str:
    """Encrypt participant_id -> urlsafe token (string)."""
    token = _participant_fernet().encrypt(str(int(participant_id)).encode("utf-8"))
    return token.decode("utf-8")


def read_participant_token(token: str) -> int:
    """Decrypt token -> participant_id. Raises NotFound on any bad token."""
    try:
        raw = _participant_fernet().decrypt(token.encode("utf-8"))
        return int(raw.decode("utf-8"))
    except (InvalidToken, ValueError, TypeError) as e:
        raise NotFound("This link is not valid.") from e
