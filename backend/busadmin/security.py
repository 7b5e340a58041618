"""
Bus Admin Backend — Password Hashing & Bearer Tokens
======================================================

What:  Salted one-way password hashes and signed, expiring bearer tokens.
How:   Passwords go through werkzeug.security (scrypt/pbkdf2 with per-hash
       salt). Tokens are PyJWT HS256 tokens carrying `sub` (admin id),
       `email`, `iat` and `exp` claims; lifetime defaults to 24 hours.
Who:   Admin model (hashing), AuthService (issuing), the `require_admin`
       dependency (verifying).
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from werkzeug.security import check_password_hash, generate_password_hash

from busadmin.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


def hash_password(raw: str) -> str:
    return generate_password_hash(raw)


def verify_password(password_hash: str, raw: str) -> bool:
    """Constant-time check of `raw` against a stored hash. Malformed hashes never match."""
    try:
        return check_password_hash(password_hash or "", raw or "")
    except ValueError:
        logger.warning("Stored password hash has an unknown format")
        return False


@dataclass(frozen=True)
class AdminIdentity:
    """The authenticated administrator attached to a protected request."""

    id: uuid.UUID
    email: str


class TokenIssuer:
    """
    Issues and verifies admin bearer tokens.

    Verification failures of every kind (missing claims, bad signature,
    expired, wrong algorithm) surface as AuthenticationError so the caller
    can short-circuit with 401.
    """

    def __init__(self, secret: str, algorithm: str = "HS256", ttl: timedelta = timedelta(hours=24)):
        self.secret = secret
        self.algorithm = algorithm
        self.ttl = ttl

    def issue(self, admin_id: uuid.UUID, email: str, now: Optional[datetime] = None) -> str:
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "sub": str(admin_id),
            "email": email,
            "iat": issued_at,
            "exp": issued_at + self.ttl,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> AdminIdentity:
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["sub", "exp", "iat"]},
            )
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Token has expired")
        except jwt.InvalidTokenError as e:
            logger.debug("Rejected bearer token: %s", e)
            raise AuthenticationError("Invalid token")

        try:
            admin_id = uuid.UUID(str(payload["sub"]))
        except ValueError:
            raise AuthenticationError("Invalid token")

        return AdminIdentity(id=admin_id, email=str(payload.get("email", "")))
