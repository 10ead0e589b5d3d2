"""JWT access token creation and validation (ES256).

Centralizes all token logic so the login route (issuance) and
api/dependencies.py (validation) share the same key and claims schema.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta

import jwt
from cryptography.hazmat.primitives.asymmetric import ec

# Ephemeral key pair generated on import; tokens do not survive a restart.
_private_key = ec.generate_private_key(ec.SECP256R1())
_public_key = _private_key.public_key()

ALGORITHM = "ES256"
ISSUER = "coursehub"
AUDIENCE = "coursehub-api"
ACCESS_TOKEN_TTL_MIN = 60


def create_access_token(*, sub: str, role: str) -> str:
    """Build and sign an access token.

    Claims: sub, role, iss, aud, exp, iat, jti. The role is a snapshot
    taken at login; a role change applies from the next login.
    """
    now = datetime.now(UTC)
    payload = {
        "sub": sub,
        "role": role,
        "iss": ISSUER,
        "aud": AUDIENCE,
        "exp": now + timedelta(minutes=ACCESS_TOKEN_TTL_MIN),
        "iat": now,
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(payload, _private_key, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Verify signature and claims, return the payload.

    Pins the algorithm to ES256 so alg:none and alg-switching tokens are
    refused. Raises jwt.ExpiredSignatureError, jwt.InvalidTokenError.
    """
    return jwt.decode(
        token,
        _public_key,
        algorithms=[ALGORITHM],
        issuer=ISSUER,
        audience=AUDIENCE,
        options={"require": ["sub", "role", "exp", "iat", "jti"]},
    )
