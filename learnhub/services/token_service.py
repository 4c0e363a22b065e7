"""JWT access token creation and validation (ES256).

Login (issuance) and the identity dependencies (validation) share the
key, claim schema and pinned algorithm defined here.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta

import jwt
from cryptography.hazmat.primitives.asymmetric import ec

from learnhub.core.config import SETTINGS
from learnhub.models.principal import Role

# Dev/test: an ephemeral EC key pair generated on import.  Tokens do not
# survive a restart and are not shared across processes.
_private_key = ec.generate_private_key(ec.SECP256R1())
_public_key = _private_key.public_key()

ALGORITHM = "ES256"
ISSUER = "learnhub"
AUDIENCE = "learnhub-api"


def create_access_token(
    *,
    sub: str,
    name: str,
    role: Role,
    ttl: timedelta | None = None,
) -> str:
    """Build and sign an access token.

    Claims: sub, name, role, iss, aud, exp, iat, jti.  ``ttl`` overrides
    ACCESS_TOKEN_TTL_MIN (tests use a negative ttl to mint expired tokens).
    """
    now = datetime.now(UTC)
    if ttl is None:
        ttl = timedelta(minutes=SETTINGS.access_token_ttl_min)
    payload = {
        "sub": sub,
        "name": name,
        "role": role.value,
        "iss": ISSUER,
        "aud": AUDIENCE,
        "exp": now + ttl,
        "iat": now,
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(payload, _private_key, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Verify signature and claims, return the payload.

    Pins the algorithm to ES256 to rule out alg:none and alg-switching.
    Raises jwt.ExpiredSignatureError or jwt.InvalidTokenError on failure.
    """
    return jwt.decode(
        token,
        _public_key,
        algorithms=[ALGORITHM],
        issuer=ISSUER,
        audience=AUDIENCE,
        options={"require": ["sub", "exp", "iat", "jti", "role"]},
    )
