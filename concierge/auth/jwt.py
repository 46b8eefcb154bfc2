"""Bearer access tokens for staff users.

Tokens are minted by the identity provider in production; the helpers here
sign and verify them with the shared ``jwt_secret_key``.
"""

from datetime import datetime, timedelta, timezone

from jose import jwt

from concierge.config import settings

ACCESS_TOKEN_TYPE = "access"


def create_access_token(user_id: str, expires_delta: timedelta | None = None, **claims: str) -> str:
    """Sign an access token whose ``sub`` is the user's UUID.

    Args:
        user_id: The user's UUID as a string.
        expires_delta: Lifetime of the token. Defaults to
            ``settings.jwt_access_token_expire_minutes`` minutes.
        **claims: Extra claims copied into the payload.
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.jwt_access_token_expire_minutes))
    payload = {**claims, "sub": user_id, "exp": expire, "iat": now, "type": ACCESS_TOKEN_TYPE}
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    """Verify a token and return its payload.

    Raises:
        jose.JWTError: If the signature is wrong, the token expired or is malformed.
    """
    return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
