"""Bearer token verification producing a trusted :class:`Principal`."""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from important_info.config import get_settings
from important_info.domain.entities import ROLE_STUDENT, Principal

# Issuers disagree on the claim carrying the user id; the first present wins.
_USER_ID_CLAIMS = ("userId", "id", "_id", "user_id", "sub")


def decode_access_token(token: str) -> dict:
    settings = get_settings()
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        raise ValueError("Could not validate credentials") from exc


def principal_from_claims(claims: dict) -> Principal:
    """Build a :class:`Principal` from decoded token claims."""

    user_id = next(
        (claims[claim] for claim in _USER_ID_CLAIMS if claims.get(claim) not in (None, "")),
        None,
    )
    if user_id is None:
        raise ValueError("Token missing user id")

    return Principal(
        id=str(user_id),
        role=str(claims.get("role") or ROLE_STUDENT).lower(),
        name=str(claims.get("name") or claims.get("username") or "User"),
        email=claims.get("email"),
    )


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """Sign ``data``; used by tooling and tests, tokens normally come from the issuer."""

    settings = get_settings()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(hours=1))
    return jwt.encode({**data, "exp": expire}, settings.secret_key, algorithm=settings.jwt_algorithm)


__all__ = ["decode_access_token", "principal_from_claims", "create_access_token"]
