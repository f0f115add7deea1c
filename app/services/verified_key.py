from datetime import datetime, timedelta, timezone

import jwt

from app.config import settings


def encode_key(
    key: str,
    expires_in: int | None = None,
    purpose: str = "blob_key",
    **claims,
) -> str:
    payload = {"key": key, "pur": purpose, **claims}
    if expires_in is not None:
        payload["exp"] = datetime.now(timezone.utc) + timedelta(seconds=expires_in)
    return jwt.encode(
        payload, settings.STORAGE_SECRET_KEY, algorithm=settings.STORAGE_TOKEN_ALGORITHM
    )


def decode_key(token: str, purpose: str = "blob_key") -> dict | None:
    try:
        payload = jwt.decode(
            token,
            settings.STORAGE_SECRET_KEY,
            algorithms=[settings.STORAGE_TOKEN_ALGORITHM],
        )
    except jwt.PyJWTError:
        return None

    if payload.get("pur") != purpose or "key" not in payload:
        return None
    return payload
