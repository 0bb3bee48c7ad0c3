from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

import bcrypt
from jose import jwt

from schooldesk.core.config import Settings, settings


def hash_password(plain_password: str) -> str:
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(plain_password.encode("utf-8"), salt)
    return hashed.decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # In case the stored hash is invalid/corrupted
        return False


def create_access_token(
    *, subject: Dict, expires_minutes: Optional[int] = None, app_settings: Optional[Settings] = None
) -> str:
    """Sign a short-lived token. Only the subject id is meant to be trusted on the way back in."""
    app_settings = app_settings or settings
    if expires_minutes is None:
        expires_minutes = app_settings.access_token_expire_minutes

    to_encode = subject.copy()
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(
        to_encode, app_settings.jwt_secret_key, algorithm=app_settings.jwt_algorithm
    )
    return encoded_jwt


def decode_access_token(token: str, app_settings: Optional[Settings] = None) -> Dict:
    """Verify signature and expiry. Raises jose.JWTError on any failure."""
    app_settings = app_settings or settings
    return jwt.decode(
        token,
        app_settings.jwt_secret_key,
        algorithms=[app_settings.jwt_algorithm],
    )
