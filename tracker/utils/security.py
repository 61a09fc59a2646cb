from datetime import timedelta
from typing import Optional

import jwt
from passlib.context import CryptContext

from tracker.config.settings import get_settings
from tracker.models.entities import User
from tracker.utils.clock import utcnow

settings = get_settings()

JWT_ALGORITHM = "HS256"

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def create_access_token(user: User) -> str:
    """Create a signed JWT identifying the user."""
    now = utcnow()
    payload = {
        "sub": str(user.id),
        "name": user.display_name,
        "email": user.email,
        "iss": settings.jwt_issuer,
        "iat": now,
        "exp": now + timedelta(days=settings.jwt_expire_days),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[dict]:
    """Verify and decode a JWT; None when expired, tampered or foreign."""
    try:
        return jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[JWT_ALGORITHM],
            issuer=settings.jwt_issuer,
        )
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None
