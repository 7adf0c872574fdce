import secrets

import bcrypt
from sqlalchemy.orm import Session

from portal.backend.models.auth_token import AuthToken
from portal.backend.models.user import User
from portal.core.clock import utcnow
from portal.core.config import ACCESS_TOKEN_EXPIRE


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # bcrypt refuses secrets over 72 bytes and malformed hashes
        return False


def create_access_token(db: Session, user: User) -> str:
    token = secrets.token_urlsafe(32)
    db.add(AuthToken(token=token, user_id=user.id, expires_at=utcnow() + ACCESS_TOKEN_EXPIRE))
    db.commit()
    return token
