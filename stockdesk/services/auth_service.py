"""Accounts used to attribute stock movements and approvals.

Tokens are HS256 JWTs carrying the user id (``sub``) and role; they are
checked against the users table on every request, so deactivating an
account takes effect before the token expires.
"""

import logging
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt
from sqlalchemy.orm import Session

from stockdesk.config import settings
from stockdesk.exceptions import ConflictError, NotFoundError
from stockdesk.models.user import User

logger = logging.getLogger(__name__)

TOKEN_ALGORITHM = "HS256"


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(password.encode(), password_hash.encode())


def create_access_token(user: User) -> str:
    expires = datetime.now(timezone.utc) + timedelta(hours=settings.ACCESS_TOKEN_EXPIRE_HOURS)
    claims = {"sub": user.id, "role": user.role, "exp": expires}
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=TOKEN_ALGORITHM)


def decode_token(token: str) -> dict | None:
    """Claims of a valid, unexpired token, else None."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[TOKEN_ALGORITHM])
    except jwt.PyJWTError:
        return None


def get_user_by_id(db: Session, user_id: str) -> User | None:
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_username(db: Session, username: str) -> User | None:
    return db.query(User).filter(User.username == username).first()


def authenticate(db: Session, username: str, password: str) -> User | None:
    user = get_user_by_username(db, username)
    if user is None or not user.active or not verify_password(password, user.password_hash):
        logger.info("Rejected login for '%s'", username)
        return None
    return user


def resolve_actor_id(db: Session, user_id: str | None) -> str | None:
    """Validate a user id a stock movement is attributed to."""
    if not user_id:
        return None
    if not get_user_by_id(db, user_id):
        raise NotFoundError(f"User {user_id} not found")
    return user_id


def create_user(db: Session, username: str, password: str, display_name: str = "", role: str = "staff") -> User:
    if get_user_by_username(db, username):
        raise ConflictError(f"Username '{username}' already exists")
    user = User(
        username=username,
        display_name=display_name or username,
        password_hash=hash_password(password),
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Created %s account '%s'", role, username)
    return user


def list_users(db: Session) -> list[User]:
    return db.query(User).order_by(User.username).all()


def ensure_default_admin(db: Session) -> None:
    """Bootstrap the configured admin account on an empty users table."""
    if db.query(User.id).first() is not None:
        return
    create_user(
        db,
        username=settings.DEFAULT_ADMIN_USERNAME,
        password=settings.DEFAULT_ADMIN_PASSWORD,
        display_name="Admin",
        role="admin",
    )
