"""Auth Service 도메인 서비스 레이어입니다. 비즈니스 규칙과 데이터 접근 흐름을 캡슐화합니다."""

import hashlib
import hmac
import logging
import os
from datetime import datetime, timedelta

from fastapi import HTTPException, status
from jose import jwt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from teamswap.config import settings
from teamswap.models.user import Profile, User
from teamswap.schemas.user import SignUpRequest

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
_SALT_BYTES = 16


def hash_password(password: str) -> str:
    """Return a salted PBKDF2 hash stored as ``<salt_hex>:<hash_hex>``."""
    salt = os.urandom(_SALT_BYTES)
    derived = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt, settings.PASSWORD_HASH_ITERATIONS
    )
    return f"{salt.hex()}:{derived.hex()}"


def verify_password(password: str, stored_hash: str) -> bool:
    try:
        salt_hex, hash_hex = stored_hash.split(":", 1)
        salt = bytes.fromhex(salt_hex)
        expected = bytes.fromhex(hash_hex)
    except ValueError:
        return False
    candidate = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt, settings.PASSWORD_HASH_ITERATIONS
    )
    return hmac.compare_digest(candidate, expected)


def create_access_token(user_id: int) -> str:
    expire = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {"sub": str(user_id), "exp": expire}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGORITHM)


def sign_up(db: Session, data: SignUpRequest) -> User:
    email = data.email.strip().lower()
    if db.query(User).filter(User.email == email).first():
        raise HTTPException(status_code=409, detail="이미 가입된 이메일입니다.")
    if db.query(Profile).filter(Profile.username == data.username).first():
        raise HTTPException(status_code=409, detail="이미 사용 중인 사용자명입니다.")

    user = User(email=email, password_hash=hash_password(data.password))
    user.profile = Profile(
        username=data.username,
        full_name=data.full_name or None,
        skills_offered=[],
        skills_learning=[],
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="이미 가입된 이메일 또는 사용자명입니다.")
    db.refresh(user)
    logger.info("[auth] signed up user_id=%s username=%s", user.user_id, data.username)
    return user


def sign_in(db: Session, email: str, password: str) -> User:
    user = db.query(User).filter(User.email == email.strip().lower(), User.is_active == True).first()  # noqa: E712
    if not user or not verify_password(password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="이메일 또는 비밀번호가 올바르지 않습니다.",
        )
    return user
