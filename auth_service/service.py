"""Lógica de signup, login y sesión. La clave de firma se inyecta al construir el servicio."""

import logging
from datetime import timedelta
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from auth_service.errors import EmailTakenError, InvalidCredentialsError
from auth_service.models import User
from auth_service.utils import (
    AuthResult,
    authenticate_header,
    hash_password,
    issue_token,
    verify_password,
)

logger = logging.getLogger(__name__)

ADMIN_LIST_LIMIT = 50


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.execute(select(User).where(User.email == email)).scalar_one_or_none()


def list_users(db: Session, email: Optional[str] = None) -> List[User]:
    query = select(User).order_by(User.created_at.desc(), User.id.desc())
    if email:
        query = query.where(User.email == email)
    else:
        query = query.limit(ADMIN_LIST_LIMIT)
    return list(db.execute(query).scalars())


class AuthService:
    def __init__(
        self,
        secret_key: str,
        signup_ttl: int,
        login_ttl: int,
        remember_ttl: int,
    ):
        self.secret_key = secret_key
        self.signup_ttl = signup_ttl
        self.login_ttl = login_ttl
        self.remember_ttl = remember_ttl

    def signup(self, db: Session, email: str, password: str) -> dict:
        logger.info(f"Registration attempt for email: {email}")
        if get_user_by_email(db, email) is not None:
            logger.warning(f"Registration failed: Email {email} already exists.")
            raise EmailTakenError()

        new_user = User(email=email, password_hash=hash_password(password))
        try:
            db.add(new_user)
            db.commit()
        except IntegrityError:
            # Otra petición insertó el mismo email entre la verificación y el insert
            db.rollback()
            logger.warning(f"Registration failed: unique constraint on email {email}.")
            raise EmailTakenError()
        db.refresh(new_user)
        logger.info(f"User created with ID: {new_user.id} for email: {email}")

        token = issue_token(new_user.id, new_user.email, timedelta(seconds=self.signup_ttl), self.secret_key)
        return {"id": new_user.id, "email": new_user.email, "token": token}

    def login(self, db: Session, email: str, password: str, remember: bool = False) -> dict:
        logger.info(f"Login attempt for user: {email}")
        user = get_user_by_email(db, email)

        # Email desconocido y contraseña incorrecta responden igual
        if user is None or not verify_password(password, user.password_hash):
            logger.warning(f"Login failed for user: {email}")
            raise InvalidCredentialsError()

        expires_in = self.remember_ttl if remember else self.login_ttl
        token = issue_token(user.id, user.email, timedelta(seconds=expires_in), self.secret_key)
        logger.info(f"Login successful for user_id: {user.id}")
        return {"id": user.id, "email": user.email, "token": token, "expiresIn": expires_in}

    def authenticate(self, authorization: Optional[str]) -> AuthResult:
        return authenticate_header(authorization, self.secret_key)
