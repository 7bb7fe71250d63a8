"""
Identity collaborator: registration, password login and caller lookup.

The order engine only consumes `AuthService.resolve_user`; everything else
exists so that callers can obtain a bearer token carrying their id and role.
"""
import uuid

import structlog
from fastapi import HTTPException, status
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from shared.exceptions import EmailAlreadyRegistered, UserNotFound
from shared.security.jwt_handler import create_access_token

from .models import User
from .repository import UserRepository
from .schemas import TokenResponse, UserCreate, UserLogin

logger = structlog.get_logger(__name__)

_pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class AuthService:

    @staticmethod
    def _hash_password(password: str) -> str:
        return _pwd_context.hash(password)

    @staticmethod
    def _verify_password(plain: str, hashed: str) -> bool:
        return _pwd_context.verify(plain, hashed)

    @staticmethod
    async def register(db: AsyncSession, data: UserCreate) -> User:
        existing = await UserRepository.get_by_email(db, data.email)
        if existing:
            raise EmailAlreadyRegistered(data.email)
        user = User(
            email=data.email,
            hashed_password=AuthService._hash_password(data.password),
            first_name=data.first_name,
            last_name=data.last_name,
        )
        user = await UserRepository.create(db, user)
        logger.info("user_registered", user_id=str(user.id))
        return user

    @staticmethod
    async def login(db: AsyncSession, data: UserLogin) -> TokenResponse:
        user = await UserRepository.get_by_email(db, data.email)
        if not user or not AuthService._verify_password(data.password, user.hashed_password):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Incorrect email or password",
                headers={"WWW-Authenticate": "Bearer"},
            )
        if not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Account is disabled",
            )
        token = create_access_token(data={"sub": str(user.id), "role": user.role.value})
        return TokenResponse(access_token=token)

    @staticmethod
    async def resolve_user(db: AsyncSession, user_id: uuid.UUID) -> User:
        """Resolve a caller id to its User record, failing with UserNotFound."""
        user = await UserRepository.get_by_id(db, user_id)
        if not user:
            raise UserNotFound(user_id)
        return user
