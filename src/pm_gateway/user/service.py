"""User service: register, login, refresh.

Registration creates the user and its point account (seeded with
STARTING_POINTS) in one transaction, managed by the router via
`async with db.begin()`.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.pm_account.domain.models import PointAccount
from src.pm_account.domain.repository import AccountRepositoryProtocol
from src.pm_account.infrastructure.persistence import AccountRepository
from src.pm_common.errors import (
    AccountDisabledError,
    EmailExistsError,
    InvalidCredentialsError,
    UsernameExistsError,
)
from src.pm_gateway.auth.jwt_handler import (
    create_access_token,
    create_refresh_token,
    decode_token,
)
from src.pm_gateway.auth.password import hash_password, verify_password
from src.pm_gateway.user.db_models import UserModel

logger = logging.getLogger(__name__)


class UserService:
    """Stateless service — instantiate once, reuse across requests."""

    def __init__(self, account_repo: AccountRepositoryProtocol | None = None) -> None:
        self._account_repo: AccountRepositoryProtocol = account_repo or AccountRepository()

    async def register(
        self,
        username: str,
        email: str,
        password: str,
        db: AsyncSession,
    ) -> tuple[UserModel, PointAccount]:
        """Insert the user and its point account. Caller owns the transaction."""
        # DB UNIQUE constraints are the final guard
        result = await db.execute(
            select(UserModel).where(UserModel.username == username)
        )
        if result.scalar_one_or_none() is not None:
            raise UsernameExistsError()

        result = await db.execute(
            select(UserModel).where(UserModel.email == email)
        )
        if result.scalar_one_or_none() is not None:
            raise EmailExistsError()

        user = UserModel(
            username=username,
            email=email,
            password_hash=hash_password(password),
            is_active=True,
        )
        db.add(user)
        await db.flush()  # populate user.id

        account = await self._account_repo.create_account(
            db, user.account_id, settings.STARTING_POINTS
        )
        logger.info("User registered: id=%s starting_points=%d", user.id, account.balance)
        return user, account

    async def login(
        self,
        username: str,
        password: str,
        db: AsyncSession,
    ) -> tuple[UserModel, str, str]:
        """Authenticate and return (user, access_token, refresh_token).

        Unknown user and wrong password raise the same error.
        """
        result = await db.execute(
            select(UserModel).where(UserModel.username == username)
        )
        user = result.scalar_one_or_none()

        if user is None or not verify_password(password, user.password_hash):
            raise InvalidCredentialsError()

        if not user.is_active:
            raise AccountDisabledError()

        return (
            user,
            create_access_token(str(user.id)),
            create_refresh_token(str(user.id)),
        )

    async def refresh(self, refresh_token: str) -> str:
        """Validate a refresh token and return a new access token (no rotation)."""
        payload = decode_token(refresh_token, expected_type="refresh")
        user_id: str = str(payload["sub"])
        return create_access_token(user_id)
