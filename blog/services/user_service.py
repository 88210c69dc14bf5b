"""
User service - registration, login and token resolution.

Email uniqueness is checked inside the registration transaction and also
enforced by the ``users.email`` unique constraint; a constraint violation
that slips past the check (two concurrent registrations) is reported as
``AlreadyRegisteredError`` as well.
"""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from blog.exceptions import (
    AlreadyRegisteredError,
    ConstraintViolationError,
    InvalidCredentialsError,
    NotFoundError,
)
from blog.models import User
from blog.repository import Repository
from blog.security import hash_password, verify_password
from blog.sessions import SessionStore
from blog.uow import UnitOfWork

logger = logging.getLogger(__name__)


async def register(uow: UnitOfWork, name: str, email: str, password: str) -> User:
    # Hash before the transaction opens.
    password_hash = hash_password(password)

    async def _register(repo: Repository) -> User:
        if await repo.get_user_by_email(email) is not None:
            raise AlreadyRegisteredError(email)
        try:
            return await repo.create_user(name, email, password_hash)
        except ConstraintViolationError as exc:
            raise AlreadyRegisteredError(email) from exc

    user = await uow.run(_register)
    logger.info("Registered user id=%d", user.id)
    return user


async def login(db: AsyncSession, sessions: SessionStore, email: str, password: str) -> str:
    """Verify credentials and mint a session token bound to the user id."""
    user = await Repository(db).get_user_by_email(email)
    if user is None:
        raise NotFoundError("User", email, field="email")
    if not verify_password(user.password_hash, password):
        raise InvalidCredentialsError()
    return sessions.create(user.id)


def authenticate(sessions: SessionStore, token: str) -> int | None:
    return sessions.lookup(token)
