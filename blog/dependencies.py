from fastapi import Depends, HTTPException, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from blog.database import get_session_factory
from blog.services import user_service
from blog.sessions import SessionStore
from blog.uow import UnitOfWork

_bearer = HTTPBearer(auto_error=False)


class PaginationParams:
    """
    Reusable FastAPI dependency that parses the post listing query
    parameters.

    Attributes
    ----------
    page:
        1-based page number.  Values ``<= 0`` are accepted and normalised
        to 1 by the query builder.
    size:
        Number of items per page.  Values ``<= 0`` fall back to the
        default size; values above ``settings.MAX_PAGE_SIZE`` are clamped.
    author_id:
        Optional author filter.  Missing or ``<= 0`` means "all authors".
    """

    def __init__(
        self,
        page: int = Query(1, description="Page number (1-based)."),
        size: int = Query(0, description="Items per page (0 = default)."),
        author_id: int | None = Query(None, description="Only posts by this author."),
    ) -> None:
        self.page = page
        self.size = size
        self.author_id = author_id if author_id and author_id > 0 else None


def get_uow(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> UnitOfWork:
    return UnitOfWork(session_factory)


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.sessions


def current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    sessions: SessionStore = Depends(get_session_store),
) -> int:
    """Resolve ``Authorization: Bearer <token>`` to a user id or fail with 401."""
    if credentials is None:
        raise HTTPException(status_code=401, detail="missing bearer token")
    user_id = user_service.authenticate(sessions, credentials.credentials)
    if user_id is None:
        raise HTTPException(status_code=401, detail="invalid or expired token")
    return user_id
