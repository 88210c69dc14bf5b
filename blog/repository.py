"""
Entity repository - typed reads and writes for User, Post and Comment.

The repository is a stateless gateway over whatever session it is handed.
It behaves identically on a plain session and on one inside a
``UnitOfWork`` transaction; only ``for_update`` differs, which switches
every read to the locking variant.

Absence is reported as ``None``.  Driver failures surface as
``StorageError`` (``ConstraintViolationError`` for integrity failures).
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator, Protocol

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from blog.exceptions import ConstraintViolationError, StorageError
from blog.models import Comment, Post, User
from blog.query import count_query, normalize_pagination, pagination_query, select_query

logger = logging.getLogger(__name__)


class Executor(Protocol):
    """Anything that can run statements: a plain or transactional AsyncSession."""

    async def execute(self, statement: Any, *args: Any, **kwargs: Any) -> Any: ...

    def add(self, instance: object) -> None: ...

    async def flush(self) -> None: ...


@contextmanager
def _storage_errors(action: str) -> Iterator[None]:
    try:
        yield
    except IntegrityError as exc:
        raise ConstraintViolationError(f"failed to {action}: constraint violated") from exc
    except SQLAlchemyError as exc:
        raise StorageError(f"failed to {action}") from exc


class Repository:
    def __init__(self, db: Executor, for_update: bool = False) -> None:
        self.db = db
        self.for_update = for_update

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    async def get_user(self, user_id: int) -> User | None:
        stmt = select_query(select(User).where(User.id == user_id), self.for_update)
        with _storage_errors(f"query user {user_id}"):
            result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_user_by_email(self, email: str) -> User | None:
        stmt = select_query(select(User).where(User.email == email), self.for_update)
        with _storage_errors("query user by email"):
            result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def create_user(self, name: str, email: str, password_hash: str) -> User:
        user = User(name=name, email=email, password_hash=password_hash)
        self.db.add(user)
        with _storage_errors("create user"):
            await self.db.flush()
        logger.debug("Created user id=%s", user.id)
        return user

    # ------------------------------------------------------------------
    # Posts
    # ------------------------------------------------------------------

    async def get_post(self, post_id: int, for_update: bool | None = None) -> Post | None:
        """
        Return the post or None.  With a lock, the row stays locked until
        the enclosing transaction commits or rolls back.
        """
        lock = self.for_update if for_update is None else for_update
        stmt = select_query(select(Post).where(Post.id == post_id), lock)
        with _storage_errors(f"query post {post_id}"):
            result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def list_posts(
        self,
        author_id: int | None = None,
        page: int = 1,
        size: int = 0,
    ) -> tuple[list[Post], int]:
        """
        Return one page of posts in id order plus the total number of posts
        matching the author filter.

        Two statements are issued: COUNT over the filtered set, then the
        windowed SELECT.
        """
        page, size = normalize_pagination(page, size)

        base = select(Post)
        if author_id:
            base = base.where(Post.author_id == author_id)

        with _storage_errors("count posts"):
            total: int = (await self.db.execute(count_query(base))).scalar_one()

        page_q = select_query(pagination_query(base.order_by(Post.id), page, size), self.for_update)
        with _storage_errors("list posts"):
            result = await self.db.execute(page_q)
        return list(result.scalars().all()), total

    async def create_post(self, author_id: int, title: str, content: str) -> Post:
        post = Post(author_id=author_id, title=title, content=content)
        self.db.add(post)
        with _storage_errors("create post"):
            await self.db.flush()
        return post

    async def update_post(self, post_id: int, author_id: int, title: str, content: str) -> int:
        """
        Update the post matched by both *post_id* and *author_id*.

        Returns the number of rows affected; a foreign *author_id* simply
        matches nothing.  Ownership is the caller's concern.
        """
        stmt = (
            update(Post)
            .where(Post.id == post_id, Post.author_id == author_id)
            .values(title=title, content=content, updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session="evaluate")
        )
        with _storage_errors(f"update post {post_id}"):
            result = await self.db.execute(stmt)
        return result.rowcount

    async def delete_post(self, post_id: int, author_id: int) -> int:
        stmt = (
            delete(Post)
            .where(Post.id == post_id, Post.author_id == author_id)
            .execution_options(synchronize_session="evaluate")
        )
        with _storage_errors(f"delete post {post_id}"):
            result = await self.db.execute(stmt)
        return result.rowcount

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    async def list_comments(self, post_id: int) -> list[Comment]:
        stmt = select(Comment).where(Comment.post_id == post_id).order_by(Comment.id)
        with _storage_errors(f"list comments of post {post_id}"):
            result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def create_comment(self, post_id: int, author: str, content: str) -> Comment:
        """Insert a comment.  The post is assumed to exist."""
        comment = Comment(post_id=post_id, author=author, content=content)
        self.db.add(comment)
        with _storage_errors(f"create comment on post {post_id}"):
            await self.db.flush()
        return comment
