"""
Post service - use cases for the Post aggregate.

Design notes
------------
- Reads (``list_posts``, ``get_post``) run on a plain session; they have
  no ownership side effects and need no transaction.
- Every write runs inside ``UnitOfWork.run``.  The repository handed to
  the callback locks each row it reads, so the existence / ownership
  check and the mutation that follows see the same row version.  Two
  concurrent updates of one post therefore serialise on the row lock
  instead of both passing the check against a stale row.
- The repository's update/delete are scoped by ``(id, author_id)`` and
  silently affect nothing on mismatch; ownership errors are raised here.
"""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from blog.exceptions import NotAuthorizedError, NotFoundError
from blog.models import Post
from blog.repository import Repository
from blog.uow import UnitOfWork

logger = logging.getLogger(__name__)


async def list_posts(
    db: AsyncSession,
    page: int = 1,
    size: int = 0,
    author_id: int | None = None,
) -> tuple[list[Post], int]:
    """Return ``(items, total)``; *total* counts every post matching the filter."""
    return await Repository(db).list_posts(author_id=author_id, page=page, size=size)


async def get_post(db: AsyncSession, post_id: int) -> Post:
    post = await Repository(db).get_post(post_id)
    if post is None:
        raise NotFoundError("Post", post_id)
    return post


async def create_post(uow: UnitOfWork, author_id: int, title: str, content: str) -> Post:
    """
    Create a post for *author_id*.

    The author lookup and the insert share one transaction, so an author
    removed mid-request cannot end up owning a post.
    """

    async def _create(repo: Repository) -> Post:
        author = await repo.get_user(author_id)
        if author is None:
            raise NotFoundError("User", author_id)
        return await repo.create_post(author.id, title, content)

    post = await uow.run(_create)
    logger.info("Post id=%d created by user id=%d", post.id, author_id)
    return post


async def update_post(
    uow: UnitOfWork, post_id: int, requester_id: int, title: str, content: str
) -> Post:
    async def _update(repo: Repository) -> Post:
        post = await repo.get_post(post_id, for_update=True)
        if post is None:
            raise NotFoundError("Post", post_id)
        if post.author_id != requester_id:
            raise NotAuthorizedError("Post", post_id)
        await repo.update_post(post.id, requester_id, title, content)
        return post

    post = await uow.run(_update)
    logger.info("Post id=%d updated by user id=%d", post_id, requester_id)
    return post


async def delete_post(uow: UnitOfWork, post_id: int, requester_id: int) -> None:
    async def _delete(repo: Repository) -> None:
        post = await repo.get_post(post_id, for_update=True)
        if post is None:
            raise NotFoundError("Post", post_id)
        if post.author_id != requester_id:
            raise NotAuthorizedError("Post", post_id)
        await repo.delete_post(post.id, post.author_id)

    await uow.run(_delete)
    logger.info("Post id=%d deleted by user id=%d", post_id, requester_id)
