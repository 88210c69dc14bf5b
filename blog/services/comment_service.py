"""
Comment service - append-only comments on a Post.

Comments cannot be edited or deleted.  Both listing and creation require
the post to exist; creation checks it inside the transaction (with a row
lock) so no comment can be attached to a post deleted concurrently.
"""
from sqlalchemy.ext.asyncio import AsyncSession

from blog.exceptions import NotFoundError
from blog.models import Comment
from blog.repository import Repository
from blog.uow import UnitOfWork


async def list_comments(db: AsyncSession, post_id: int) -> list[Comment]:
    repo = Repository(db)
    if await repo.get_post(post_id) is None:
        raise NotFoundError("Post", post_id)
    return await repo.list_comments(post_id)


async def create_comment(uow: UnitOfWork, post_id: int, author: str, content: str) -> Comment:
    async def _create(repo: Repository) -> Comment:
        post = await repo.get_post(post_id)
        if post is None:
            raise NotFoundError("Post", post_id)
        return await repo.create_comment(post.id, author, content)

    return await uow.run(_create)
