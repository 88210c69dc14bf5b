import math

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from blog.database import get_db
from blog.dependencies import PaginationParams, current_user_id, get_uow
from blog.exceptions import NotFoundError
from blog.query import normalize_pagination
from blog.schemas import (
    CommentCreate,
    CommentListResponse,
    CommentResponse,
    PaginatedPosts,
    PostDeleted,
    PostResponse,
    PostWrite,
)
from blog.services import comment_service, post_service
from blog.uow import UnitOfWork

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("", response_model=PaginatedPosts)
async def list_posts(
    pagination: PaginationParams = Depends(),
    db: AsyncSession = Depends(get_db),
):
    page, size = normalize_pagination(pagination.page, pagination.size)
    items, total = await post_service.list_posts(db, page, size, pagination.author_id)
    return PaginatedPosts(
        total=total,
        page=page,
        size=size,
        pages=math.ceil(total / size) if total > 0 else 0,
        data=[PostResponse.model_validate(p) for p in items],
    )


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(post_id: int, db: AsyncSession = Depends(get_db)):
    return await post_service.get_post(db, post_id)


@router.post("", response_model=PostResponse)
async def create_post(
    data: PostWrite,
    author_id: int = Depends(current_user_id),
    uow: UnitOfWork = Depends(get_uow),
):
    try:
        return await post_service.create_post(uow, author_id, data.title, data.content)
    except NotFoundError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.put("/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: int,
    data: PostWrite,
    requester_id: int = Depends(current_user_id),
    uow: UnitOfWork = Depends(get_uow),
):
    return await post_service.update_post(uow, post_id, requester_id, data.title, data.content)


@router.delete("/{post_id}", response_model=PostDeleted)
async def delete_post(
    post_id: int,
    requester_id: int = Depends(current_user_id),
    uow: UnitOfWork = Depends(get_uow),
):
    await post_service.delete_post(uow, post_id, requester_id)
    return PostDeleted(id=post_id)


@router.get("/{post_id}/comments", response_model=CommentListResponse)
async def list_comments(post_id: int, db: AsyncSession = Depends(get_db)):
    comments = await comment_service.list_comments(db, post_id)
    return CommentListResponse(
        post_id=post_id,
        comments=[CommentResponse.model_validate(c) for c in comments],
    )


@router.post("/{post_id}/comments", response_model=CommentResponse)
async def create_comment(
    post_id: int,
    data: CommentCreate,
    uow: UnitOfWork = Depends(get_uow),
):
    return await comment_service.create_comment(uow, post_id, data.author, data.content)
