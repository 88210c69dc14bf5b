from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from blog.database import get_db
from blog.dependencies import get_session_store, get_uow
from blog.exceptions import NotFoundError
from blog.schemas import LoginRequest, RegisterRequest, TokenResponse, UserResponse
from blog.services import user_service
from blog.sessions import SessionStore
from blog.uow import UnitOfWork

router = APIRouter(tags=["auth"])


@router.post("/register", response_model=UserResponse)
async def register(data: RegisterRequest, uow: UnitOfWork = Depends(get_uow)):
    return await user_service.register(uow, data.name, data.email, data.password)


@router.post("/login", response_model=TokenResponse)
async def login(
    data: LoginRequest,
    db: AsyncSession = Depends(get_db),
    sessions: SessionStore = Depends(get_session_store),
):
    try:
        token = await user_service.login(db, sessions, data.email, data.password)
    except NotFoundError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return TokenResponse(token=token)
