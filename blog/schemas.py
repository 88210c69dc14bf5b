from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime


# --- User ---

class RegisterRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        # bcrypt only consumes the first 72 bytes.
        if len(value.encode("utf-8")) > 72:
            raise ValueError("password must be at most 72 bytes")
        return value


class LoginRequest(BaseModel):
    email: str
    password: str


class TokenResponse(BaseModel):
    token: str


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


# --- Post ---

class PostWrite(BaseModel):
    title: str = Field(min_length=1, max_length=300)
    content: str


class PostResponse(BaseModel):
    id: int
    title: str
    content: str
    author_id: int
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class PostDeleted(BaseModel):
    id: int


# --- Comment ---

class CommentCreate(BaseModel):
    author: str = Field(min_length=1, max_length=150)
    content: str = Field(min_length=1)


class CommentResponse(BaseModel):
    id: int
    post_id: int
    author: str
    content: str
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class CommentListResponse(BaseModel):
    post_id: int
    comments: list[CommentResponse]


# --- Pagination ---

class PaginatedPosts(BaseModel):
    total: int
    page: int
    size: int
    pages: int
    data: list[PostResponse]


# --- Errors ---

class ErrorResponse(BaseModel):
    error: str
