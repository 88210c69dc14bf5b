"""
Domain-level exceptions shared by the repository, unit-of-work and
service layers.

These never import FastAPI.  Translation to HTTP responses happens in
``blog.routers.errors``.
"""
from __future__ import annotations


class BlogError(Exception):
    """Base class for every error raised by the blog core."""


class NotFoundError(BlogError):
    def __init__(self, entity: str, key: int | str, field: str = "id") -> None:
        self.entity = entity
        self.key = key
        super().__init__(f"{entity.lower()} with {field} {key} not found")


class NotAuthorizedError(BlogError):
    def __init__(self, entity: str, key: int | str) -> None:
        self.entity = entity
        self.key = key
        super().__init__(f"not authorized to modify {entity.lower()} with id {key}")


class AlreadyRegisteredError(BlogError):
    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(f"email {email} already registered")


class InvalidCredentialsError(BlogError):
    def __init__(self) -> None:
        super().__init__("invalid login")


class StorageError(BlogError):
    """Connectivity or constraint fault reported by the data store."""


class ConstraintViolationError(StorageError):
    pass


class CommitError(StorageError):
    pass


class RollbackError(BlogError):
    """
    A transaction could not be rolled back after a failure.

    Carries both the failure that triggered the rollback and the rollback
    failure itself; the store may be left in an inconsistent state.

    Not raised when the unit-of-work is cancelled: the ``CancelledError``
    keeps propagating and the rollback failure is only logged by
    ``blog.uow``.
    """

    def __init__(self, error: BaseException, rollback_error: BaseException) -> None:
        self.error = error
        self.rollback_error = rollback_error
        super().__init__(f"tx err: {error}, rb err: {rollback_error}")
