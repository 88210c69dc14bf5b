# Services package.
#
# Each module exposes a focused set of async functions for a single
# aggregate:
#
#   post_service     - paginated listing + owner-gated CRUD for Post
#   comment_service  - append-only comments on an existing Post
#   user_service     - registration, login and token resolution
#
# Read-only functions take an AsyncSession.  Writes take a UnitOfWork and
# run entirely inside ``UnitOfWork.run``, which owns commit and rollback.
