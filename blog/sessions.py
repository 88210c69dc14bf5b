import logging
import secrets
import string
import threading
import time

from blog.config import settings

logger = logging.getLogger(__name__)

TOKEN_ALPHABET = string.digits + string.ascii_lowercase


class SessionStore:
    """
    In-memory map of session token -> user id.

    One instance lives on ``app.state`` for the lifetime of the process.
    Every read and write takes the same exclusive lock.  Tokens expire
    after *ttl* seconds; a falsy *ttl* keeps them until restart.
    """

    def __init__(self, ttl: int | None = None, token_length: int | None = None) -> None:
        self.ttl = ttl
        self.token_length = token_length or settings.SESSION_TOKEN_LENGTH
        self._lock = threading.Lock()
        self._sessions: dict[str, tuple[int, float | None]] = {}

    def _generate(self) -> str:
        return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(self.token_length))

    def create(self, user_id: int) -> str:
        expires_at = time.monotonic() + self.ttl if self.ttl else None
        with self._lock:
            token = self._generate()
            while token in self._sessions:
                token = self._generate()
            self._sessions[token] = (user_id, expires_at)
        logger.info("Session created for user id=%d", user_id)
        return token

    def lookup(self, token: str) -> int | None:
        with self._lock:
            entry = self._sessions.get(token)
            if entry is None:
                return None
            user_id, expires_at = entry
            if expires_at is not None and expires_at <= time.monotonic():
                del self._sessions[token]
                return None
            return user_id

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
