import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from blog.config import settings
from blog.database import engine, init_models
from blog.middleware import TimingMiddleware
from blog.routers import auth, posts
from blog.routers.errors import register_exception_handlers
from blog.sessions import SessionStore

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    if settings.AUTO_CREATE_TABLES:
        await init_models()
    logger.info("Blog API started (env=%s)", settings.APP_ENV)
    yield
    # Shutdown
    await engine.dispose()


app = FastAPI(
    title="Blog API",
    description="Blog backend with transactional, ownership-checked post and comment CRUD",
    version="1.0.0",
    lifespan=lifespan,
)

# Session tokens live for the lifetime of this app instance.
app.state.sessions = SessionStore(ttl=settings.SESSION_TTL_SECONDS)

register_exception_handlers(app)

# Middleware
app.add_middleware(TimingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(auth.router)
app.include_router(posts.router)

@app.get("/health")
async def health():
    return {"status": "healthy", "version": "1.0.0"}
