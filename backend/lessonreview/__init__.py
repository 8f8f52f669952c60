from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from lessonreview.config import settings
from lessonreview.db import init_all_databases


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_all_databases(settings.data_dir)
    yield
    from lessonreview.services.session_registry import clear_sessions

    clear_sessions()


def create_app() -> FastAPI:
    application = FastAPI(
        title="Lesson Review Backend", version="0.1.0", lifespan=lifespan
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from lessonreview.routers import flashcards, health, reviews, sessions

    application.include_router(health.router)
    application.include_router(
        flashcards.router, prefix="/courses", tags=["flashcards"]
    )
    application.include_router(
        reviews.router, prefix="/courses", tags=["reviews"]
    )
    application.include_router(sessions.router, tags=["review-sessions"])

    return application


app = create_app()
