from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from lingotutor.config import settings
from lingotutor.db import init_all_databases


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_all_databases(settings.data_dir)
    yield
    from lingotutor.services.session_registry import clear_sessions

    clear_sessions()


def create_app() -> FastAPI:
    application = FastAPI(
        title="LingoTutor Backend", version="0.1.0", lifespan=lifespan
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from lingotutor.routers import chat, health, sessions, vocabulary

    application.include_router(health.router)
    application.include_router(
        vocabulary.router, prefix="/vocabulary", tags=["vocabulary"]
    )
    application.include_router(
        sessions.router, prefix="/sessions", tags=["sessions"]
    )
    application.include_router(
        chat.router, prefix="/chat", tags=["chat"]
    )

    return application


app = create_app()
