from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import create_engine

from cardshows.api.routers import admin, shows
from cardshows.domain.errors import ShowQueryError
from cardshows.settings import Settings, load_settings


def create_app(engine=None, settings: Settings | None = None, visibility=None) -> FastAPI:
    settings = settings or load_settings()
    app = FastAPI(title="Card Show Finder API", version="0.1.0")
    if engine is None:
        engine = create_engine(settings.database_url, future=True) if settings.database_url else None
    app.state.db_engine = engine
    app.state.settings = settings
    app.state.visibility = visibility

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_origin],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ShowQueryError)
    async def handle_show_query_error(request: Request, exc: ShowQueryError):
        return JSONResponse(status_code=exc.http_status, content=exc.to_response())

    @app.get("/health")
    def health():
        return {"status": "ok"}

    app.include_router(shows.router, prefix="/api")
    app.include_router(admin.router, prefix="/api")
    return app


app = create_app()
