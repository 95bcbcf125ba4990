from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from photomedia.common.logging import get_logger
from photomedia.common.settings import Settings, get_settings
from photomedia.database.core.main import Base, make_engine, make_sessionmaker
from photomedia.services.api.routers import health, photos, thumbs
from photomedia.services.thumbs.runtime import build_thumb_runtime

logger = get_logger()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    App factory. Everything the handlers need hangs off `app.state`, so tests
    can pass their own Settings (tmp dirs, in-memory SQLite).

        uvicorn --factory photomedia.services.api.app:create_app
    """
    cfg = settings or get_settings()
    dev = cfg.app_env.lower() == "development"
    get_logger("photomedia", cfg.log_level)

    engine = make_engine(cfg.database_url, echo=cfg.db.echo)
    runtime = build_thumb_runtime(cfg)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if cfg.db.create_schema:
            Base.metadata.create_all(bind=engine)
        if cfg.features.reconcile_on_startup:
            runtime.store.reconcile()
        try:
            yield
        finally:
            runtime.shutdown()
            engine.dispose()

    app = FastAPI(
        title="Photomedia API",
        version="0.1.0",
        docs_url=f"{cfg.api.prefix}/docs",
        openapi_url=f"{cfg.api.prefix}/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = cfg
    app.state.engine = engine
    app.state.sessionmaker = make_sessionmaker(engine)
    app.state.thumbs = runtime

    allow_origins = ["*"] if dev else cfg.api.cors_allow_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_methods=cfg.api.cors_allow_methods,
        allow_headers=cfg.api.cors_allow_headers,
        allow_credentials=cfg.api.cors_allow_credentials,
    )

    # Routers
    app.include_router(health.router)
    app.include_router(thumbs.router, prefix=cfg.api.prefix)
    app.include_router(photos.router, prefix=cfg.api.prefix)
    return app


def main() -> None:
    import uvicorn

    cfg = get_settings()
    uvicorn.run(create_app(cfg), host=cfg.api.host, port=cfg.api.port)
