# smartmerge/main.py
from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from smartmerge.api import routers
from smartmerge.core.config import get_settings
from smartmerge.core.logging import configure_logging
from smartmerge.services.session import MergeSession

logger = configure_logging()


def create_app(session: MergeSession | None = None) -> FastAPI:
    """إنشاء التطبيق مع جلسة دمج واحدة يملكها التطبيق نفسه."""
    settings = get_settings()

    app = FastAPI(title=settings.app_name, version=settings.app_version)

    # === CORS ===
    allow_origins = [origin.strip() for origin in settings.allow_origins if origin.strip()] or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition"],
    )

    # === الجلسة ===
    app.state.session = session or MergeSession()

    # === Routers ===
    for router in routers:
        app.include_router(router)

    # === Static downloads ===
    downloads_dir = app.state.session.storage.download_root
    app.mount("/downloads", StaticFiles(directory=str(downloads_dir)), name="downloads")

    @app.get("/")
    async def root() -> dict:
        logger.debug("Root endpoint accessed")
        return {"message": f"Welcome to {settings.app_name}"}

    @app.get("/health")
    async def health_check() -> dict:
        logger.debug("Health check invoked")
        return {"status": "ok", "message": "PDF merge service is running"}

    return app


app = create_app()
