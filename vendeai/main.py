from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from vendeai.api.routers import auth, billing, entitlements, me, webhooks
from vendeai.shared.config import get_settings


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    app = FastAPI(title="VendeAi API")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins) or ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth.router)
    app.include_router(me.router)
    app.include_router(entitlements.router)
    app.include_router(billing.router)
    app.include_router(webhooks.router)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()
