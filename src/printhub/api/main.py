"""
PrintHub API - FastAPI application factory.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config.settings import Settings, get_settings
from ..utils.logger import setup_logging
from . import catalog_api, documents_api, orders_api, quotes_api, users_api
from .auth import require_admin
from .state import AppState, build_state, get_state

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(
        title="PrintHub API",
        description="Print-order storefront: quotes, orders and catalog administration",
        version=__version__,
    )
    app.state.printhub = build_state(settings)

    # Enable CORS for frontend development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(catalog_api.router)
    app.include_router(quotes_api.router)
    app.include_router(orders_api.router)
    app.include_router(users_api.router)
    app.include_router(documents_api.router)

    @app.get("/")
    async def root():
        return {"status": "online", "message": "PrintHub API Active"}

    @app.get("/api/health")
    async def health():
        return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}

    @app.get("/api/admin/dashboard")
    async def dashboard(state: AppState = Depends(get_state), _admin: dict = Depends(require_admin)):
        return state.dashboard.summary()

    logger.info("PrintHub API ready (data dir %s)", settings.data_dir)
    return app


app = create_app()
