"""
FastAPI application entry point for the portfolio site.
"""

from __future__ import annotations

import logging
from pathlib import Path
from urllib.parse import quote

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import RedirectResponse
from fastapi.staticfiles import StaticFiles
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from folio.config import get_settings
from folio.dependencies import get_cache, get_store
from folio.errors import AdminLoginRequired, SiteUnderMaintenance
from folio.logging_utils import configure_logging
from folio.routes import admin, api, public, seo
from folio.security import apply_security_headers, limiter, rate_limit_exceeded_handler
from folio.templating import templates

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).parent / "static"


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level, settings.verbose_firebase_logs)

    app = FastAPI(title=f"{settings.site_name} Portfolio", version="0.1.0")
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        https_only=settings.secure_cookies,
        same_site="lax",
    )

    limiter.enabled = settings.rate_limit_enabled
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        return apply_security_headers(response)

    @app.exception_handler(AdminLoginRequired)
    async def admin_login_required(request: Request, exc: AdminLoginRequired):
        return RedirectResponse(
            f"/admin/login?next={quote(exc.next_path, safe='/')}", status_code=303
        )

    @app.exception_handler(SiteUnderMaintenance)
    async def site_under_maintenance(request: Request, exc: SiteUnderMaintenance):
        site = public.get_site_settings(get_store(), get_cache())
        return templates.TemplateResponse(
            request, "pages/maintenance.html", {"site": site}, status_code=503
        )

    @app.exception_handler(StarletteHTTPException)
    async def not_found(request: Request, exc: StarletteHTTPException):
        if exc.status_code != 404 or request.url.path.startswith(settings.api_prefix):
            return await http_exception_handler(request, exc)
        store, cache = get_store(), get_cache()
        if public.get_site_settings(store, cache).maintenance_mode and not (
            request.url.path.startswith("/admin")
        ):
            return await site_under_maintenance(request, SiteUnderMaintenance())
        return public.render_not_found(request, store, cache)

    if STATIC_DIR.is_dir():
        app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")
    app.include_router(api.router, prefix=settings.api_prefix)
    app.include_router(seo.router)
    app.include_router(admin.auth_router)
    app.include_router(admin.router)
    app.include_router(public.router)
    logger.info("Application configured for %s", settings.site_url)
    return app


app = create_app()
