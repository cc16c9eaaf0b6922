import logging
import time

from fastapi import FastAPI
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.cors import CORSMiddleware

from reminderly.api.routes_cron import router as cron_router
from reminderly.api.routes_email_settings import router as email_settings_router
from reminderly.api.routes_employees import router as employee_router
from reminderly.api.routes_health import router as health_router
from reminderly.api.routes_metrics import router as metrics_router
from reminderly.api.routes_recurring import router as recurring_router
from reminderly.api.routes_reminder_types import router as reminder_type_router
from reminderly.api.routes_reminders import router as reminder_router
from reminderly.core.config import settings
from reminderly.core.errors import register_error_handlers
from reminderly.core.logger import init_logging
from reminderly.core.monitoring import init_monitoring


class RequestTimingMiddleware(BaseHTTPMiddleware):
    def __init__(self, app) -> None:
        super().__init__(app)
        self.logger = logging.getLogger("reminderly.requests")

    async def dispatch(self, request, call_next):  # type: ignore[override]
        start = time.perf_counter()
        response = await call_next(request)
        self.logger.debug(
            "%s %s -> %s (%.1f ms)",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - start) * 1000,
        )
        return response


def create_app() -> FastAPI:
    init_logging()
    init_monitoring()

    # Interactive docs are disabled in production
    is_production = settings.ENV.lower() == "prod"
    app = FastAPI(
        title=settings.APP_NAME,
        debug=False,
        docs_url=None if is_production else "/docs",
        redoc_url=None if is_production else "/redoc",
        openapi_url=None if is_production else "/openapi.json",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=settings.CORS_ALLOW_METHODS,
        allow_headers=settings.CORS_ALLOW_HEADERS,
    )
    app.add_middleware(RequestTimingMiddleware)
    register_error_handlers(app)
    app.include_router(employee_router)
    app.include_router(reminder_type_router)
    app.include_router(reminder_router)
    app.include_router(recurring_router)
    app.include_router(cron_router)
    app.include_router(email_settings_router)
    app.include_router(metrics_router, tags=["metrics"])
    app.include_router(health_router)

    @app.on_event("shutdown")
    def shutdown_event():
        from reminderly.db.redis_client import close_redis_pool
        close_redis_pool()

    return app


app = create_app()
