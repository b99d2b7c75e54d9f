"""FastAPI application entry point.

Wiring only: lifespan, exception handlers, rate limiter, routers.
No business logic here. See staticimp.core.lifespan and
staticimp.core.exception_handlers.

Settings are loaded inside create_app() so that tests can set env (and
clear the get_settings cache) before calling create_app().
"""

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from staticimp.api.v1 import api_router
from staticimp.core.config import get_settings
from staticimp.core.exception_handlers import register_exception_handlers
from staticimp.core.lifespan import create_lifespan
from staticimp.core.limiter import limiter

ROOT_TEXT = "Hello from staticimp"


def create_app() -> FastAPI:
    """Build and return the FastAPI application. Settings are resolved here (deferred from import)."""
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=create_lifespan,
    )

    app.state.limiter = limiter
    app.state.runtime = None
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    register_exception_handlers(app)

    app.include_router(api_router, prefix="/v1")

    @app.get("/", response_class=PlainTextResponse)
    def root() -> str:
        """Plain liveness text (used by the container health check)."""
        return ROOT_TEXT

    return app


app = create_app()
