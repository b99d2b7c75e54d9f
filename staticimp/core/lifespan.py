"""Application lifespan: startup and shutdown.

Single place for startup/shutdown wiring. Startup builds the runtime
(server config, backend registry, secret vault, shared HTTP client);
shutdown closes the client and zeroes the vault key. A runtime already set
on app.state (tests) is used as is and left open.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from staticimp.core.config import get_settings
from staticimp.core.runtime import build_runtime

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown."""
    settings = get_settings()

    # ---- Startup ----
    owned = getattr(app.state, "runtime", None) is None
    if owned:
        app.state.runtime = build_runtime(settings)
        logger.info(
            "staticimp ready: backends=%s entry types=%s vault=%s",
            sorted(app.state.runtime.config.backends),
            sorted(app.state.runtime.config.entries),
            "loaded" if app.state.runtime.vault is not None else "none",
        )

    yield

    # ---- Shutdown ----
    if owned and getattr(app.state, "runtime", None) is not None:
        await app.state.runtime.aclose()
        app.state.runtime = None
        logger.info("Runtime closed")
