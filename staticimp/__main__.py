"""Run the server: `python -m staticimp`.

Listen address comes from the server config file (host/port keys).
"""

import uvicorn

from staticimp.core.config import get_settings
from staticimp.infrastructure.config import load_server_config
from staticimp.main import create_app
from staticimp.shared.telemetry.logging import setup_logging


def main() -> None:
    setup_logging()
    settings = get_settings()
    config = load_server_config(settings.config_path)
    uvicorn.run(
        create_app(),
        host=config.host,
        port=config.port,
        log_level="debug" if settings.debug else "info",
    )


if __name__ == "__main__":
    main()
