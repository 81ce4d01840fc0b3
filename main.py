from __future__ import annotations

import sys

import uvicorn

from productcatalog.app import create_app
from productcatalog.log import configure_logging, get_logger
from productcatalog.settings import load_settings

log = get_logger("productcatalog.main")


def main() -> int:
    settings = load_settings()
    configure_logging(settings.log_level)

    if settings.port is None:
        log.critical('Environment Variable Not Set: "PRODUCT_CATALOG_SERVICE_PORT"')
        return 1

    app = create_app(settings)
    log.info(f"ProductCatalogService started on port: {settings.port}")
    # uvicorn handles SIGINT/SIGTERM: in-flight requests finish, then the
    # lifespan moves the service to DRAINING and STOPPED.
    uvicorn.run(app, host="0.0.0.0", port=settings.port, log_config=None)
    log.info("ProductCatalogService stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
