"""Run the storefront API with uvicorn: ``python -m storefront``."""
from __future__ import annotations

import uvicorn

from storefront.api import create_app
from storefront.container import bootstrap


def main() -> None:
    container = bootstrap()
    app = create_app(container)
    settings = container.settings
    uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_level="info")


if __name__ == "__main__":
    main()
