"""Run the relay with uvicorn on the configured port (3000 unless PORT is set)."""

from __future__ import annotations

import uvicorn

from app.core.settings import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.is_development,
        # setup_logging() already configured the root logger.
        log_config=None,
    )


if __name__ == "__main__":
    main()
