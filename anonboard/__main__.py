"""Run the API with uvicorn: ``python -m anonboard``."""

import uvicorn

from anonboard.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "anonboard.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
        log_config=None,
    )


if __name__ == "__main__":
    main()
