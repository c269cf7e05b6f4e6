"""Entry point running the explorer under uvicorn."""
import uvicorn

from config.logging import configure_logging
from config.settings import get_settings

from .app import create_app


def main() -> None:
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL, json_logs=settings.LOG_JSON)
    uvicorn.run(
        create_app(settings),
        host=settings.API_HOST,
        port=settings.API_PORT,
        log_config=None
    )


if __name__ == "__main__":
    main()
