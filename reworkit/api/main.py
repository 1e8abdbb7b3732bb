import uvicorn

from reworkit.api.server import create_app
from reworkit.common.config.settings import get_collector_settings
from reworkit.common.config.logging_config import setup_logging, get_logger


def main():
    settings = get_collector_settings()
    setup_logging(log_level=settings.log_level, json_format=settings.json_logs)
    logger = get_logger(__name__)

    app = create_app(settings=settings)
    host, port = settings.get_bind_address()

    logger.info(f"Starting collector on {host}:{port}")

    uvicorn.run(
        app,
        host=host,
        port=port,
        log_config=None,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
