import uvicorn

from appraisal_api.core.config import get_settings
from appraisal_api.core.logging import setup_logging


def main() -> None:
    """Serve the app on the configured host and port."""
    settings = get_settings()
    setup_logging(settings.log_level)
    uvicorn.run(
        "appraisal_api.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        lifespan="on",
        log_config=None,
    )


if __name__ == "__main__":
    main()
