"""Run the credguard server: ``python -m credguard``."""

import uvicorn

from credguard.api.config import settings


def main():
    """Serve the API; the scheduler starts and stops with the app lifespan."""
    uvicorn.run(
        "credguard.api.app:app",
        host=settings.host,
        port=settings.port,
        log_level="info"
    )


if __name__ == "__main__":
    main()
