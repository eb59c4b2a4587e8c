"""Run the Boxship API with uvicorn."""

import uvicorn

from boxship.settings import settings


def main() -> None:
    uvicorn.run(
        "boxship.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower()
    )


if __name__ == "__main__":
    main()
