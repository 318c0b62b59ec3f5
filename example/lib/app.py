"""Example project entry point — `webapp run` from ./example picks this up."""

import uvicorn

from webapp.config import get_settings


if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "webapp.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL,
    )
