"""Run the URL Shortener Service with uvicorn: ``python -m shortlinks``."""

import uvicorn

from .core.config import settings


def main() -> None:
    uvicorn.run("shortlinks.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
