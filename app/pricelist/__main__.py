"""Run the service with uvicorn: ``python -m app.pricelist``."""

import uvicorn

from .config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run("app.pricelist.main:app", host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
