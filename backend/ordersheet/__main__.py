"""Run the Order Sheet API with uvicorn: `python -m ordersheet`."""

import uvicorn

from ordersheet.config import settings


def main() -> None:
    uvicorn.run(
        "ordersheet.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
