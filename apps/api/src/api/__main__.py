from __future__ import annotations

import os

import uvicorn

from devkit.observability import configure_logging


def main() -> None:
    configure_logging(os.getenv("LOG_LEVEL", "INFO"))
    uvicorn.run(
        "api.app:app",
        host=os.getenv("API_HOST", "0.0.0.0"),
        port=int(os.getenv("API_PORT", "8000")),
    )


if __name__ == "__main__":
    main()
