"""FastAPI entry point for the webhook server."""

import uvicorn

from paybridge.api import create_api
from paybridge.core.logging import setup_logging

setup_logging()

app = create_api()


if __name__ == "__main__":
    uvicorn.run(
        "paybridge.api_main:app",
        host="0.0.0.0",
        port=8000,
    )
