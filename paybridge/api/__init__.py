"""API module."""

from fastapi import FastAPI

from paybridge.api.webhook import create_webhook_router
from paybridge.payments.providers.registry import ProviderRegistry


def create_api(registry: ProviderRegistry | None = None) -> FastAPI:
    """Create FastAPI application serving provider webhooks."""
    app = FastAPI(
        title="paybridge",
        description="Webhook handlers for payment providers",
        version="0.1.0",
    )
    app.include_router(create_webhook_router(registry))
    return app


__all__ = ["create_api", "create_webhook_router"]
