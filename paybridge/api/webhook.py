"""Webhook endpoint for payment provider callbacks."""

import logging

from fastapi import APIRouter, Request, Response

from paybridge.core.exceptions import ConfigurationError
from paybridge.payments.providers import get_registry
from paybridge.payments.providers.registry import ProviderRegistry
from paybridge.payments.schemas import WebhookRequest

logger = logging.getLogger(__name__)


def create_webhook_router(registry: ProviderRegistry | None = None) -> APIRouter:
    """Create a router exposing ``POST /webhook/{provider}``.

    The raw body is handed to the provider adapter untouched so signatures
    can be checked against the exact bytes that were signed.
    """
    router = APIRouter(prefix="/webhook", tags=["webhook"])

    @router.post("/{provider}")
    async def provider_webhook(provider: str, request: Request) -> Response:
        try:
            adapter = (registry or get_registry()).resolve(provider)
        except ConfigurationError:
            logger.warning("Webhook for unknown provider: %s", provider)
            return Response(content="Unknown provider", status_code=404)

        body = await request.body()
        result = await adapter.handle_webhook(
            WebhookRequest(
                body=body,
                headers=dict(request.headers),
                method=request.method,
            )
        )

        logger.info("Webhook %s answered %d", provider, result.status_code)
        return Response(
            content=result.body,
            status_code=result.status_code,
            media_type="text/plain" if result.body else None,
        )

    return router


__all__ = ["create_webhook_router"]
