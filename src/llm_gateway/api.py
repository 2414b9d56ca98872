"""FastAPI HTTP endpoints for the gateway.

Routes:
    GET  /chat/models       providers and their model listings
    GET  /chat/health       per-provider availability
    POST /chat/completions  JSON result, or an event stream when ``stream`` is set
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field, field_validator

from llm_gateway.errors import (
    GatewayError,
    MissingCredentialsError,
    ProviderHttpError,
    UnsupportedProviderError,
)
from llm_gateway.gateway import Gateway
from llm_gateway.sse import SSE_HEADERS, encode_stream
from llm_gateway.types import GenerationOptions, Turn, turns_have_images

router = APIRouter(prefix="/chat")


class ChatRequest(BaseModel):
    """Body of POST /chat/completions."""

    provider: str = Field(..., max_length=50)
    model: str = Field(..., max_length=100)
    messages: list[Turn] = Field(..., min_length=1)
    options: GenerationOptions = Field(default_factory=GenerationOptions)
    stream: bool = False

    @field_validator("provider", "model")
    @classmethod
    def _lowercase(cls, v: str) -> str:
        return v.strip().lower()


def get_gateway(request: Request) -> Gateway:
    return request.app.state.gateway


def _http_error(exc: GatewayError) -> HTTPException:
    detail: dict[str, Any] = {"error": str(exc), "kind": exc.kind}
    if isinstance(exc, UnsupportedProviderError):
        return HTTPException(status_code=400, detail=detail)
    if isinstance(exc, MissingCredentialsError):
        return HTTPException(status_code=503, detail=detail)
    if isinstance(exc, ProviderHttpError):
        detail["upstream_status"] = exc.status_code
        detail["upstream_body"] = exc.body
    return HTTPException(status_code=502, detail=detail)


@router.get("/models")
async def list_models(gateway: Gateway = Depends(get_gateway)) -> dict[str, Any]:
    """Return the providers and the model names callers may use."""
    return {
        "data": {
            "providers": list(gateway.list_providers()),
            "models": gateway.available_models(),
        }
    }


@router.get("/health")
async def health_check(gateway: Gateway = Depends(get_gateway)) -> dict[str, Any]:
    status = {}
    for name in gateway.list_providers():
        provider = gateway.get_provider(name)
        status[name] = {
            "available": True,
            "models": list(gateway.list_models(name)),
            "status": "operational",
            "streaming": "native" if provider.native_streaming else "simulated",
        }
    return {"data": status, "timestamp": datetime.now(timezone.utc).isoformat()}


@router.post("/completions", response_model=None)
async def chat_completions(
    body: ChatRequest, gateway: Gateway = Depends(get_gateway)
) -> StreamingResponse | dict[str, Any]:
    """Generate a reply for ``messages``; streams SSE frames when ``stream`` is true."""
    if body.stream:
        try:
            events = gateway.generate_streaming(
                body.provider, body.model, body.messages, body.options
            )
        except GatewayError as exc:
            raise _http_error(exc) from exc

        return StreamingResponse(
            encode_stream(
                events,
                provider=body.provider,
                has_images=turns_have_images(body.messages),
            ),
            media_type="text/event-stream",
            headers=SSE_HEADERS,
        )

    try:
        result = await gateway.generate(body.provider, body.model, body.messages, body.options)
    except GatewayError as exc:
        raise _http_error(exc) from exc

    return {
        "data": {
            "content": result.content,
            "usage": result.usage,
            "model_used": {
                "provider": body.provider,
                "model": body.model,
                "api_model": result.model,
            },
        }
    }


def create_app(gateway: Gateway | None = None) -> FastAPI:
    """Build the FastAPI app.

    A gateway created here (from environment settings) is closed on shutdown;
    a gateway passed in is left for the caller to close.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if gateway is not None:
            yield
            return
        app.state.gateway = Gateway()
        try:
            yield
        finally:
            await app.state.gateway.aclose()

    app = FastAPI(title="llm-gateway", lifespan=lifespan)
    if gateway is not None:
        app.state.gateway = gateway
    app.include_router(router)
    return app


__all__ = ["router", "create_app", "ChatRequest"]
