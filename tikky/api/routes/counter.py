import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from starlette.responses import PlainTextResponse

from tikky.api import deps
from tikky.api.responses import (
    METHOD_NOT_ALLOWED,
    SERVER_ERROR,
    UNAVAILABLE,
    json_response,
)
from tikky.core.config import Settings
from tikky.schemas.counter import CounterValue, HealthStatus
from tikky.services.counter_store import CounterStore, StoreError
from tikky.services.exposition import CONTENT_TYPE, COUNTER_UNREADABLE, render_metrics

logger = logging.getLogger(__name__)

router = APIRouter(tags=["counter"])


@router.post(
    "/write", response_model=CounterValue, responses={**METHOD_NOT_ALLOWED, **SERVER_ERROR}
)
def write_counter(
    store: CounterStore = Depends(deps.get_store),
    settings: Settings = Depends(deps.get_app_settings),
):
    try:
        value = store.increment(settings.counter_key)
    except StoreError as exc:
        logger.error(
            "Failed to increment redis counter",
            extra={"event": {"key": settings.counter_key, "err": str(exc)}},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update counter",
        ) from exc
    return json_response(status.HTTP_200_OK, CounterValue(value=value))


@router.get(
    "/read", response_model=CounterValue, responses={**METHOD_NOT_ALLOWED, **SERVER_ERROR}
)
def read_counter(
    store: CounterStore = Depends(deps.get_store),
    settings: Settings = Depends(deps.get_app_settings),
):
    try:
        value = store.get(settings.counter_key)
    except StoreError as exc:
        logger.error(
            "Failed to read redis counter",
            extra={"event": {"key": settings.counter_key, "err": str(exc)}},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to read counter",
        ) from exc
    # never incremented
    if value is None:
        value = 0
    return json_response(status.HTTP_200_OK, CounterValue(value=value))


@router.get(
    "/health", response_model=HealthStatus, responses={**METHOD_NOT_ALLOWED, **UNAVAILABLE}
)
def health(
    store: CounterStore = Depends(deps.get_store),
    settings: Settings = Depends(deps.get_app_settings),
):
    try:
        store.ping()
    except StoreError as exc:
        logger.error(
            "Health check failed - Redis connectivity",
            extra={"event": {"err": str(exc)}},
        )
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Redis unavailable",
        ) from exc
    return json_response(status.HTTP_200_OK, HealthStatus(service=settings.service_name))


@router.get(
    "/metrics",
    response_class=PlainTextResponse,
    responses={**METHOD_NOT_ALLOWED, 200: {"content": {"text/plain": {}}}},
)
def metrics(
    request: Request,
    store: CounterStore = Depends(deps.get_store),
    settings: Settings = Depends(deps.get_app_settings),
):
    """Best-effort scrape: store failures degrade to sentinel values, never to an error."""
    try:
        value = store.get(settings.counter_key)
    except StoreError as exc:
        logger.error(
            "Failed to read counter for metrics",
            extra={"event": {"key": settings.counter_key, "err": str(exc)}},
        )
        value = COUNTER_UNREADABLE
    if value is None:
        value = 0

    try:
        store.ping()
        connected = True
    except StoreError:
        connected = False

    body = render_metrics(
        counter=value,
        connected=connected,
        version=settings.version,
        service=settings.service_name,
        extra=request.app.state.request_metrics.exposition(),
    )
    return PlainTextResponse(body, status_code=status.HTTP_200_OK, media_type=CONTENT_TYPE)
