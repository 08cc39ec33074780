import logging
from typing import Any

from fastapi.encoders import jsonable_encoder
from starlette.responses import JSONResponse, Response

from tikky.schemas.counter import ErrorResponse

logger = logging.getLogger("app")

METHOD_NOT_ALLOWED = {405: {"model": ErrorResponse, "description": "Method not allowed"}}
SERVER_ERROR = {500: {"model": ErrorResponse, "description": "Store failure"}}
UNAVAILABLE = {503: {"model": ErrorResponse, "description": "Store unreachable"}}


def json_response(status_code: int, content: Any) -> Response:
    """Encode ``content`` as JSON, keeping ``status_code`` even if encoding fails."""
    try:
        return JSONResponse(status_code=status_code, content=jsonable_encoder(content))
    except (TypeError, ValueError):
        logger.exception(
            "Failed to write JSON response", extra={"event": {"status_code": status_code}}
        )
        return Response(status_code=status_code, media_type="application/json")


def error_response(status_code: int, message: str, headers: dict[str, str] | None = None) -> Response:
    response = json_response(status_code, ErrorResponse(error=message))
    if headers:
        response.headers.update(headers)
    return response
