import logging
from contextlib import contextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from steward.services.github.client import GitHubNotFoundError
from steward.services.maintainer_service import MaintainerLookupError

logger = logging.getLogger(__name__)


@contextmanager
def route_errors(failure_message: str, not_found_message: str = "User not found"):
    """
    Map service failures onto HTTP errors for one route.

    Lookup failures keep their status, unknown GitHub users become 404, and
    anything unexpected is logged and surfaced as 500 with ``failure_message``.
    """
    try:
        yield
    except HTTPException:
        raise
    except MaintainerLookupError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message)
    except GitHubNotFoundError:
        raise HTTPException(status_code=404, detail=not_found_message)
    except Exception:
        logger.exception(failure_message)
        raise HTTPException(status_code=500, detail=failure_message)


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    return f"{location}: {first.get('msg')}" if location else str(first.get("msg"))


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": _validation_message(exc)})
