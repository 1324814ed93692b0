"""Response envelope helpers shared by every Right Guard route."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from rightguard.errors import RightGuardError
from rightguard.models import ApiResponse

LOGGER = logging.getLogger(__name__)


def envelope(
    *,
    success: bool,
    data: Any = None,
    error: Optional[str] = None,
    message: Optional[str] = None,
    status_code: int = 200,
) -> JSONResponse:
    body = ApiResponse[Any](success=success, data=jsonable_encoder(data, by_alias=True), error=error, message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def ok(data: Any = None, *, message: Optional[str] = None, status_code: int = 200) -> JSONResponse:
    return envelope(success=True, data=data, message=message, status_code=status_code)


def failure(error: str, *, status_code: int) -> JSONResponse:
    return envelope(success=False, error=error, status_code=status_code)


@contextmanager
def failure_boundary(message: str) -> Iterator[None]:
    """Let client errors through and turn anything else into a 500 with ``message``."""

    try:
        yield
    except RightGuardError as exc:
        if exc.status_code < 500:
            raise
        LOGGER.exception("%s: %s", message, exc.message)
        raise RightGuardError(message) from exc
    except Exception as exc:
        LOGGER.exception(message)
        raise RightGuardError(message) from exc


__all__ = ["envelope", "failure", "failure_boundary", "ok"]
