import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from busbook.errors import BookingError

logger = logging.getLogger(__name__)


async def booking_error_handler(request: Request, exc: Exception) -> JSONResponse:
    error = exc if isinstance(exc, BookingError) else BookingError(str(exc))
    return JSONResponse(status_code=error.status_code, content={"detail": error.message, "code": error.code})


async def general_500_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error", "code": "internal_error"},
    )


EXCEPTION_HANDLERS = {
    BookingError: booking_error_handler,
    Exception: general_500_exception_handler,
}


def register_exception_handlers(app: FastAPI) -> None:
    for exception_class, handler in EXCEPTION_HANDLERS.items():
        app.add_exception_handler(exception_class, handler)
