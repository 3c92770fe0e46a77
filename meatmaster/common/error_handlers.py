from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from meatmaster.common.exceptions import ValidationError
from meatmaster.logger_config import logger


def register_error_handlers(app: FastAPI):
    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "success": False,
                "message": exc.detail,
                "status_code": exc.status_code,
            },
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=422,
            content={
                "success": False,
                "message": "Validation failed",
                "errors": jsonable_errors(exc),
                "status_code": 422,
            },
        )

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "success": False,
                "message": str(exc),
                "status_code": status.HTTP_400_BAD_REQUEST,
            },
        )

    @app.exception_handler(Exception)
    async def handle_exception(request: Request, exc: Exception):
        # Log the exception with traceback
        logger.exception("Unhandled exception occurred")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "success": False,
                "message": "Internal Server Error",
                "details": str(exc),
                "status_code": status.HTTP_500_INTERNAL_SERVER_ERROR,
            },
        )


def jsonable_errors(exc: RequestValidationError) -> list:
    errors = []
    for err in exc.errors():
        errors.append({
            "field": ".".join(str(part) for part in err.get("loc", ())),
            "message": err.get("msg"),
        })
    return errors
