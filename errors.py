"""
Error taxonomy + JSON envelope handlers.
Every failure leaves the API as {"success": false, "error": "..."}.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class AppError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    default_message = "Missing required fields"


class AuthenticationError(AppError):
    status_code = 401
    default_message = "Invalid email or password"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Not found"


class ConflictError(AppError):
    status_code = 409
    default_message = "Already exists"


class DatabaseError(AppError):
    status_code = 500
    default_message = "Database error"


def error_response(status_code: int, message: str, **extra):
    body = {"success": False, "error": message}
    body.update(extra)
    return JSONResponse(status_code=status_code, content=body)


async def app_error_handler(request: Request, exc: AppError):
    return error_response(exc.status_code, exc.message)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    fields = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        fields.append({"field": ".".join(loc), "message": err.get("msg", "")})
    return error_response(400, ValidationError.default_message, fields=fields)


async def sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError):
    # Driver ki details sirf log mein, client ko nahi
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return error_response(DatabaseError.status_code, DatabaseError.default_message)


def register_error_handlers(app: FastAPI):
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_error_handler)
