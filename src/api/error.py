"""HTTP error mapping

Use cases return Error values; routes raise ClientError so one handler
renders every failure as {"error": {"code", "message"}}.
"""

from typing import Optional
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from libs.result import Error
from src.app.use_cases.invoicing.errors import ErrorKind, kind_of

VALIDATION_ERROR = "VALIDATION_ERROR"

KIND_STATUS = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.BUSINESS_RULE: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_for(error: Error) -> int:
    return KIND_STATUS[kind_of(error.code)]


class ClientError(Exception):
    """Error surfaced to the HTTP caller; status defaults to the code's kind"""

    def __init__(self, error: Error, status_code: Optional[int] = None):
        self.error = error
        self.status_code = status_code or status_for(error)
        super().__init__(error.message)


def error_body(code: str, message: str) -> dict:
    return {"error": {"code": code, "message": message}}


async def client_error_handler(request: Request, exc: ClientError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.error.code, exc.error.message),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(VALIDATION_ERROR, details or "Invalid request parameters"),
    )
