"""Uniform JSON response envelope.

    {"success": true, "data": ...}
    {"success": false, "error": {"code": ..., "message": ...}}
"""
from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

ERROR_CODES = {
    400: "VALIDATION_ERROR",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    409: "CONFLICT",
    500: "INTERNAL_ERROR",
}


def success_response(data: Any, status_code: int = 200) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": True, "data": jsonable_encoder(data)}
    )


def error_response(message: str, status_code: int = 400, code: str | None = None) -> JSONResponse:
    if code is None:
        code = ERROR_CODES.get(status_code, "INTERNAL_ERROR" if status_code >= 500 else "VALIDATION_ERROR")
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": {"code": code, "message": message}}
    )
