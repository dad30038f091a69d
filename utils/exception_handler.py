from typing import List, Dict
from fastapi import Request, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from logger import logger


# format the validation errors into our desired output
def format_validation_errors(errors: List[dict]) -> Dict:
    formatted_errors = {}

    for error in errors:
        # Extract the field name and error message
        field = error["loc"][-1] if len(error["loc"]) > 1 else "Unknown"
        message = error["msg"]

        if field in formatted_errors:
            formatted_errors[field].append(message)
        else:
            formatted_errors[field] = [message]

    return {
        "ok": False,
        "error": "Validation error occurred.",
        "fields": formatted_errors,
    }


async def handle_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.error(msg=f"422 on {request.url}: {exc.errors()}")
    return JSONResponse(status_code=422, content=format_validation_errors(exc.errors()))


def _detail_message(detail) -> str:
    if isinstance(detail, dict):
        return str(detail.get("message") or detail.get("error") or detail)
    return str(detail)


# Custom internal server error handler
async def custom_http_exception_handler(
    request: Request, exc: HTTPException
) -> JSONResponse:
    if exc.status_code == 500:
        logger.error(f"Internal server error: {exc.detail}")
        return JSONResponse(
            status_code=500,
            content={
                "ok": False,
                "error": "An internal server error occurred. Please try again later.",
            },
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"ok": False, "error": _detail_message(exc.detail)},
        headers=getattr(exc, "headers", None),
    )
