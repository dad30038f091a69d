import os
import uvicorn
import asyncio
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from logger import logger
from utils.exception_handler import (
    handle_validation_error,
    custom_http_exception_handler,
)

from router import CommonRouter, DefaultRouter, StatusRouter, OpenRouter

from database.db import init_models  # sync DB init

app = FastAPI(title="Pincode Validator Service")

# Routers
app.include_router(CommonRouter)
app.include_router(StatusRouter)
app.include_router(DefaultRouter)
app.include_router(OpenRouter)

# Exception handlers
app.add_exception_handler(RequestValidationError, handle_validation_error)
app.add_exception_handler(StarletteHTTPException, custom_http_exception_handler)

# No global CORS middleware: the admin is same-origin and /lookup sets its
# own storefront CORS headers.


# -------------------------------
# Startup event
# -------------------------------
@app.on_event("startup")
async def startup_event():
    loop = asyncio.get_running_loop()
    # Initialize DB safely in executor
    await loop.run_in_executor(None, init_models)
    logger.info("Pincode Validator Service started")


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("RELOAD", "").lower() in {"1", "true", "yes"},
    )
