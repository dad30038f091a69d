import http
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import PlainTextResponse, Response

from context_manager.context import build_request_context
from logger import logger

# schema
from schema.base import GenericResponseModel

# utils
from utils.response_handler import build_api_response

# service
from .lookup_service import LookupService, build_cors_headers

# storefront-facing routes, no authentication
lookup_router = APIRouter(tags=["lookup"])


@lookup_router.options("/lookup", status_code=http.HTTPStatus.NO_CONTENT)
async def lookup_preflight(request: Request):
    return Response(
        status_code=http.HTTPStatus.NO_CONTENT,
        headers=build_cors_headers(request.headers.get("origin")),
    )


@lookup_router.get(
    "/lookup",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
    dependencies=[Depends(build_request_context)],
)
async def lookup_pincode(
    request: Request,
    shop: Optional[str] = Query(default=None),
    pincode: Optional[str] = Query(default=None),
):
    """Is this pincode deliverable for this shop"""
    headers = build_cors_headers(request.headers.get("origin"))
    try:
        response: GenericResponseModel = LookupService.check_pincode(
            shop=shop, pincode=pincode
        )
    except Exception as e:
        logger.error(msg=f"Unhandled error in pincode lookup: {str(e)}")
        response = GenericResponseModel(
            status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
            error="An error occurred while checking the pincode.",
        )
    return build_api_response(response, headers=headers)


@lookup_router.get("/proxy", response_class=PlainTextResponse)
async def proxy_ping():
    return "Pincode Validator Proxy OK"
