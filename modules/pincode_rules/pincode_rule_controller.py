import http
from typing import Optional, Union
from fastapi import APIRouter, File, Form, Query, UploadFile
from fastapi.responses import Response
from starlette.datastructures import UploadFile as StarletteUploadFile

# schema
from schema.base import GenericResponseModel
from .pincode_rule_schema import PincodeRuleFormModel

# utils
from utils.response_handler import build_api_response
from modules.shopify import shopify_config

# service
from .pincode_rule_service import PincodeRuleService
from .pincode_rule_csv import SAMPLE_CSV

# creating a pincode rules router
pincode_rule_router = APIRouter(tags=["pincode rules"], prefix="/app/pincodes")


@pincode_rule_router.get(
    "",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
async def get_rules(
    page: int = Query(default=1, ge=1, description="Page number"),
    page_size: int = Query(
        default=50, ge=1, le=500, description="Number of rules per page"
    ),
    search: Optional[str] = Query(default=None, description="Search by pincode"),
):
    """Rules of the current shop, newest first"""
    response: GenericResponseModel = PincodeRuleService.get_rules(
        page=page, page_size=page_size, search=search
    )
    return build_api_response(response)


@pincode_rule_router.post(
    "",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
async def pincode_rule_action(
    intent: Optional[str] = Form(default=None),
    pincode: Optional[str] = Form(default=None),
    deliverable: Optional[str] = Form(default=None),
    eta_min_days: Optional[str] = Form(default=None, alias="etaMinDays"),
    eta_max_days: Optional[str] = Form(default=None, alias="etaMaxDays"),
    cod_available: Optional[str] = Form(default=None, alias="codAvailable"),
    shipping_fee: Optional[str] = Form(default=None, alias="shippingFee"),
    rule_id: Optional[str] = Form(default=None, alias="id"),
    # a plain string "file" field is answered like a missing upload
    file: Union[UploadFile, str, None] = File(default=None),
):
    """Admin form action: intent is create, bulk_upload or delete"""
    intent = (intent or "").strip()

    if intent == "create":
        response = PincodeRuleService.upsert_rule(
            PincodeRuleFormModel(
                pincode=pincode,
                deliverable=deliverable,
                eta_min_days=eta_min_days,
                eta_max_days=eta_max_days,
                cod_available=cod_available,
                shipping_fee=shipping_fee,
            )
        )

    elif intent == "bulk_upload":
        if not isinstance(file, StarletteUploadFile):
            response = GenericResponseModel(
                status_code=http.HTTPStatus.BAD_REQUEST,
                error="Please upload a CSV file.",
            )
        else:
            # one byte past the limit is enough to reject an oversized file
            contents = await file.read(shopify_config.PINCODE_CSV_MAX_BYTES + 1)
            response = PincodeRuleService.bulk_upload(
                file_name=file.filename, contents=contents
            )

    elif intent == "delete":
        response = PincodeRuleService.delete_rule(rule_id=rule_id)

    else:
        response = GenericResponseModel(
            status_code=http.HTTPStatus.BAD_REQUEST, error="Unknown intent"
        )

    return build_api_response(response)


@pincode_rule_router.get("/sample.csv", status_code=http.HTTPStatus.OK)
async def download_sample_csv():
    """Two-row CSV showing every supported column"""
    return Response(
        content=SAMPLE_CSV,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="pincode-sample.csv"'},
    )
