import http
from typing import Dict, Optional
from sqlalchemy.exc import SQLAlchemyError

from context_manager.context import get_db_session

from logger import logger

# models
from models import Pincode_Rule

# schema
from schema.base import GenericResponseModel
from .lookup_schema import LookupResultModel

from modules.shopify import shopify_config
from modules.pincode_rules.pincode_rule_validation import is_valid_pincode


ENTER_PINCODE_MESSAGE = "Enter 6-digit pincode."
NOT_DELIVERABLE_MESSAGE = "Not deliverable for this pincode."
DELIVERABLE_MESSAGE = "Delivery available."


def resolve_allowed_origin(origin: Optional[str]) -> str:
    """
    Echo the request origin when it is allow-listed or a *.myshopify.com
    storefront, otherwise advertise the first allow-listed origin.

    This only decides whether the browser exposes the response to the page.
    The request itself is still served.
    """
    allowed = shopify_config.STOREFRONT_ALLOWED_ORIGINS
    if origin and (
        origin in allowed or shopify_config.MYSHOPIFY_ORIGIN_PATTERN.match(origin)
    ):
        return origin
    return allowed[0] if allowed else ""


def build_cors_headers(origin: Optional[str]) -> Dict[str, str]:
    return {
        "Access-Control-Allow-Origin": resolve_allowed_origin(origin),
        "Access-Control-Allow-Methods": "GET, OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type",
        "Access-Control-Max-Age": "86400",
        "Vary": "Origin",
    }


class LookupService:
    """Storefront deliverability check, no authentication"""

    @staticmethod
    def check_pincode(shop: Optional[str], pincode: Optional[str]) -> GenericResponseModel:
        shop = (shop or "").strip().lower()
        pincode = (pincode or "").strip()

        if not shop:
            return GenericResponseModel(
                status_code=http.HTTPStatus.BAD_REQUEST, error="Missing shop"
            )

        # a shopper typo is an answer, not a client error
        if not is_valid_pincode(pincode):
            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                ok=True,
                data=LookupResultModel(
                    deliverable=False, message=ENTER_PINCODE_MESSAGE
                ).as_response_data(),
            )

        try:
            db = get_db_session()
            rule = (
                db.query(Pincode_Rule)
                .filter(Pincode_Rule.shop == shop, Pincode_Rule.pincode == pincode)
                .first()
            )

        except SQLAlchemyError as e:
            logger.error(msg=f"Lookup failed for {shop}/{pincode}: {str(e)}")
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                error="Could not check this pincode right now.",
            )

        if rule is None or not rule.deliverable:
            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                ok=True,
                data=LookupResultModel(
                    deliverable=False, message=NOT_DELIVERABLE_MESSAGE
                ).as_response_data(),
            )

        return GenericResponseModel(
            status_code=http.HTTPStatus.OK,
            ok=True,
            data=LookupResultModel(
                deliverable=True,
                etaMinDays=rule.eta_min_days,
                etaMaxDays=rule.eta_max_days,
                codAvailable=rule.cod_available,
                shippingFee=rule.shipping_fee,
                message=DELIVERABLE_MESSAGE,
            ).as_response_data(),
        )
