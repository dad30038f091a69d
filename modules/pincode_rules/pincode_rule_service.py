import http
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError

from context_manager.context import context_shop_data, get_current_shop, get_db_session

from logger import logger

# models
from models import Pincode_Rule

# schema
from schema.base import GenericResponseModel
from .pincode_rule_schema import (
    PincodeRuleFormModel,
    PincodeRuleRowModel,
    InvalidRowModel,
    BulkUploadResponseModel,
    PaginationInfo,
)

# utils
from database.utils import parse_uuid
from modules.shopify import shopify_config

from .pincode_rule_csv import PincodeCsvError, import_pincode_csv
from .pincode_rule_validation import validate_rule_fields


def _bad_request(error: str) -> GenericResponseModel:
    return GenericResponseModel(status_code=http.HTTPStatus.BAD_REQUEST, error=error)


def _server_error(error: str) -> GenericResponseModel:
    return GenericResponseModel(
        status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR, error=error
    )


class PincodeRuleService:
    """Admin operations on the shop's pincode rules"""

    @staticmethod
    def get_rules(
        page: int = 1,
        page_size: int = 50,
        search: Optional[str] = None,
    ) -> GenericResponseModel:
        """Rules for the current shop, newest first"""
        try:
            shop = get_current_shop()
            db = get_db_session()

            base_query = db.query(Pincode_Rule).filter(Pincode_Rule.shop == shop)

            if search and search.strip():
                base_query = base_query.filter(
                    Pincode_Rule.pincode.like(f"%{search.strip()}%")
                )

            total_count = base_query.count()
            total_pages = (total_count + page_size - 1) // page_size
            offset = (page - 1) * page_size

            rules = (
                base_query.order_by(
                    Pincode_Rule.created_at.desc(), Pincode_Rule.id.desc()
                )
                .offset(offset)
                .limit(page_size)
                .all()
            )

            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                ok=True,
                data={
                    "rules": [PincodeRuleRowModel.from_rule(rule) for rule in rules],
                    "pagination": PaginationInfo(
                        page=page,
                        page_size=page_size,
                        total_count=total_count,
                        total_pages=total_pages,
                        has_next=page < total_pages,
                        has_prev=page > 1,
                    ),
                },
            )

        except SQLAlchemyError as e:
            logger.error(
                extra=context_shop_data.get(),
                msg=f"Error fetching pincode rules: {str(e)}",
            )
            return _server_error("An error occurred while fetching the rules.")

    @staticmethod
    def upsert_rule(rule_form: PincodeRuleFormModel) -> GenericResponseModel:
        """Create or fully replace the rule for one pincode"""
        validation = validate_rule_fields(rule_form.as_raw_fields(), source="form")
        if not validation.is_valid:
            return _bad_request(validation.first_error.message)

        shop = get_current_shop()
        db = get_db_session()

        try:
            db.execute(Pincode_Rule.upsert_statement(db, shop, validation.values))
            db.flush()

        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                extra=context_shop_data.get(),
                msg=f"Error saving pincode rule {validation.pincode}: {str(e)}",
            )
            return _server_error("An error occurred while saving the rule.")

        logger.info(
            extra=context_shop_data.get(),
            msg=f"Saved pincode rule {validation.pincode}",
        )
        return GenericResponseModel(status_code=http.HTTPStatus.OK, ok=True)

    @staticmethod
    def bulk_upload(file_name: Optional[str], contents: bytes) -> GenericResponseModel:
        """Import a CSV of rules; the valid rows are written as one batch"""
        if len(contents) > shopify_config.PINCODE_CSV_MAX_BYTES:
            return _bad_request(
                f"CSV file is too large (max {shopify_config.PINCODE_CSV_MAX_BYTES} bytes)."
            )

        # utf-8-sig drops the BOM spreadsheet exports put before the header
        csv_text = contents.decode("utf-8-sig", errors="replace")

        shop = get_current_shop()
        db = get_db_session()

        try:
            result = import_pincode_csv(db, shop, csv_text)
            db.flush()

        except PincodeCsvError as e:
            return _bad_request(str(e))

        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                extra=context_shop_data.get(),
                msg=f"Bulk upload of {file_name} failed, batch rolled back: {str(e)}",
            )
            return _server_error(
                "An error occurred while importing the CSV. No rules were changed."
            )

        invalid_detail = result.invalid[: shopify_config.PINCODE_CSV_INVALID_DETAIL_LIMIT]

        return GenericResponseModel(
            status_code=http.HTTPStatus.OK,
            ok=True,
            data=BulkUploadResponseModel(
                inserted=result.inserted,
                updated=result.updated,
                invalidCount=result.invalid_count,
                invalid=[
                    InvalidRowModel(row=row.row, reason=row.reason, pincode=row.pincode)
                    for row in invalid_detail
                ],
            ).model_dump(),
        )

    @staticmethod
    def delete_rule(rule_id: Optional[str]) -> GenericResponseModel:
        """Physically delete one of the current shop's rules"""
        if not rule_id or not rule_id.strip():
            return _bad_request("Missing id")

        shop = get_current_shop()
        db = get_db_session()

        rule_uuid = parse_uuid(rule_id)
        rule = (
            db.query(Pincode_Rule)
            .filter(Pincode_Rule.uuid == rule_uuid, Pincode_Rule.shop == shop)
            .first()
            if rule_uuid
            else None
        )

        if rule is None:
            return GenericResponseModel(
                status_code=http.HTTPStatus.NOT_FOUND, error="Rule not found."
            )

        try:
            db.delete(rule)
            db.flush()

        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                extra=context_shop_data.get(),
                msg=f"Error deleting pincode rule {rule_id}: {str(e)}",
            )
            return _server_error("An error occurred while deleting the rule.")

        logger.info(
            extra=context_shop_data.get(),
            msg=f"Deleted pincode rule {rule.pincode}",
        )
        return GenericResponseModel(status_code=http.HTTPStatus.OK, ok=True)
