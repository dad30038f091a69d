import http
from sqlalchemy import func, case, select
from sqlalchemy.exc import SQLAlchemyError

from logger import logger
from context_manager.context import context_shop_data, get_current_shop, get_db_session

# models
from models import Pincode_Rule

# schema
from schema.base import GenericResponseModel
from .dashboard_schema import DashboardSummaryModel


class DashboardService:

    @staticmethod
    def get_rule_summary() -> GenericResponseModel:
        """Rule counts for the home page cards"""
        try:
            db = get_db_session()
            shop = get_current_shop()

            summary_stmt = select(
                func.count(Pincode_Rule.id).label("total_rules"),
                func.sum(case((Pincode_Rule.deliverable.is_(True), 1), else_=0)).label(
                    "deliverable"
                ),
                func.max(Pincode_Rule.created_at).label("last_created_at"),
            ).filter(Pincode_Rule.shop == shop)

            summary = db.execute(summary_stmt).one()

            total_rules = summary.total_rules or 0
            deliverable_count = summary.deliverable or 0

            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                ok=True,
                data=DashboardSummaryModel(
                    shop=shop,
                    totalRules=total_rules,
                    deliverableCount=deliverable_count,
                    blockedCount=total_rules - deliverable_count,
                    lastUpdatedAt=summary.last_created_at,
                ),
            )

        except SQLAlchemyError as e:
            logger.error(
                extra=context_shop_data.get(),
                msg=f"Error building rule summary: {str(e)}",
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                error="An error occurred while loading the dashboard.",
            )
