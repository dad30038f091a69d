import http
from fastapi import APIRouter
from schema.base import GenericResponseModel

# utils
from utils.response_handler import build_api_response

# service
from .dashboard_service import DashboardService

# creating a dashboard router
dashboard_router = APIRouter(tags=["dashboard"], prefix="/app/dashboard")


@dashboard_router.get(
    "",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
async def get_rule_summary():
    response: GenericResponseModel = DashboardService.get_rule_summary()

    return build_api_response(response)
