from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from context_manager.context import build_request_context

# utils
from utils.jwt_token_handler import ShopifySessionHandler, ShopSessionModel

# routers
from modules.pincode_rules import pincode_rule_router
from modules.dashboard import dashboard_router

security = HTTPBearer(auto_error=False)


async def get_current_shop_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> ShopSessionModel:
    """
    Resolve the shop from the embedded admin's session token.
    Every admin route is scoped to this shop.
    """
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=401,
            detail={"message": "Session token is required", "ok": False},
        )

    return ShopifySessionHandler.decode_session_token(credentials.credentials)


# create a comming master router for all the admin routes in the service
CommonRouter = APIRouter(
    prefix="/api/v1",
    dependencies=[Depends(build_request_context), Depends(get_current_shop_session)],
)


# add all the routes to the master router
CommonRouter.include_router(pincode_rule_router)
CommonRouter.include_router(dashboard_router)
