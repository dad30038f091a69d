from typing import Optional
from urllib.parse import urlparse
from pydantic import BaseModel
import jwt
import http
from fastapi import HTTPException

from context_manager.context import context_shop_data
from logger import logger

from modules.shopify import shopify_config


# schema
class ShopSessionModel(BaseModel):
    shop: str
    user_id: Optional[str] = None
    session_id: Optional[str] = None

    def __str__(self):
        return self.shop


# JWT configuration for Shopify App Bridge session tokens
class JWTToken:
    algorithm = "HS256"
    # seconds of clock skew tolerated between Shopify and this server
    leeway = 10


def _host(url: Optional[str]) -> Optional[str]:
    if not url:
        return None
    return urlparse(url).hostname


def _unauthorized(message: str) -> HTTPException:
    return HTTPException(
        status_code=http.HTTPStatus.UNAUTHORIZED,
        detail={"message": message, "ok": False},
    )


class ShopifySessionHandler:
    @staticmethod
    def decode_session_token(token: str) -> ShopSessionModel:
        """
        Verify an embedded-admin session token and bind the shop it was
        issued for to the request context.
        """
        if not token:
            raise _unauthorized("Session token is required")

        try:
            payload = jwt.decode(
                token,
                shopify_config.SHOPIFY_API_SECRET,
                algorithms=[JWTToken.algorithm],
                audience=shopify_config.SHOPIFY_API_KEY or None,
                leeway=JWTToken.leeway,
                options={"require": ["exp", "dest"]},
            )

        except jwt.ExpiredSignatureError:
            raise _unauthorized("Session token has expired")
        except jwt.InvalidTokenError as e:
            logger.error(msg=f"Invalid session token: {e}")
            raise _unauthorized("Invalid authentication credentials")

        shop = _host(payload.get("dest"))
        issuer_shop = _host(payload.get("iss"))

        if not shop or not shopify_config.validate_shop_domain(shop):
            logger.error(msg=f"Session token for unexpected destination: {shop}")
            raise _unauthorized("Invalid authentication credentials")

        if issuer_shop and issuer_shop != shop:
            logger.error(
                msg=f"Session token issuer {issuer_shop} does not match {shop}"
            )
            raise _unauthorized("Invalid authentication credentials")

        shop_session = ShopSessionModel(
            shop=shop.lower(),
            user_id=str(payload["sub"]) if payload.get("sub") else None,
            session_id=payload.get("sid"),
        )
        context_shop_data.set(shop_session)
        return shop_session
