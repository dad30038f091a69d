"""
Shopify app configuration shared by the embedded admin and the storefront
lookup endpoint.
"""

import os
import re
from typing import List

from logger import logger

# App credentials (Shopify Partner Dashboard -> Your App -> Configuration)
SHOPIFY_API_KEY = os.getenv("SHOPIFY_API_KEY", "")
SHOPIFY_API_SECRET = os.getenv("SHOPIFY_API_SECRET", "")

if not SHOPIFY_API_SECRET:
    logger.warning(
        "SHOPIFY_API_SECRET is not set - admin session tokens cannot be verified"
    )

# Storefront origins allowed to read lookup responses. The first entry is the
# fallback advertised to origins that match nothing.
STOREFRONT_ALLOWED_ORIGINS: List[str] = [
    origin.strip()
    for origin in os.getenv(
        "STOREFRONT_ALLOWED_ORIGINS", "https://ppdt-store.myshopify.com"
    ).split(",")
    if origin.strip()
]

# Any https://<store>.myshopify.com storefront or theme editor preview
MYSHOPIFY_ORIGIN_PATTERN = re.compile(
    r"^https://[a-z0-9][a-z0-9-]*\.myshopify\.com$", re.IGNORECASE
)

SHOP_DOMAIN_PATTERN = re.compile(r"^[a-zA-Z0-9][a-zA-Z0-9\-]*\.myshopify\.com$")

# CSV bulk upload limits
PINCODE_CSV_MAX_BYTES = int(os.getenv("PINCODE_CSV_MAX_BYTES", str(5 * 1024 * 1024)))
PINCODE_CSV_INVALID_DETAIL_LIMIT = 50


def validate_shop_domain(shop: str) -> bool:
    """Validate Shopify shop domain format"""
    return bool(SHOP_DOMAIN_PATTERN.match(shop or ""))
