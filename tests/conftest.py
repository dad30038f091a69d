import os
import sys
import tempfile
import time
import uuid

# configuration must be in place before the app modules are imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SHOPIFY_API_KEY"] = "test-api-key"
os.environ["SHOPIFY_API_SECRET"] = "test-api-secret-0123456789abcdef0123456789"
os.environ["STOREFRONT_ALLOWED_ORIGINS"] = (
    "https://ppdt-store.myshopify.com,https://www.example-store.in"
)
os.environ["LOG_FILE"] = os.path.join(tempfile.gettempdir(), "pincode-validator-tests.log")

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import jwt
import pytest
from fastapi.testclient import TestClient

from database.db import DBBase, SessionLocal, db_engine
import models  # noqa: F401
from main import app


TEST_SHOP = "test-store.myshopify.com"
OTHER_SHOP = "other-store.myshopify.com"


def make_session_token(shop=TEST_SHOP, expires_in=60, secret=None, audience=None):
    now = int(time.time())
    payload = {
        "iss": f"https://{shop}/admin",
        "dest": f"https://{shop}",
        "aud": audience or os.environ["SHOPIFY_API_KEY"],
        "sub": "42",
        "exp": now + expires_in,
        "nbf": now - 5,
        "iat": now - 5,
        "jti": str(uuid.uuid4()),
        "sid": "session-1",
    }
    return jwt.encode(
        payload, secret or os.environ["SHOPIFY_API_SECRET"], algorithm="HS256"
    )


@pytest.fixture(autouse=True)
def db_schema():
    DBBase.metadata.create_all(bind=db_engine)
    yield
    DBBase.metadata.drop_all(bind=db_engine)


@pytest.fixture
def db_session():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {make_session_token()}"}


@pytest.fixture
def other_shop_headers():
    return {"Authorization": f"Bearer {make_session_token(shop=OTHER_SHOP)}"}


@pytest.fixture
def create_rule(client, auth_headers):
    """Save one rule through the admin form action"""

    def _create(pincode, headers=None, **fields):
        form = {"intent": "create", "pincode": pincode}
        form.update({key: str(value) for key, value in fields.items()})
        response = client.post(
            "/api/v1/app/pincodes", data=form, headers=headers or auth_headers
        )
        assert response.status_code == 200, response.text
        return response

    return _create


@pytest.fixture
def upload_csv(client, auth_headers):
    """Post a CSV through the bulk_upload intent"""

    def _upload(csv_text, headers=None, filename="rules.csv"):
        body = csv_text.encode("utf-8") if isinstance(csv_text, str) else csv_text
        return client.post(
            "/api/v1/app/pincodes",
            data={"intent": "bulk_upload"},
            files={"file": (filename, body, "text/csv")},
            headers=headers or auth_headers,
        )

    return _upload
