from datetime import datetime

from models import Pincode_Rule

from conftest import OTHER_SHOP, TEST_SHOP

DASHBOARD_URL = "/api/v1/app/dashboard"


def _seed(db_session, shop, pincode, deliverable, created_at):
    db_session.add(
        Pincode_Rule(
            shop=shop,
            pincode=pincode,
            deliverable=deliverable,
            created_at=created_at,
            updated_at=created_at,
        )
    )
    db_session.commit()


def test_dashboard_without_rules(client, auth_headers):
    response = client.get(DASHBOARD_URL, headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == {
        "ok": True,
        "shop": TEST_SHOP,
        "totalRules": 0,
        "deliverableCount": 0,
        "blockedCount": 0,
        "lastUpdatedAt": None,
    }


def test_dashboard_counts(client, auth_headers, db_session):
    _seed(db_session, TEST_SHOP, "110001", True, datetime(2024, 1, 1))
    _seed(db_session, TEST_SHOP, "110002", True, datetime(2024, 1, 2))
    _seed(db_session, TEST_SHOP, "110003", False, datetime(2024, 2, 1))
    _seed(db_session, OTHER_SHOP, "110004", False, datetime(2024, 3, 1))

    body = client.get(DASHBOARD_URL, headers=auth_headers).json()

    assert body["totalRules"] == 3
    assert body["deliverableCount"] == 2
    assert body["blockedCount"] == 1
    assert body["lastUpdatedAt"].startswith("2024-02-01T00:00:00")


def test_dashboard_last_updated_follows_created_at(client, auth_headers, db_session, create_rule):
    _seed(db_session, TEST_SHOP, "110001", True, datetime(2024, 1, 1))
    _seed(db_session, TEST_SHOP, "110002", True, datetime(2024, 2, 1))

    # editing an old rule does not move the timestamp
    create_rule("110001", deliverable="false")

    body = client.get(DASHBOARD_URL, headers=auth_headers).json()

    assert body["blockedCount"] == 1
    assert body["lastUpdatedAt"].startswith("2024-02-01T00:00:00")


def test_dashboard_requires_session(client):
    assert client.get(DASHBOARD_URL).status_code == 401


def test_landing_page(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json() == "Welcome to the Pincode Validator Service"
