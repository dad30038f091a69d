import uuid

from sqlalchemy.exc import OperationalError

from models import Pincode_Rule
from modules.shopify import shopify_config

from conftest import TEST_SHOP, make_session_token

RULES_URL = "/api/v1/app/pincodes"


def _list_rules(client, headers, **params):
    response = client.get(RULES_URL, headers=headers, params=params)
    assert response.status_code == 200, response.text
    return response.json()


def _lookup(client, pincode, shop=TEST_SHOP):
    return client.get("/lookup", params={"shop": shop, "pincode": pincode}).json()


# ---------------------------------------------------------------------------
# authentication
# ---------------------------------------------------------------------------


def test_admin_routes_require_session_token(client):
    response = client.get(RULES_URL)

    assert response.status_code == 401
    assert response.json() == {"ok": False, "error": "Session token is required"}


def test_expired_session_token(client):
    token = make_session_token(expires_in=-120)
    response = client.get(RULES_URL, headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json()["error"] == "Session token has expired"


def test_session_token_with_wrong_secret(client):
    token = make_session_token(secret="not-the-app-secret-0123456789abcdef")
    response = client.get(RULES_URL, headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json()["error"] == "Invalid authentication credentials"


def test_session_token_for_another_app(client):
    token = make_session_token(audience="some-other-app")
    response = client.get(RULES_URL, headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


def test_session_token_for_non_shopify_destination(client):
    token = make_session_token(shop="evil.example.com")
    response = client.get(RULES_URL, headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


# ---------------------------------------------------------------------------
# create / update
# ---------------------------------------------------------------------------


def test_create_rule(client, auth_headers):
    response = client.post(
        RULES_URL,
        headers=auth_headers,
        data={
            "intent": "create",
            "pincode": "110001",
            "deliverable": "true",
            "etaMinDays": "2",
            "etaMaxDays": "4",
            "codAvailable": "true",
            "shippingFee": "49",
        },
    )

    assert response.status_code == 200
    assert response.json() == {"ok": True}

    rules = _list_rules(client, auth_headers)["rules"]
    assert len(rules) == 1
    rule = rules[0]
    assert rule["shop"] == TEST_SHOP
    assert rule["pincode"] == "110001"
    assert rule["deliverable"] is True
    assert rule["etaMinDays"] == 2
    assert rule["etaMaxDays"] == 4
    assert rule["codAvailable"] is True
    assert rule["shippingFee"] == 49
    assert rule["eta"] == "2 - 4"
    assert rule["codText"] == "Yes"
    assert rule["deliverText"] == "Yes"
    assert rule["shipText"] == "49"
    uuid.UUID(rule["id"])


def test_create_rule_defaults(client, auth_headers, create_rule):
    create_rule("560001")

    rule = _list_rules(client, auth_headers)["rules"][0]
    assert rule["deliverable"] is True
    assert rule["codAvailable"] is False
    assert rule["etaMinDays"] is None
    assert rule["shippingFee"] is None
    assert rule["eta"] == "-"
    assert rule["codText"] == "No"
    assert rule["shipText"] == "-"


def test_eta_display_with_one_bound(client, auth_headers, create_rule):
    create_rule("560001", etaMaxDays=5)

    rule = _list_rules(client, auth_headers)["rules"][0]
    assert rule["eta"] == "- - 5"


def test_create_rule_is_idempotent_upsert(client, auth_headers, create_rule, db_session):
    create_rule("110001", shippingFee=49, codAvailable="true")
    first_id = _list_rules(client, auth_headers)["rules"][0]["id"]

    create_rule("110001", deliverable="false")

    rules = _list_rules(client, auth_headers)["rules"]
    assert len(rules) == 1
    assert rules[0]["id"] == first_id
    # full replacement, omitted fields are reset
    assert rules[0]["deliverable"] is False
    assert rules[0]["shippingFee"] is None
    assert rules[0]["codAvailable"] is False

    assert db_session.query(Pincode_Rule).count() == 1


def test_create_rule_invalid_pincode(client, auth_headers):
    response = client.post(
        RULES_URL, headers=auth_headers, data={"intent": "create", "pincode": "1234"}
    )

    assert response.status_code == 400
    assert response.json() == {"ok": False, "error": "Pincode must be exactly 6 digits."}


def test_create_rule_invalid_numbers(client, auth_headers):
    cases = {
        "etaMinDays": "ETA Min must be a non-negative integer.",
        "etaMaxDays": "ETA Max must be a non-negative integer.",
        "shippingFee": "Shipping fee must be a non-negative integer.",
    }
    for field, message in cases.items():
        response = client.post(
            RULES_URL,
            headers=auth_headers,
            data={"intent": "create", "pincode": "110001", field: "-3"},
        )
        assert response.status_code == 400
        assert response.json()["error"] == message

    assert _list_rules(client, auth_headers)["rules"] == []


def test_unknown_intent(client, auth_headers):
    response = client.post(RULES_URL, headers=auth_headers, data={"intent": "archive"})

    assert response.status_code == 400
    assert response.json()["error"] == "Unknown intent"


def test_rules_are_scoped_to_shop(client, auth_headers, other_shop_headers, create_rule):
    create_rule("110001")
    create_rule("110002", headers=other_shop_headers)

    rules = _list_rules(client, auth_headers)["rules"]
    assert [rule["pincode"] for rule in rules] == ["110001"]


def test_list_rules_search_and_pagination(client, auth_headers, create_rule):
    for pincode in ("110001", "110002", "560001"):
        create_rule(pincode)

    body = _list_rules(client, auth_headers, search="1100")
    assert sorted(rule["pincode"] for rule in body["rules"]) == ["110001", "110002"]

    body = _list_rules(client, auth_headers, page=2, page_size=2)
    assert len(body["rules"]) == 1
    assert body["pagination"]["total_count"] == 3
    assert body["pagination"]["total_pages"] == 2
    assert body["pagination"]["has_prev"] is True
    assert body["pagination"]["has_next"] is False


def test_list_rules_rejects_bad_page(client, auth_headers):
    response = client.get(RULES_URL, headers=auth_headers, params={"page": 0})

    assert response.status_code == 422
    assert response.json()["ok"] is False
    assert "page" in response.json()["fields"]


# ---------------------------------------------------------------------------
# bulk upload
# ---------------------------------------------------------------------------


def test_bulk_upload(client, upload_csv):
    response = upload_csv("pincode,deliverable,etaMinDays\n110001,true,2\n12345,true,3\n")

    assert response.status_code == 200
    assert response.json() == {
        "ok": True,
        "inserted": 1,
        "updated": 0,
        "invalidCount": 1,
        "invalid": [
            {"row": 3, "reason": "Invalid pincode (must be 6 digits).", "pincode": "12345"}
        ],
    }

    body = _lookup(client, "110001")
    assert body["deliverable"] is True
    assert body["etaMinDays"] == 2


def test_bulk_upload_twice_updates(upload_csv):
    csv_text = "pincode,deliverable,etaMinDays\n110001,true,2\n12345,true,3\n"
    upload_csv(csv_text)

    body = upload_csv(csv_text).json()

    assert body["inserted"] == 0
    assert body["updated"] == 1
    assert body["invalidCount"] == 1


def test_bulk_upload_caps_invalid_detail(upload_csv):
    rows = "\n".join(f"bad{i}" for i in range(60))
    body = upload_csv(f"pincode\n{rows}\n110001\n").json()

    assert body["inserted"] == 1
    assert body["invalidCount"] == 60
    assert len(body["invalid"]) == 50
    assert body["invalid"][0]["row"] == 2
    assert body["invalid"][-1]["row"] == 51


def test_bulk_upload_strips_bom(client, upload_csv):
    body = upload_csv("\ufeffpincode,deliverable\n110001,no\n".encode("utf-8")).json()

    assert body["inserted"] == 1
    assert _lookup(client, "110001")["deliverable"] is False


def test_bulk_upload_missing_pincode_column(client, auth_headers, upload_csv):
    response = upload_csv("zip,deliverable\n110001,true\n")

    assert response.status_code == 400
    assert response.json() == {"ok": False, "error": 'CSV must include a "pincode" column.'}
    assert _list_rules(client, auth_headers)["rules"] == []


def test_bulk_upload_without_file(client, auth_headers):
    response = client.post(RULES_URL, headers=auth_headers, data={"intent": "bulk_upload"})

    assert response.status_code == 400
    assert response.json()["error"] == "Please upload a CSV file."


def test_bulk_upload_with_text_instead_of_file(client, auth_headers):
    response = client.post(
        RULES_URL,
        headers=auth_headers,
        data={"intent": "bulk_upload", "file": "pincode\n110001\n"},
    )

    assert response.status_code == 400
    assert response.json() == {"ok": False, "error": "Please upload a CSV file."}
    assert _list_rules(client, auth_headers)["rules"] == []


def test_stray_file_text_does_not_break_other_intents(client, auth_headers):
    response = client.post(
        RULES_URL,
        headers=auth_headers,
        data={"intent": "create", "pincode": "110001", "file": "leftover"},
    )

    assert response.status_code == 200
    assert response.json() == {"ok": True}


def test_bulk_upload_at_size_limit(monkeypatch, upload_csv):
    csv_text = "pincode\n110001\n"
    monkeypatch.setattr(shopify_config, "PINCODE_CSV_MAX_BYTES", len(csv_text))

    response = upload_csv(csv_text)

    assert response.status_code == 200
    assert response.json()["inserted"] == 1


def test_bulk_upload_over_limit(monkeypatch, upload_csv):
    csv_text = "pincode\n110001\n"
    monkeypatch.setattr(shopify_config, "PINCODE_CSV_MAX_BYTES", len(csv_text) - 1)

    response = upload_csv(csv_text + "110002\n" * 1000)

    assert response.status_code == 400
    assert response.json()["error"] == f"CSV file is too large (max {len(csv_text) - 1} bytes)."


def test_bulk_upload_too_large(monkeypatch, upload_csv):
    monkeypatch.setattr(shopify_config, "PINCODE_CSV_MAX_BYTES", 10)

    response = upload_csv("pincode\n110001\n110002\n")

    assert response.status_code == 400
    assert response.json()["error"].startswith("CSV file is too large")


def test_bulk_upload_rolls_back_on_database_error(monkeypatch, client, auth_headers, upload_csv):
    original_upsert = Pincode_Rule.upsert_statement
    calls = {"count": 0}

    def failing_upsert(db, shop, values):
        calls["count"] += 1
        if calls["count"] == 2:
            raise OperationalError("INSERT INTO pincode_rule", {}, Exception("disk I/O error"))
        return original_upsert(db, shop, values)

    monkeypatch.setattr(Pincode_Rule, "upsert_statement", staticmethod(failing_upsert))

    response = upload_csv("pincode\n110001\n110002\n110003\n")

    assert response.status_code == 500
    assert response.json() == {
        "ok": False,
        "error": "An error occurred while importing the CSV. No rules were changed.",
    }

    monkeypatch.undo()
    assert _list_rules(client, auth_headers)["rules"] == []


def test_sample_csv(client, auth_headers):
    response = client.get(f"{RULES_URL}/sample.csv", headers=auth_headers)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "pincode-sample.csv" in response.headers["content-disposition"]
    lines = response.text.strip().split("\n")
    assert lines[0] == "pincode,deliverable,etaMinDays,etaMaxDays,codAvailable,shippingFee"
    assert len(lines) == 3


def test_sample_csv_imports_cleanly(client, auth_headers, upload_csv):
    sample = client.get(f"{RULES_URL}/sample.csv", headers=auth_headers).text

    body = upload_csv(sample).json()

    assert body["inserted"] == 2
    assert body["invalidCount"] == 0


# ---------------------------------------------------------------------------
# delete
# ---------------------------------------------------------------------------


def test_delete_rule(client, auth_headers, create_rule):
    create_rule("110001")
    rule_id = _list_rules(client, auth_headers)["rules"][0]["id"]

    response = client.post(
        RULES_URL, headers=auth_headers, data={"intent": "delete", "id": rule_id}
    )

    assert response.status_code == 200
    assert response.json() == {"ok": True}
    assert _list_rules(client, auth_headers)["rules"] == []
    assert _lookup(client, "110001") == {
        "ok": True,
        "deliverable": False,
        "message": "Not deliverable for this pincode.",
    }


def test_delete_rule_missing_id(client, auth_headers):
    response = client.post(RULES_URL, headers=auth_headers, data={"intent": "delete"})

    assert response.status_code == 400
    assert response.json()["error"] == "Missing id"


def test_delete_rule_unknown_id(client, auth_headers):
    for rule_id in (str(uuid.uuid4()), "not-a-uuid"):
        response = client.post(
            RULES_URL, headers=auth_headers, data={"intent": "delete", "id": rule_id}
        )
        assert response.status_code == 404
        assert response.json()["error"] == "Rule not found."


def test_delete_rule_of_another_shop(client, auth_headers, other_shop_headers, create_rule):
    create_rule("110001", headers=other_shop_headers)
    rule_id = _list_rules(client, other_shop_headers)["rules"][0]["id"]

    response = client.post(
        RULES_URL, headers=auth_headers, data={"intent": "delete", "id": rule_id}
    )

    assert response.status_code == 404
    assert len(_list_rules(client, other_shop_headers)["rules"]) == 1
