# tests/test_api.py
"""
HTTP tests for the ledger and settings APIs.

The command layer is covered in depth elsewhere; these tests check
routing, status codes, the response envelope and the export files.
"""

import io
from decimal import Decimal

import pytest
from django.db import DatabaseError
from openpyxl import load_workbook

from accounting.models import Movement
from preferences.models import Setting

from .helpers import balance_of, movement_payload


def _json(response):
    return response.json()


# =============================================================================
# Envelope and errors
# =============================================================================

@pytest.mark.django_db
class TestEnvelope:

    def test_success_envelope(self, api_client, group):
        response = api_client.get("/api/groups/")

        assert response.status_code == 200
        body = _json(response)
        assert body["success"] is True
        assert body["count"] == 1
        assert body["data"][0] == {
            "id": group.id,
            "name": "Customers",
            "account_count": 0,
            "created_at": body["data"][0]["created_at"],
            "updated_at": body["data"][0]["updated_at"],
        }

    def test_validation_error_envelope(self, api_client, db):
        response = api_client.post("/api/groups/", {"name": "A"}, format="json")

        assert response.status_code == 400
        body = _json(response)
        assert body["success"] is False
        assert body["code"] == "ValidationError"
        assert body["error"].startswith("name:")

    def test_not_found_envelope(self, api_client, db):
        response = api_client.get("/api/accounts/9999/")

        assert response.status_code == 404
        assert _json(response) == {
            "success": False,
            "error": "Account not found.",
            "code": "NotFound",
        }

    def test_malformed_json(self, api_client, db):
        response = api_client.post(
            "/api/groups/", data="{not json", content_type="application/json",
        )

        assert response.status_code == 400
        body = _json(response)
        assert body["success"] is False
        assert body["code"] == "ValidationError"

    def test_method_not_allowed(self, api_client, db):
        response = api_client.delete("/api/groups/")

        assert response.status_code == 405
        assert _json(response)["success"] is False

    def test_storage_error_detail_hidden(self, api_client, account, monkeypatch):
        def explode(*args, **kwargs):
            raise DatabaseError("disk I/O error")

        monkeypatch.setattr(Movement.objects, "create", explode)

        response = api_client.post("/api/movements/", movement_payload(account), format="json")

        assert response.status_code == 500
        assert _json(response) == {
            "success": False,
            "error": "A database error occurred.",
            "code": "StorageError",
        }

    def test_storage_error_detail_shown_in_debug(self, api_client, account, monkeypatch, settings):
        settings.DEBUG = True

        def explode(*args, **kwargs):
            raise DatabaseError("disk I/O error")

        monkeypatch.setattr(Movement.objects, "create", explode)

        response = api_client.post("/api/movements/", movement_payload(account), format="json")

        assert "disk I/O error" in _json(response)["error"]

    @pytest.mark.parametrize("url", [
        "/api/accounts/",
        "/api/accounts/search/?q=ahmet",
        "/api/movements/",
        "/api/movements/export/",
        "/api/balances/drift/",
        "/api/settings/",
        "/api/settings/category/ui/",
    ])
    def test_read_storage_error(self, api_client, account, monkeypatch, url):
        def explode(*args, **kwargs):
            raise DatabaseError("disk I/O error")

        monkeypatch.setattr("django.db.models.query.QuerySet._fetch_all", explode)

        response = api_client.get(url)

        assert response.status_code == 500
        assert _json(response) == {
            "success": False,
            "error": "A database error occurred.",
            "code": "StorageError",
        }

    def test_unguarded_storage_error_uses_envelope(self, api_client, monkeypatch):
        def explode(*args, **kwargs):
            raise DatabaseError("disk I/O error")

        monkeypatch.setattr("accounting.queries.list_groups", explode)

        response = api_client.get("/api/groups/")

        assert response.status_code == 500
        assert _json(response) == {
            "success": False,
            "error": "A database error occurred.",
            "code": "StorageError",
        }


# =============================================================================
# Groups
# =============================================================================

@pytest.mark.django_db
class TestGroupApi:

    def test_create(self, api_client):
        response = api_client.post("/api/groups/", {"name": " Wholesale "}, format="json")

        assert response.status_code == 201
        body = _json(response)
        assert body["data"]["name"] == "Wholesale"
        assert body["data"]["account_count"] == 0
        assert body["message"] == "Group created."

    def test_duplicate(self, api_client, group):
        response = api_client.post("/api/groups/", {"name": group.name}, format="json")

        assert response.status_code == 400
        assert _json(response)["code"] == "DuplicateName"

    def test_rename(self, api_client, group, account):
        response = api_client.put(f"/api/groups/{group.id}/", {"name": "Retail"}, format="json")

        assert response.status_code == 200
        assert _json(response)["data"]["name"] == "Retail"
        assert _json(response)["data"]["account_count"] == 1

    def test_delete_blocked(self, api_client, group, account):
        response = api_client.delete(f"/api/groups/{group.id}/")

        assert response.status_code == 400
        assert _json(response)["code"] == "HasDependents"

    def test_delete(self, api_client, other_group):
        response = api_client.delete(f"/api/groups/{other_group.id}/")

        assert response.status_code == 200
        assert _json(response)["data"] == {"deleted": True, "id": other_group.id}

    def test_account_count(self, api_client, group, account):
        response = api_client.get(f"/api/groups/{group.id}/accounts/count/")

        assert _json(response)["data"] == {"group_id": group.id, "count": 1}


# =============================================================================
# Accounts
# =============================================================================

@pytest.mark.django_db
class TestAccountApi:

    def test_create(self, api_client, group):
        response = api_client.post(
            "/api/accounts/",
            {"name": "Fatma Celik", "code": "C002", "group_id": group.id, "email": "fatma@example.com"},
            format="json",
        )

        assert response.status_code == 201
        data = _json(response)["data"]
        assert data["group_id"] == group.id
        assert data["group_name"] == "Customers"
        assert data["balance"] == 0
        assert data["account_type"] == "customer"

    def test_invalid_email(self, api_client, db):
        response = api_client.post(
            "/api/accounts/", {"name": "Fatma", "email": "nope"}, format="json",
        )

        assert response.status_code == 400
        assert _json(response)["code"] == "InvalidEmail"

    def test_missing_group_is_bad_request(self, api_client, db):
        response = api_client.post(
            "/api/accounts/", {"name": "Fatma", "group_id": 9999}, format="json",
        )

        assert response.status_code == 400
        assert _json(response)["code"] == "GroupNotFound"

    def test_list_search_type_group(self, api_client, group, account, second_account):
        assert _json(api_client.get("/api/accounts/"))["count"] == 2
        assert _json(api_client.get("/api/accounts/search/", {"q": "mehmet"}))["data"][0]["id"] == second_account.id
        assert _json(api_client.get("/api/accounts/type/supplier/"))["count"] == 1
        assert _json(api_client.get(f"/api/accounts/group/{group.id}/"))["data"][0]["id"] == account.id

    def test_search_too_short(self, api_client, db):
        response = api_client.get("/api/accounts/search/", {"q": "a"})

        assert response.status_code == 400

    def test_by_missing_group(self, api_client, db):
        assert api_client.get("/api/accounts/group/9999/").status_code == 404

    def test_update(self, api_client, account):
        response = api_client.put(
            f"/api/accounts/{account.id}/", {"name": "Ahmet Y.", "code": "C001"}, format="json",
        )

        assert response.status_code == 200
        assert _json(response)["data"]["name"] == "Ahmet Y."
        assert _json(response)["data"]["group_id"] is None

    def test_delete_blocked_then_allowed(self, api_client, account, make_movement):
        movement = make_movement(account)

        assert api_client.delete(f"/api/accounts/{account.id}/").status_code == 400
        api_client.delete(f"/api/movements/{movement.id}/")
        assert api_client.delete(f"/api/accounts/{account.id}/").status_code == 200
        assert api_client.get(f"/api/accounts/{account.id}/").status_code == 404


# =============================================================================
# Movements
# =============================================================================

@pytest.mark.django_db
class TestMovementApi:

    def test_ahmet_scenario(self, api_client, account):
        created = api_client.post(
            "/api/movements/",
            movement_payload(account, "income", "1500.50", reference_number="INV-001"),
            format="json",
        )
        assert created.status_code == 201
        data = _json(created)["data"]
        assert data["type"] == "income"
        assert data["account_name"] == "Ahmet Yilmaz"
        assert data["account_code"] == "C001"
        assert data["payment_method"] == "cash"
        assert data["status"] == "completed"
        assert _json(api_client.get(f"/api/accounts/{account.id}/"))["data"]["balance"] == 1500.5

        updated = api_client.put(
            f"/api/movements/{data['id']}/",
            movement_payload(account, "income", "2000.75"),
            format="json",
        )
        assert updated.status_code == 200
        assert balance_of(account) == Decimal("2000.75")

        deleted = api_client.delete(f"/api/movements/{data['id']}/")
        assert deleted.status_code == 200
        assert _json(api_client.get(f"/api/accounts/{account.id}/"))["data"]["balance"] == 0

        again = api_client.delete(f"/api/movements/{data['id']}/")
        assert again.status_code == 404

    def test_account_not_found_is_bad_request(self, api_client, inactive_account):
        response = api_client.post(
            "/api/movements/", movement_payload(inactive_account), format="json",
        )

        assert response.status_code == 400
        assert _json(response)["code"] == "AccountNotFound"

    def test_duplicate_reference(self, api_client, account, make_movement):
        make_movement(account, reference_number="INV-9")

        response = api_client.post(
            "/api/movements/", movement_payload(account, reference_number="INV-9"), format="json",
        )

        assert response.status_code == 400
        assert _json(response)["code"] == "DuplicateReference"

    def test_update_missing(self, api_client, account):
        response = api_client.put("/api/movements/9999/", movement_payload(account), format="json")

        assert response.status_code == 404

    def test_filter_total_count(self, api_client, account, make_movement):
        for day in range(1, 6):
            make_movement(account, transaction_date=f"2024-03-0{day}")

        response = api_client.get("/api/movements/filter/", {"limit": 2, "offset": 1})

        body = _json(response)
        assert body["count"] == 2
        assert body["totalCount"] == 5
        assert [m["transaction_date"] for m in body["data"]] == ["2024-03-04", "2024-03-03"]

    def test_filter_invalid(self, api_client, db):
        response = api_client.get("/api/movements/filter/", {"min_amount": "10", "max_amount": "1"})

        assert response.status_code == 400
        assert _json(response)["code"] == "ValidationError"

    def test_by_account_and_summary(self, api_client, account, make_movement):
        make_movement(account, "income", "10.00")
        make_movement(account, "expense", "4.00")

        by_account = _json(api_client.get(f"/api/movements/account/{account.id}/"))
        summary = _json(api_client.get("/api/movements/summary/"))

        assert by_account["count"] == 2
        assert [row["type"] for row in summary["data"]] == ["income", "expense"]
        assert summary["data"][0]["total_amount"] == 10


# =============================================================================
# Exports
# =============================================================================

@pytest.mark.django_db
class TestExports:

    def test_accounts_xlsx_default(self, api_client, account, funded_account):
        response = api_client.get("/api/accounts/export/")

        assert response.status_code == 200
        assert response["Content-Type"] == (
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )
        assert response["Content-Disposition"] == 'attachment; filename="accounts.xlsx"'

        ws = load_workbook(io.BytesIO(response.content)).active
        assert ws.cell(row=1, column=1).value == "Accounts"
        assert ws.cell(row=4, column=2).value == "Account Name"
        assert ws.cell(row=5, column=2).value == "Ahmet Yilmaz"
        assert ws.cell(row=6, column=9).value == 1000.0

    def test_accounts_csv(self, api_client, account):
        response = api_client.get("/api/accounts/export/", {"format": "csv"})

        assert response["Content-Type"].startswith("text/csv")
        assert response.content.startswith(b"\xef\xbb\xbf")
        lines = response.content.decode("utf-8-sig").splitlines()
        assert lines[0].startswith("Code,Account Name,Type")
        assert lines[1].startswith("C001,Ahmet Yilmaz,Customer")

    def test_movements_txt_signed_and_filtered(self, api_client, account, second_account, make_movement):
        make_movement(account, "expense", "500.00", description="Office rent")
        make_movement(second_account, "income", "99.00")

        response = api_client.get(
            "/api/movements/export/", {"format": "txt", "account_id": account.id},
        )

        assert response["Content-Type"].startswith("text/plain")
        text = response.content.decode()
        assert "Office rent" in text
        assert "-500.00" in text
        assert "99.00" not in text

    def test_invalid_format(self, api_client, db):
        response = api_client.get("/api/movements/export/", {"format": "pdf"})

        assert response.status_code == 400
        assert _json(response)["error"].startswith("Invalid format")


# =============================================================================
# Balances
# =============================================================================

@pytest.mark.django_db
class TestBalanceApi:

    def test_drift_and_recalculate(self, api_client, funded_account, account):
        drift = _json(api_client.get("/api/balances/drift/"))
        assert drift["count"] == 1
        assert drift["data"][0]["account_id"] == funded_account.id
        assert drift["data"][0]["difference"] == 1000

        dry = _json(api_client.post("/api/balances/recalculate/", {"dry_run": True}, format="json"))
        assert dry["data"][0]["corrected"] is False
        assert balance_of(funded_account) == 1000

        fixed = _json(api_client.post("/api/balances/recalculate/", {}, format="json"))
        assert fixed["count"] == 1
        assert balance_of(funded_account) == 0
        assert _json(api_client.get("/api/balances/drift/"))["data"] == []

    def test_recalculate_one(self, api_client, funded_account):
        response = api_client.post(
            f"/api/balances/recalculate/{funded_account.id}/", {}, format="json",
        )

        assert response.status_code == 200
        assert _json(response)["data"]["corrected"] is True

    def test_recalculate_missing(self, api_client, db):
        response = api_client.post("/api/balances/recalculate/9999/", {}, format="json")

        assert response.status_code == 404


# =============================================================================
# Settings
# =============================================================================

@pytest.mark.django_db
class TestSettingsApi:

    def test_put_creates_then_updates(self, api_client):
        created = api_client.put(
            "/api/settings/decimal_places/",
            {"setting_value": 2, "setting_type": "number", "description": "Decimals"},
            format="json",
        )
        updated = api_client.put(
            "/api/settings/decimal_places/",
            {"setting_value": 3, "setting_type": "number"},
            format="json",
        )

        assert created.status_code == 201
        assert updated.status_code == 200
        data = _json(updated)["data"]
        assert data["setting_value"] == 3
        assert data["description"] == "Decimals"

    def test_get_and_delete(self, api_client):
        api_client.put("/api/settings/currency/", {"setting_value": "TRY"}, format="json")

        assert _json(api_client.get("/api/settings/currency/"))["data"]["setting_value"] == "TRY"
        assert api_client.delete("/api/settings/currency/").status_code == 200
        assert api_client.get("/api/settings/currency/").status_code == 404

    def test_invalid_value(self, api_client):
        response = api_client.put(
            "/api/settings/decimal_places/",
            {"setting_value": "many", "setting_type": "number"},
            format="json",
        )

        assert response.status_code == 400

    def test_category(self, api_client):
        api_client.put("/api/settings/theme_mode/", {"setting_value": "dark"}, format="json")
        api_client.put("/api/settings/currency/", {"setting_value": "TRY"}, format="json")

        body = _json(api_client.get("/api/settings/category/theme/"))

        assert [s["setting_name"] for s in body["data"]] == ["theme_mode"]

    def test_bulk_partial_is_207(self, api_client):
        response = api_client.post(
            "/api/settings/bulk/",
            {"settings": [
                {"setting_name": "currency", "setting_value": "TRY"},
                {"setting_name": "backup_frequency", "setting_value": "weekly", "setting_type": "number"},
            ]},
            format="json",
        )

        assert response.status_code == 207
        body = _json(response)
        assert body["success"] is False
        assert body["data"]["succeeded"] == 1
        assert body["data"]["failed"] == 1

    def test_bulk_all_ok(self, api_client):
        response = api_client.post(
            "/api/settings/bulk/",
            {"settings": [{"setting_name": "currency", "setting_value": "TRY"}]},
            format="json",
        )

        assert response.status_code == 200
        assert _json(response)["success"] is True

    def test_bulk_all_failed(self, api_client):
        response = api_client.post(
            "/api/settings/bulk/",
            {"settings": [{"setting_name": "", "setting_value": "x"}]},
            format="json",
        )

        assert response.status_code == 400

    def test_bulk_empty(self, api_client):
        response = api_client.post("/api/settings/bulk/", {"settings": []}, format="json")

        assert response.status_code == 400
        assert _json(response)["code"] == "ValidationError"

    def test_initialize_and_list(self, api_client):
        response = api_client.post("/api/settings/initialize/", format="json")

        assert response.status_code == 201
        listing = _json(api_client.get("/api/settings/"))
        assert listing["count"] == Setting.objects.count() == 9
        names = [s["setting_name"] for s in listing["data"]]
        assert names == sorted(names)
