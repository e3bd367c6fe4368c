from __future__ import annotations

from typing import Iterator

import psycopg
import pytest
from fastapi.testclient import TestClient

from api.main import app, get_backend
from core import excel_data
from core.resources import DatabaseBackend, SpreadsheetBackend


@pytest.fixture
def client() -> Iterator[TestClient]:
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def spreadsheet_client(client, add_sheet, workbook_cache, test_settings) -> TestClient:
    add_sheet(
        test_settings.cep_file,
        excel_data.STAFF_SHEET,
        [
            {"Employee ID": "E-01", "Name": "Asha", "Department": "Care", "Status": "", "Performance Rating": 4.8},
            {"Employee ID": "E-02", "Name": "Ravi", "Department": "Kitchen", "Status": "Retired", "Performance Rating": 3},
        ],
    )
    backend = SpreadsheetBackend(workbook_cache, test_settings)
    app.dependency_overrides[get_backend] = lambda: backend
    return client


@pytest.fixture
def database_client(client, fake_db) -> TestClient:
    backend = DatabaseBackend(fake_db)
    app.dependency_overrides[get_backend] = lambda: backend
    return client


def test_unknown_resource_returns_not_found(spreadsheet_client):
    response = spreadsheet_client.get("/api/data/volunteers")
    assert response.status_code == 404
    assert "volunteers" in response.json()["message"]


def test_spreadsheet_get_returns_normalized_rows(spreadsheet_client):
    response = spreadsheet_client.get("/api/data/staff")
    assert response.status_code == 200
    body = response.json()
    assert [row["id"] for row in body] == ["staff-1", "staff-2"]
    assert body[0]["status"] == "Active"
    assert body[0]["performance_rating"] == "Excellent"
    assert body[1]["performance_rating"] == "Good"


def test_spreadsheet_get_supports_search_and_sort(spreadsheet_client):
    response = spreadsheet_client.get("/api/data/staff", params={"q": "kitchen"})
    assert [row["name"] for row in response.json()] == ["Ravi"]

    response = spreadsheet_client.get("/api/data/staff", params={"sort": "name", "direction": "desc"})
    assert [row["name"] for row in response.json()] == ["Ravi", "Asha"]


def test_spreadsheet_missing_workbook_returns_empty_list(client, workbook_cache, test_settings):
    backend = SpreadsheetBackend(workbook_cache, test_settings)
    app.dependency_overrides[get_backend] = lambda: backend
    response = client.get("/api/data/donations")
    assert response.status_code == 200
    assert response.json() == []


@pytest.mark.parametrize("method", ["POST", "PUT", "DELETE"])
def test_spreadsheet_writes_are_not_found(spreadsheet_client, method):
    response = spreadsheet_client.request(method, "/api/data/staff", json={"id": "staff-1", "name": "x"})
    assert response.status_code == 404
    assert "read-only" in response.json()["message"]


def test_database_get_lists_rows(database_client, fake_db):
    response = database_client.get("/api/data/staff")
    assert response.status_code == 200
    assert [row["id"] for row in response.json()] == [2, 1]


def test_database_post_inserts_and_returns_row(database_client, fake_db):
    response = database_client.post("/api/data/caretakers", json={"name": "Sunita", "age": "41"})
    assert response.status_code == 200
    body = response.json()
    assert body["name"] == "Sunita"
    assert body["age"] == 41
    assert fake_db.calls[-1][:2] == ("insert", "caretakers")


def test_database_post_rejects_non_object_body(database_client, fake_db):
    response = database_client.post("/api/data/caretakers", json=["Sunita"])
    assert response.status_code == 400
    assert fake_db.calls == []


@pytest.mark.parametrize("method", ["PUT", "DELETE"])
def test_database_write_without_id_is_client_error(database_client, fake_db, method):
    response = database_client.request(method, "/api/data/staff", json={"name": "Asha"})
    assert response.status_code == 400
    assert "id" in response.json()["message"]
    assert fake_db.calls == []


def test_database_put_updates_row(database_client, fake_db):
    response = database_client.put("/api/data/staff", json={"id": 1, "role": "Head Nurse"})
    assert response.status_code == 200
    assert response.json()["role"] == "Head Nurse"
    assert fake_db.calls[-1] == ("update", "staff", 1, {"role": "Head Nurse"})


def test_database_delete_returns_removed_row(database_client, fake_db):
    response = database_client.request("DELETE", "/api/data/staff", json={"id": 2})
    assert response.status_code == 200
    assert response.json()["name"] == "Ravi"
    assert [row["id"] for row in fake_db.tables["staff"]] == [1]


def test_database_unknown_id_is_not_found(database_client):
    response = database_client.put("/api/data/staff", json={"id": 404, "role": "x"})
    assert response.status_code == 404


def test_database_transport_failure_is_server_error(database_client, fake_db):
    fake_db.error = psycopg.OperationalError("server closed the connection unexpectedly")
    response = database_client.get("/api/data/staff")
    assert response.status_code == 500
    assert "server closed the connection" in response.json()["message"]


def test_unexpected_failure_is_server_error_with_message(client):
    class Exploding:
        read_only = True

        def list(self, resource):
            raise RuntimeError("disk on fire")

    app.dependency_overrides[get_backend] = lambda: Exploding()
    response = client.get("/api/data/staff")
    assert response.status_code == 500
    assert "disk on fire" in response.json()["message"]


def test_dashboard_summary(database_client, fake_db):
    fake_db.tables["donations"] = [
        {"id": 1, "amount": 2500, "donation_date": "2025-11-02", "created_at": "1"},
        {"id": 2, "amount": 500, "donation_date": "2025-10-20", "created_at": "2"},
    ]
    fake_db.tables["visitors"] = [
        {"id": 1, "visit_date": "2025-11-19", "created_at": "1"},
        {"id": 2, "visit_date": "2025-11-18", "created_at": "2"},
    ]
    response = database_client.get("/api/dashboard", params={"today": "2025-11-19", "charts": "false"})
    assert response.status_code == 200
    body = response.json()
    assert body["kpis"] == {
        "residents": 0,
        "active_staff": 1,
        "donations_this_month": 2500,
        "todays_visitors": 1,
    }
    assert [m["month"] for m in body["donations_by_month"]] == ["Oct 2025", "Nov 2025"]
    assert body["charts"] == {}


def test_health_reports_backend(spreadsheet_client):
    response = spreadsheet_client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["read_only"] is True
