import logging

import pytest
from fastapi import status

from appraisal_api.services.appraisal_service import MISSING_TABLE_MESSAGE

FIELDS = ["employeeName", "employeeId", "taskName", "feedback", "rating"]


def _list(client):
    response = client.get("/api/appraisals")
    assert response.status_code == status.HTTP_200_OK
    return response.json()


def test_create_appraisal(client, appraisal_payload):
    response = client.post("/api/appraisals", json=appraisal_payload)
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    for field in FIELDS:
        assert data[field] == appraisal_payload[field]
    assert isinstance(data["id"], int)
    assert data["createdAt"]


def test_create_ignores_client_id_and_timestamp(client, appraisal_payload):
    payload = dict(appraisal_payload, id=999, createdAt="2000-01-01T00:00:00Z")
    response = client.post("/api/appraisals", json=payload)
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["id"] != 999
    assert not data["createdAt"].startswith("2000-01-01")


def test_end_to_end_create_then_list(client, appraisal_payload):
    """Create one appraisal, then it is the only listed record."""
    created = client.post("/api/appraisals", json=appraisal_payload)
    assert created.status_code == status.HTTP_201_CREATED

    records = _list(client)
    assert len(records) == 1
    assert records[0] == created.json()


def test_list_empty(client):
    assert _list(client) == []


def test_list_orders_most_recent_first(client, appraisal_payload):
    ids = []
    for i in range(4):
        payload = dict(appraisal_payload, employeeId=f"ENG000{i}", taskName=f"Task {i}")
        ids.append(client.post("/api/appraisals", json=payload).json()["id"])

    records = _list(client)
    assert len(records) == 4
    assert [r["id"] for r in records] == list(reversed(ids))
    timestamps = [r["createdAt"] for r in records]
    assert timestamps == sorted(timestamps, reverse=True)


@pytest.mark.parametrize("field", FIELDS)
def test_create_missing_field_rejected(client, appraisal_payload, field):
    payload = dict(appraisal_payload)
    del payload[field]
    response = client.post("/api/appraisals", json=payload)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    data = response.json()
    assert data["error"] == "All fields are required"
    assert data["missing"] == [field]
    assert _list(client) == []


@pytest.mark.parametrize("field", ["employeeName", "employeeId", "taskName", "feedback"])
def test_create_empty_string_rejected(client, appraisal_payload, field):
    payload = dict(appraisal_payload, **{field: ""})
    response = client.post("/api/appraisals", json=payload)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert _list(client) == []


def test_create_null_rating_rejected(client, appraisal_payload):
    payload = dict(appraisal_payload, rating=None)
    response = client.post("/api/appraisals", json=payload)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["missing"] == ["rating"]


def test_create_unparseable_body_rejected(client):
    response = client.post(
        "/api/appraisals",
        content="not json",
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error"] == "Invalid request body"


@pytest.mark.parametrize("employee_id", ["abc0123", "AB0123", "ABC1234", "ABC01234", "AB10123"])
def test_create_bad_employee_id_is_store_error(client, appraisal_payload, employee_id):
    payload = dict(appraisal_payload, employeeId=employee_id)
    response = client.post("/api/appraisals", json=payload)
    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json()["error"]
    assert _list(client) == []


@pytest.mark.parametrize("rating", [0, 6, -1])
def test_create_out_of_range_rating_is_store_error(client, appraisal_payload, rating):
    payload = dict(appraisal_payload, rating=rating)
    response = client.post("/api/appraisals", json=payload)
    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert "error" in response.json()
    assert _list(client) == []


def test_create_overlong_name_is_store_error(client, appraisal_payload):
    payload = dict(appraisal_payload, employeeName="x" * 41)
    response = client.post("/api/appraisals", json=payload)
    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert _list(client) == []


def test_store_errors_are_logged_with_classification(client, appraisal_payload, caplog):
    caplog.set_level(logging.ERROR)
    client.post("/api/appraisals", json=dict(appraisal_payload, rating=9))
    records = [r for r in caplog.records if getattr(r, "store_kind", None)]
    assert records
    assert records[-1].store_kind == "constraint_violation"
    assert records[-1].exc_info is not None


def test_list_without_table_reports_initialization_needed(bare_client, context):
    from appraisal_api.core.schema import table_exists

    response = bare_client.get("/api/appraisals")
    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {"error": MISSING_TABLE_MESSAGE}
    # The list path never creates the table
    assert not table_exists(context.engine)


def test_list_falls_back_when_ordering_column_missing(bare_client, context):
    from sqlalchemy import text

    with context.engine.begin() as conn:
        conn.execute(text(
            "CREATE TABLE appraisals (id INTEGER PRIMARY KEY, employee_name TEXT, "
            "employee_id TEXT, task_name TEXT, feedback TEXT, rating INTEGER)"
        ))
        conn.execute(text(
            "INSERT INTO appraisals (employee_name, employee_id, task_name, feedback, rating) "
            "VALUES ('Jane Doe', 'ENG0001', 'Code Review', 'Great work', 4)"
        ))

    response = bare_client.get("/api/appraisals")
    assert response.status_code == status.HTTP_200_OK
    records = response.json()
    assert len(records) == 1
    assert records[0]["employeeId"] == "ENG0001"
    assert records[0]["createdAt"] is None


@pytest.mark.parametrize("rating", [True, "5", 4.5])
def test_create_non_integer_rating_rejected(client, appraisal_payload, rating):
    payload = dict(appraisal_payload, rating=rating)
    response = client.post("/api/appraisals", json=payload)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error"] == "Invalid request body"
    assert _list(client) == []
