from __future__ import annotations

import pytest

from src.franchise_holidays.franchise_holidays.container import assemble
from src.franchise_holidays.franchise_holidays.main import create_app

from ..fakes import CHILDRENS_DAY, FOUNDATION_DAY, GANGNAM_REMODEL, HEAD_OFFICE_A, STORE_GANGNAM, STORE_YEOKSAM


@pytest.fixture
def client(monkeypatch, organizations, holidays):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container=assemble(organizations_repo=organizations, holidays_repo=holidays))
    return app.test_client()


def test_owner_calendar_shape(client):
    resp = client.get(f"/api/v1/holidays/owner?year=2025&storeId={STORE_GANGNAM}")

    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["holidayOwnType"] == "STORE"
    assert data["ownerName"] == "A-강남점"
    assert [i["id"] for i in data["infos"]] == [CHILDRENS_DAY, FOUNDATION_DAY, GANGNAM_REMODEL]

    legal_info, hq_info, own_info = data["infos"]
    assert legal_info["holidayType"] == "LEGAL" and legal_info["isInherited"] is True
    assert hq_info["applyChildTypes"] == ["ALL_HEAD_OFFICE_STORES"]
    assert hq_info["startDate"] == "2025-05-10" and hq_info["endDate"] is None
    assert "applyChildTypes" not in own_info
    assert own_info["isInherited"] is False


def test_owner_calendar_requires_year(client):
    resp = client.get(f"/api/v1/holidays/owner?storeId={STORE_GANGNAM}")

    assert resp.status_code == 400


def test_update_with_override_changes_only_that_store(client):
    body = {
        "ownerType": "STORE",
        "ownerId": STORE_GANGNAM,
        "year": 2025,
        "holidayInfos": [
            {"holidayId": GANGNAM_REMODEL, "holidayName": "리모델링", "startDate": "2025-08-15", "hasPeriod": False}
        ],
        "parentHolidaySettings": [
            {"holidaySourceType": "BRANCH", "holidaySourceId": FOUNDATION_DAY, "isOperating": True}
        ],
    }

    resp = client.put("/api/v1/holidays", json=body)
    assert resp.status_code == 200

    gangnam = client.get(f"/api/v1/holidays/owner?year=2025&storeId={STORE_GANGNAM}").get_json()["data"]
    yeoksam = client.get(f"/api/v1/holidays/owner?year=2025&storeId={STORE_YEOKSAM}").get_json()["data"]
    assert next(i for i in gangnam["infos"] if i["id"] == FOUNDATION_DAY)["isOperating"] is True
    assert next(i for i in yeoksam["infos"] if i["id"] == FOUNDATION_DAY)["isOperating"] is False


def test_create_returns_ids(client, holidays):
    body = {
        "ownerType": "HEAD_OFFICE",
        "ownerId": HEAD_OFFICE_A,
        "holidayInfos": [
            {
                "holidayName": "송년회",
                "startDate": "2025-12-31",
                "hasPeriod": False,
                "applyChildTypes": ["ALL_HEAD_OFFICE_STORES", "ALL_FRANCHISE_STORES"],
            }
        ],
    }

    resp = client.post("/api/v1/holidays/2025", json=body)

    assert resp.status_code == 201
    [new_id] = resp.get_json()["data"]
    assert holidays.get(holiday_id=new_id).name == "송년회"


def test_validation_errors_are_listed_per_row(client):
    body = {
        "ownerType": "STORE",
        "ownerId": STORE_YEOKSAM,
        "holidayInfos": [
            {"holidayName": "", "startDate": "2025-04-01"},
            {"holidayName": "공사", "startDate": "2025-04-10", "hasPeriod": True, "endDate": "2025-04-09"},
        ],
    }

    resp = client.post("/api/v1/holidays/2025", json=body)

    assert resp.status_code == 400
    errors = resp.get_json()["errors"]
    assert [(e["row"], e["field"]) for e in errors] == [(0, "holidayName"), (1, "endDate")]


def test_bad_date_and_empty_body_are_rejected(client):
    body = {"ownerType": "STORE", "ownerId": STORE_YEOKSAM, "holidayInfos": [{"holidayName": "x", "startDate": "2025/04/01"}]}

    assert client.post("/api/v1/holidays/2025", json=body).status_code == 400
    assert client.put("/api/v1/holidays", data="not json", content_type="application/json").status_code == 400


def test_delete_wrong_owner_type_is_not_found(client):
    resp = client.delete(f"/api/v1/holidays/STORE/{FOUNDATION_DAY}")

    assert resp.status_code == 404


def test_delete_owned_holiday(client, holidays):
    resp = client.delete(f"/api/v1/holidays/head_office/{FOUNDATION_DAY}")

    assert resp.status_code == 200
    assert holidays.get(holiday_id=FOUNDATION_DAY) is None


def test_persistence_failure_is_server_error(client, holidays):
    holidays.fail_writes = True

    resp = client.delete(f"/api/v1/holidays/HEAD_OFFICE/{FOUNDATION_DAY}")

    assert resp.status_code == 500


def test_legal_endpoints(client, holidays):
    listed = client.get("/api/v1/holidays/legal/2025").get_json()["data"]
    assert [h["holidayName"] for h in listed] == ["어린이날"]

    drafts = [
        {"holidayName": "어린이날", "startDate": "2025-05-05"},
        {"holidayName": "추석", "startDate": "2025-10-05", "hasPeriod": True, "endDate": "2025-10-07"},
    ]
    assert client.post("/api/v1/holidays/legal/2025", json=drafts).status_code == 400

    resp = client.post("/api/v1/holidays/legal/2025?skipDuplicate=true", json=drafts)
    assert resp.status_code == 201
    [new_id] = resp.get_json()["data"]
    assert holidays.get_legal(holiday_id=new_id).end_date.day == 7

    assert client.delete(f"/api/v1/holidays/legal/{new_id}").status_code == 200
    assert client.delete(f"/api/v1/holidays/legal/{new_id}").status_code == 404


def test_summary_list(client):
    resp = client.get("/api/v1/holidays?year=2025&size=2")

    assert resp.status_code == 200
    page = resp.get_json()["data"]
    assert page["content"][0]["holidayType"] == "LEGAL"
    assert page["pageSize"] == 2
    assert page["isFirst"] is True


@pytest.mark.parametrize(
    "infos, settings, row",
    [
        (["2025-04-01"], [], 0),
        ([{"holidayName": "휴무", "startDate": "2025-04-01"}, {"holidayName": "공사", "startDate": 20250410}], [], 1),
        ([{"holidayName": "휴무", "startDate": "2025-04-01", "applyChildTypes": "HEAD_OFFICE"}], [], 0),
        ([], [42], 0),
    ],
)
def test_malformed_rows_are_reported_per_row(client, infos, settings, row):
    body = {
        "ownerType": "STORE",
        "ownerId": STORE_YEOKSAM,
        "holidayInfos": infos,
        "parentHolidaySettings": settings,
    }

    resp = client.post("/api/v1/holidays/2025", json=body)

    assert resp.status_code == 400
    assert [e["row"] for e in resp.get_json()["errors"]] == [row]


def test_malformed_legal_rows_are_rejected(client):
    resp = client.post("/api/v1/holidays/legal/2025", json=["어린이날"])

    assert resp.status_code == 400
    assert resp.get_json()["errors"][0]["row"] == 0
