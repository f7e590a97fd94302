from __future__ import annotations

import time

import pytest
from fastapi.testclient import TestClient

from capacity_pilot.api import api_state
from capacity_pilot.domain import ErrorKind, JobOutcome, ResolutionReport
from capacity_pilot.services import JobTracker
from capacity_pilot.services.http import app


class StubCapacityService:
    def __init__(self, outcome: JobOutcome) -> None:
        self.outcome = outcome
        self.jobs = []

    async def run(self, job) -> JobOutcome:
        self.jobs.append(job)
        if self.outcome.report is None and self.outcome.ok:
            return JobOutcome(ok=True, report=ResolutionReport(target=job.target))
        return self.outcome


@pytest.fixture
def stub(monkeypatch):
    def install(outcome: JobOutcome) -> StubCapacityService:
        service = StubCapacityService(outcome)
        monkeypatch.setattr(api_state, "capacity", service)
        monkeypatch.setattr(api_state, "jobs", JobTracker(service, retention=10))
        return service

    return install


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


BODY = {"date": "2025-03-10", "time": "07:00", "name": "Reformer", "capacity": 12}


def test_health(client) -> None:
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_run_success(client, stub) -> None:
    service = stub(JobOutcome(ok=True))

    response = client.post("/run", json=BODY)

    assert response.status_code == 200
    assert response.json() == {"ok": True}
    job = service.jobs[0]
    assert job.capacity == 12
    assert job.target.name == "Reformer"
    assert job.target.strict_name_required is True


def test_run_accepts_legacy_field_names(client, stub) -> None:
    service = stub(JobOutcome(ok=True))

    response = client.post(
        "/run",
        json={
            "targetDate": "2025-03-10",
            "targetTime": "7:00 a. m.",
            "targetName": " Reformer ",
            "newCapacity": 8,
            "strictRequireName": False,
        },
    )

    assert response.status_code == 200
    job = service.jobs[0]
    assert job.capacity == 8
    assert job.target.name == "Reformer"
    assert job.target.strict_name_required is False


def test_run_debug_includes_report(client, stub) -> None:
    stub(JobOutcome(ok=True))

    response = client.post("/run", json={**BODY, "debug": True})

    assert response.json()["report"]["target"]["date"] == "2025-03-10"


@pytest.mark.parametrize(
    ("kind", "status_code"),
    [
        (ErrorKind.NAVIGATION_FAILURE, 422),
        (ErrorKind.NO_CANDIDATE, 404),
        (ErrorKind.OVERLAY_REJECTED, 404),
        (ErrorKind.FORM_REJECTED, 404),
        (ErrorKind.LOGIN_FAILURE, 502),
        (ErrorKind.DEADLINE_EXCEEDED, 504),
    ],
)
def test_run_failure_status(client, stub, kind: ErrorKind, status_code: int) -> None:
    stub(JobOutcome(ok=False, error_kind=kind, detail="nope (date=2025-03-10)"))

    response = client.post("/run", json=BODY)

    assert response.status_code == status_code
    assert response.json() == {"ok": False, "errorKind": kind.value, "detail": "nope (date=2025-03-10)"}


def test_run_rejects_invalid_body(client, stub) -> None:
    stub(JobOutcome(ok=True))

    response = client.post("/run", json={**BODY, "capacity": -1})

    assert response.status_code == 422


def test_run_without_wait_returns_job(client, stub) -> None:
    stub(JobOutcome(ok=True))

    response = client.post("/run", json={**BODY, "wait": False})

    assert response.status_code == 202
    job_id = response.json()["jobId"]
    assert response.json()["status"] == "pending"

    payload = {}
    for _ in range(50):
        payload = client.get(f"/jobs/{job_id}").json()
        if payload["status"] == "done":
            break
        time.sleep(0.01)
    assert payload["status"] == "done"
    assert payload["ok"] is True


def test_unknown_job(client) -> None:
    assert client.get("/jobs/missing").status_code == 404


def test_list_api_functions(client) -> None:
    response = client.get("/api/functions")

    functions = {item["name"]: item for item in response.json()["functions"]}
    assert {"update_class_capacity", "locate_class"} <= set(functions)
    schema = functions["update_class_capacity"]["parameters"]
    assert schema["properties"]["capacity"]["type"] == "integer"
    assert schema["properties"]["strict_name_required"]["default"] is True
    assert set(schema["required"]) == {"day", "time", "capacity"}
    assert schema["properties"]["name"]["type"] == ["string", "null"]
    assert functions["update_class_capacity"]["mutates"] is True
    assert functions["locate_class"]["mutates"] is False


def test_invoke_api_function(client, stub) -> None:
    service = stub(JobOutcome(ok=True))

    response = client.post(
        "/api/functions/locate_class",
        json={"arguments": {"day": "2025-03-10", "time": "07:00"}},
    )

    assert response.status_code == 200
    assert response.json()["result"]["ok"] is True
    assert service.jobs[0].dry_run is True


def test_invoke_unknown_function(client) -> None:
    response = client.post("/api/functions/nope", json={"arguments": {}})
    assert response.status_code == 404


def test_invoke_with_bad_arguments(client, stub) -> None:
    stub(JobOutcome(ok=True))
    response = client.post("/api/functions/locate_class", json={"arguments": {"day": "soon", "time": "07:00"}})
    assert response.status_code == 400


def test_invoke_with_unknown_argument(client, stub) -> None:
    stub(JobOutcome(ok=True))
    response = client.post(
        "/api/functions/locate_class",
        json={"arguments": {"day": "2025-03-10", "time": "07:00", "capacity": 4}},
    )
    assert response.status_code == 400
    assert "capacity" in response.json()["detail"]
