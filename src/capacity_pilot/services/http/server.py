from __future__ import annotations

import logging
from uuid import uuid4

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse

from ...api import Operation, api_state, invoke, list_operations
from ...api.models import ApiCallRequest, CapacityJobRequest
from ...domain import ErrorKind, JobOutcome
from ...logging import configure_logging, job_scope


configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Capacity Pilot API", version="0.1.0")

_STATUS_BY_KIND = {
    ErrorKind.NAVIGATION_FAILURE: 422,
    ErrorKind.NO_CANDIDATE: 404,
    ErrorKind.OVERLAY_REJECTED: 404,
    ErrorKind.FORM_REJECTED: 404,
    ErrorKind.LOGIN_FAILURE: 502,
    ErrorKind.CAPACITY_WRITE_FAILURE: 502,
    ErrorKind.DRIVER_ERROR: 502,
    ErrorKind.DEADLINE_EXCEEDED: 504,
}


def _serialize_operation(op: Operation) -> dict:
    return {
        "name": op.name,
        "description": op.description,
        "mutates": op.mutates,
        "parameters": op.parameter_schema,
    }


def _outcome_response(outcome: JobOutcome, *, debug: bool) -> JSONResponse:
    status_code = 200 if outcome.ok else _STATUS_BY_KIND.get(outcome.error_kind, 500)
    return JSONResponse(outcome.to_dict(include_report=debug), status_code=status_code)


@app.get("/")
async def health() -> JSONResponse:
    return JSONResponse({"status": "ok", "service": "capacity-pilot"})


@app.get("/api/functions")
async def list_functions() -> JSONResponse:
    return JSONResponse({"functions": [_serialize_operation(op) for op in list_operations()]})


@app.post("/api/functions/{function_name}")
async def invoke_function(function_name: str, request: ApiCallRequest) -> JSONResponse:
    try:
        result = await invoke(function_name, request.arguments)
    except KeyError as exc:
        logger.warning("Unknown operation requested: %s", function_name)
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except (TypeError, ValueError) as exc:
        logger.warning("Rejected arguments for %s: %s", function_name, exc)
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    logger.debug("Operation %s finished", function_name)
    return JSONResponse({"name": function_name, "result": result})


@app.post("/run")
async def run_job(request: CapacityJobRequest) -> JSONResponse:
    job = request.to_job()
    if not request.wait:
        record = api_state.jobs.submit(job)
        return JSONResponse(record.to_dict(), status_code=202)
    with job_scope(uuid4().hex):
        outcome = await api_state.capacity.run(job)
    return _outcome_response(outcome, debug=job.debug)


@app.get("/jobs/{job_id}")
async def job_status(job_id: str) -> JSONResponse:
    record = api_state.jobs.get(job_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"Job '{job_id}' not found.")
    return JSONResponse(record.to_dict())


def run_local_server(host: str = "127.0.0.1", port: int = 3000) -> None:
    import asyncio

    from hypercorn.asyncio import serve
    from hypercorn.config import Config

    config = Config()
    config.bind = [f"{host}:{port}"]
    asyncio.run(serve(app, config))
