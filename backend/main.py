from __future__ import annotations

import logging
import os
import time
import uuid
from pathlib import Path

from dotenv import load_dotenv

# Load .env from backend directory so DEFAULT_HORIZON_YEARS etc. are available
load_dotenv(Path(__file__).resolve().parent / ".env")

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.middleware.base import BaseHTTPMiddleware

from engine.errors import RentScheduleError
from engine.rent_schedule import compute_lease_rent_schedule
from models import ComputeLeaseRentScheduleResult, ScheduleFromFieldsRequest, ScheduleInput
from services.schedule_input import DEFAULT_HORIZON_YEARS, compute_schedule_from_fields

# Version for /health and startup log
VERSION = (os.environ.get("GIT_COMMIT") or "").strip() or "unknown"

# Same logger as uvicorn so request and compute lines end up together
_LOG = logging.getLogger("uvicorn.error")

app = FastAPI(title="Lease Rent Schedule Backend", version="0.1.0")

# CORS: use ALLOWED_ORIGINS env (comma-separated) if set, else default
_origins_env = os.environ.get("ALLOWED_ORIGINS", "").strip()
if _origins_env:
    ALLOWED_ORIGINS = [o.strip() for o in _origins_env.split(",") if o.strip()]
else:
    ALLOWED_ORIGINS = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid.uuid4())[:8]
        request.state.request_id = request_id
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        _LOG.info(
            "request_id=%s method=%s path=%s status=%s duration_ms=%.0f",
            request_id,
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
        )
        response.headers["X-Request-Id"] = request_id
        return response


app.add_middleware(RequestLogMiddleware)


@app.on_event("startup")
def startup_log() -> None:
    port = os.environ.get("PORT", "8010")
    host = os.environ.get("HOST", "127.0.0.1")
    _LOG.info(
        "Backend starting on http://%s:%s (default horizon: %s years) version=%s",
        host, port, DEFAULT_HORIZON_YEARS, VERSION,
    )


@app.get("/health")
def health():
    return {"status": "ok", "version": VERSION}


COMPUTE_SCHEDULE_EXPECTED = (
    "start_date (YYYY-MM-DD), end_date (YYYY-MM-DD), payment_frequency (monthly|quarterly), "
    "base_index_value > 0, office_rent_ht per period; optional known_index_points: "
    "[{effective_date, index_value}], parking_rent_ht, charges_ht, taxes_ht, other_costs_ht, "
    "charges_growth_rate, deposit_months, franchise_months, incentive_amount, horizon_years > 0. "
    "camelCase names (startDate, officeRentHT, ...) are accepted too."
)


def _request_id(request: Request) -> str:
    return (request.headers.get("x-request-id") or "").strip() or getattr(request.state, "request_id", "no-rid")


def _validation_failed(rid: str, details: str, expected: str) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={
            "error": "compute_validation_failed",
            "rid": rid,
            "details": details,
            "expected": expected,
        },
    )


@app.post("/rent/compute-schedule", response_model=ComputeLeaseRentScheduleResult)
async def compute_schedule_endpoint(request: Request) -> ComputeLeaseRentScheduleResult | JSONResponse:
    """
    Compute a lease rent schedule.
    Body: single JSON object (ScheduleInput), NOT wrapped in {"input": ...}.
    Amounts are per payment period (monthly amount for monthly leases, quarterly for quarterly).
    """
    rid = _request_id(request)
    try:
        body = await request.json()
    except ValueError as e:
        err = str(e)[:400]
        _LOG.info("SCHEDULE_ERR rid=%s stage=parse err=%s", rid, err)
        return _validation_failed(rid, err, "JSON body (ScheduleInput object)")

    frequency = body.get("payment_frequency", body.get("paymentFrequency")) if isinstance(body, dict) else None
    _LOG.info("SCHEDULE_START rid=%s payment_frequency=%s", rid, frequency)
    try:
        schedule_input = ScheduleInput.model_validate(body)
        result = compute_lease_rent_schedule(schedule_input)
    except (RentScheduleError, ValidationError) as e:
        err = str(e)[:400]
        _LOG.info("SCHEDULE_ERR rid=%s payment_frequency=%s err=%s", rid, frequency, err)
        return _validation_failed(rid, err, COMPUTE_SCHEDULE_EXPECTED)
    _LOG.info("SCHEDULE_DONE rid=%s periods=%s status=200", rid, len(result.schedule))
    return result


@app.post("/rent/compute-schedule-from-fields")
def compute_schedule_from_fields_endpoint(req: ScheduleFromFieldsRequest, request: Request):
    """
    Build the schedule input from extracted lease fields plus an index series, then compute.
    Returns 400 when the fields are not enough (missing start date, frequency, rent or index).
    """
    rid = _request_id(request)
    _LOG.info("SCHEDULE_START rid=%s source=fields", rid)
    try:
        result = compute_schedule_from_fields(req.lease_fields, req.index_series)
    except RentScheduleError as e:
        err = str(e)[:400]
        _LOG.info("SCHEDULE_ERR rid=%s source=fields err=%s", rid, err)
        return _validation_failed(rid, err, COMPUTE_SCHEDULE_EXPECTED)
    if result is None:
        return JSONResponse(
            status_code=400,
            content={
                "error": "insufficient_lease_data",
                "rid": rid,
                "details": "Cannot compute schedule: check rent, payment frequency, dates and index series.",
            },
        )
    _LOG.info("SCHEDULE_DONE rid=%s source=fields periods=%s status=200", rid, len(result.schedule))
    return {"schedule": result.model_dump(mode="json")}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=os.environ.get("HOST", "127.0.0.1"),
        port=int(os.environ.get("PORT", "8010")),
        reload=True,
    )
