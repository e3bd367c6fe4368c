from __future__ import annotations

import logging
import math
from contextlib import asynccontextmanager
from datetime import date
from functools import lru_cache
from typing import Any, Literal, Optional

import numpy as np
import pandas as pd
from fastapi import Body, Depends, FastAPI, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.schemas import DashboardResponse, ErrorResponse, HealthResponse
from core.config import get_settings
from core.errors import DashboardError, InvalidPayloadError, UnsupportedOperationError
from core.excel_data import verify_source_files
from core.filters import normalize_table_filters, apply_table_filters
from core.logging import configure_logging
from core.metrics_dashboard import compute_dashboard
from core.resources import Backend, DatabaseBackend, build_backend, get_resource, require_id


logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_backend() -> Backend:
    return build_backend(get_settings())


@asynccontextmanager
async def lifespan(_app: FastAPI):
    settings = get_settings()
    configure_logging(settings.log_level, json_logs=settings.json_logs, force=False)
    if settings.data_backend == "spreadsheet":
        verify_source_files(settings)
    yield
    if get_backend.cache_info().currsize:
        backend = get_backend()
        if isinstance(backend, DatabaseBackend):
            backend.client.close()


app = FastAPI(title="Foundation Dashboard API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

ERROR_RESPONSES = {400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}


def _json(data: object, status_code: int = 200) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
                pd.Timestamp: lambda ts: ts.isoformat(),
            },
        ),
    )


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


@app.exception_handler(DashboardError)
async def dashboard_error_handler(_request: Request, exc: DashboardError) -> JSONResponse:
    logger.warning("%s: %s", type(exc).__name__, exc.message)
    return _error(exc.status_code, exc.message)


def _as_object(body: Any) -> dict:
    if not isinstance(body, dict):
        raise InvalidPayloadError("Request body must be a JSON object.")
    return body


def _writable(resource: str, backend: Backend) -> None:
    get_resource(resource)
    if backend.read_only:
        raise UnsupportedOperationError(f"{resource} is read-only in spreadsheet mode.")


@app.get("/api/health", response_model=HealthResponse)
def health(backend: Backend = Depends(get_backend)):
    settings = get_settings()
    workbooks = None
    if settings.data_backend == "spreadsheet":
        workbooks = {name: path.exists() for name, path in settings.workbook_paths().items()}
    return _json({"backend": settings.data_backend, "read_only": backend.read_only, "workbooks": workbooks})


@app.get("/api/dashboard", response_model=DashboardResponse, responses=ERROR_RESPONSES)
def dashboard(
    today: Optional[date] = Query(default=None),
    charts: bool = Query(default=True),
    backend: Backend = Depends(get_backend),
):
    try:
        payload = compute_dashboard(
            backend.list("residents"),
            backend.list("staff"),
            backend.list("donations"),
            backend.list("visitors"),
            today=today,
            include_charts=charts,
        )
        return _json(payload)
    except DashboardError:
        raise
    except Exception as exc:
        logger.exception("dashboard failed")
        return _error(500, f"Unable to build dashboard: {exc}")


@app.get("/api/data/{resource}", responses=ERROR_RESPONSES)
def list_records(
    resource: str,
    q: str = Query(default=""),
    sort: Optional[str] = Query(default=None),
    direction: Literal["asc", "desc"] = Query(default="asc"),
    backend: Backend = Depends(get_backend),
):
    logger.info("Loading resource: %s", resource)
    get_resource(resource)
    try:
        rows = backend.list(resource)
    except DashboardError:
        raise
    except Exception as exc:
        logger.exception("Failed to load %s", resource)
        return _error(500, f"Unable to load data: {exc}")
    if q or sort:
        rows = apply_table_filters(rows, normalize_table_filters({"q": q, "sort": sort, "direction": direction}))
    logger.info("Loaded %s, count: %d", resource, len(rows))
    return _json(rows)


@app.post("/api/data/{resource}", responses=ERROR_RESPONSES)
def create_record(resource: str, body: Any = Body(default=None), backend: Backend = Depends(get_backend)):
    _writable(resource, backend)
    payload = _as_object(body)
    try:
        return _json(backend.create(resource, payload))
    except DashboardError:
        raise
    except Exception as exc:
        logger.exception("Failed to create %s record", resource)
        return _error(500, f"Unable to create record: {exc}")


@app.put("/api/data/{resource}", responses=ERROR_RESPONSES)
def update_record(resource: str, body: Any = Body(default=None), backend: Backend = Depends(get_backend)):
    _writable(resource, backend)
    payload = _as_object(body)
    require_id(resource, payload)
    try:
        return _json(backend.update(resource, payload))
    except DashboardError:
        raise
    except Exception as exc:
        logger.exception("Failed to update %s record", resource)
        return _error(500, f"Unable to update record: {exc}")


@app.delete("/api/data/{resource}", responses=ERROR_RESPONSES)
def delete_record(resource: str, body: Any = Body(default=None), backend: Backend = Depends(get_backend)):
    _writable(resource, backend)
    payload = _as_object(body)
    require_id(resource, payload)
    try:
        return _json(backend.delete(resource, payload))
    except DashboardError:
        raise
    except Exception as exc:
        logger.exception("Failed to delete %s record", resource)
        return _error(500, f"Unable to delete record: {exc}")
