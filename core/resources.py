"""Resource dispatch table and the two interchangeable data backends."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Mapping, Optional, Protocol, Type

import psycopg

from core.config import Settings, get_settings
from core.database import DatabaseClient
from core.errors import (
    BackendError,
    InvalidPayloadError,
    MissingIdentifierError,
    RecordNotFoundError,
    UnknownResourceError,
    UnsupportedOperationError,
)
from core.excel_data import LOADERS, Loader
from core.normalizers import to_number
from core.records import FORM_FIELDS, Caretaker, Donation, MedicalRecord, Resident, Staff, Visitor
from core.workbook import WorkbookCache, get_workbook_cache


logger = logging.getLogger(__name__)

Record = Dict[str, Any]


@dataclass(frozen=True)
class ResourceSpec:
    name: str
    record_type: Type
    loader: Loader
    table: str
    order_by: str = "created_at"

    @property
    def numeric_fields(self) -> Dict[str, bool]:
        """Numeric form field -> whether it may be null."""
        return {f.name: f.nullable for f in FORM_FIELDS[self.name] if f.kind == "number"}


RESOURCES: Dict[str, ResourceSpec] = {
    "residents": ResourceSpec("residents", Resident, LOADERS["residents"], "residents"),
    "staff": ResourceSpec("staff", Staff, LOADERS["staff"], "staff"),
    "caretakers": ResourceSpec("caretakers", Caretaker, LOADERS["caretakers"], "caretakers"),
    "visitors": ResourceSpec("visitors", Visitor, LOADERS["visitors"], "visitors"),
    "donations": ResourceSpec("donations", Donation, LOADERS["donations"], "donations"),
    "medical": ResourceSpec("medical", MedicalRecord, LOADERS["medical"], "medical_records"),
}


def get_resource(name: str) -> ResourceSpec:
    spec = RESOURCES.get(name)
    if spec is None:
        raise UnknownResourceError(name)
    return spec


def require_id(resource: str, body: Mapping[str, Any]) -> Any:
    row_id = body.get("id")
    if row_id is None or (isinstance(row_id, str) and not row_id.strip()):
        raise MissingIdentifierError(resource)
    return row_id


def coerce_payload(spec: ResourceSpec, body: Mapping[str, Any]) -> Record:
    """Numeric form fields arrive as text from forms; store them as numbers."""
    if not isinstance(body, Mapping):
        raise InvalidPayloadError("Request body must be a JSON object.")
    payload = dict(body)
    for name, nullable in spec.numeric_fields.items():
        if name not in payload:
            continue
        value = payload[name]
        if nullable and (value is None or value == ""):
            payload[name] = None
        else:
            payload[name] = to_number(value)
    return payload


class Backend(Protocol):
    read_only: bool

    def list(self, resource: str) -> List[Record]: ...

    def create(self, resource: str, body: Mapping[str, Any]) -> Record: ...

    def update(self, resource: str, body: Mapping[str, Any]) -> Record: ...

    def delete(self, resource: str, body: Mapping[str, Any]) -> Record: ...


class SpreadsheetBackend:
    """Read-only records derived from the workbooks on every request."""

    read_only = True

    def __init__(self, cache: Optional[WorkbookCache] = None, settings: Optional[Settings] = None):
        self.cache = get_workbook_cache() if cache is None else cache
        self.settings = get_settings() if settings is None else settings

    def list(self, resource: str) -> List[Record]:
        spec = get_resource(resource)
        return [asdict(record) for record in spec.loader(self.cache, self.settings)]

    def _read_only(self, resource: str) -> Record:
        get_resource(resource)
        raise UnsupportedOperationError(f"{resource} is read-only in spreadsheet mode.")

    def create(self, resource: str, body: Mapping[str, Any]) -> Record:
        return self._read_only(resource)

    def update(self, resource: str, body: Mapping[str, Any]) -> Record:
        return self._read_only(resource)

    def delete(self, resource: str, body: Mapping[str, Any]) -> Record:
        return self._read_only(resource)


class DatabaseBackend:
    """Rows stored in one PostgreSQL table per resource."""

    read_only = False

    def __init__(self, client: Optional[DatabaseClient] = None, *, descending: bool = True):
        self.client = DatabaseClient() if client is None else client
        self.descending = descending

    def list(self, resource: str) -> List[Record]:
        spec = get_resource(resource)
        try:
            return self.client.list_rows(spec.table, spec.order_by, descending=self.descending)
        except psycopg.Error as exc:
            raise BackendError(f"Unable to load {resource}: {exc}") from exc

    def create(self, resource: str, body: Mapping[str, Any]) -> Record:
        spec = get_resource(resource)
        payload = coerce_payload(spec, body)
        try:
            return self.client.insert_row(spec.table, payload)
        except psycopg.Error as exc:
            raise BackendError(f"Unable to create {resource} record: {exc}") from exc

    def update(self, resource: str, body: Mapping[str, Any]) -> Record:
        spec = get_resource(resource)
        if not isinstance(body, Mapping):
            raise InvalidPayloadError("Request body must be a JSON object.")
        row_id = require_id(resource, body)
        payload = coerce_payload(spec, body)
        payload.pop("id", None)
        try:
            row = self.client.update_row(spec.table, row_id, payload)
        except psycopg.Error as exc:
            raise BackendError(f"Unable to update {resource} record: {exc}") from exc
        if row is None:
            raise RecordNotFoundError(resource, row_id)
        return row

    def delete(self, resource: str, body: Mapping[str, Any]) -> Record:
        spec = get_resource(resource)
        if not isinstance(body, Mapping):
            raise InvalidPayloadError("Request body must be a JSON object.")
        row_id = require_id(resource, body)
        try:
            row = self.client.delete_row(spec.table, row_id)
        except psycopg.Error as exc:
            raise BackendError(f"Unable to delete {resource} record: {exc}") from exc
        if row is None:
            raise RecordNotFoundError(resource, row_id)
        return row


def build_backend(settings: Optional[Settings] = None) -> Backend:
    settings = get_settings() if settings is None else settings
    if settings.data_backend == "database":
        logger.info("Using database backend at %s:%s/%s", settings.db_host, settings.db_port, settings.db_name)
        return DatabaseBackend(DatabaseClient(settings))
    logger.info("Using spreadsheet backend in %s", settings.data_dir)
    return SpreadsheetBackend(settings=settings)
