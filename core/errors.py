from __future__ import annotations


class DashboardError(Exception):
    """Base class for failures surfaced to API callers."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UnknownResourceError(DashboardError):
    status_code = 404

    def __init__(self, resource: str):
        super().__init__(f"Unsupported resource: {resource}")
        self.resource = resource


class UnsupportedOperationError(DashboardError):
    status_code = 404


class MissingIdentifierError(DashboardError):
    status_code = 400

    def __init__(self, resource: str):
        super().__init__(f"Missing id for {resource} record.")
        self.resource = resource


class InvalidPayloadError(DashboardError):
    status_code = 400


class RecordNotFoundError(DashboardError):
    status_code = 404

    def __init__(self, resource: str, row_id: object):
        super().__init__(f"No {resource} record with id {row_id}.")
        self.resource = resource
        self.row_id = row_id


class BackendError(DashboardError):
    status_code = 500
