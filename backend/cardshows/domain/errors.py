from __future__ import annotations


class ShowQueryError(Exception):
    code = "SHOW_QUERY_ERROR"
    http_status = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_response(self) -> dict:
        return {"error": self.message, "code": self.code}


class InvalidParameter(ShowQueryError):
    code = "INVALID_PARAMETER"
    http_status = 400


class PartialDataCorruption(ShowQueryError):
    """A stored show row that cannot be turned into a valid Show."""

    code = "PARTIAL_DATA_CORRUPTION"
    http_status = 500

    def __init__(self, show_id, message: str):
        super().__init__(message)
        self.show_id = show_id

    def to_annotation(self) -> dict:
        return {"id": self.show_id, "code": self.code, "error": self.message}


class UpstreamUnavailable(ShowQueryError):
    code = "UPSTREAM_UNAVAILABLE"
    http_status = 503


class NotFound(ShowQueryError):
    code = "NOT_FOUND"
    http_status = 404
