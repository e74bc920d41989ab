"""
Error taxonomy for the query and generation pipeline.
Every error carries a short machine-checkable `reason` and the HTTP status
the API layer answers with.
"""


class QueryServiceError(Exception):
    """Base class for all pipeline errors."""

    reason = "query_service_error"
    status_code = 500

    def __init__(self, message: str = ""):
        super().__init__(message or self.reason)
        self.message = message or self.reason


# ── Safety gate ───────────────────────────────────────────────────────────────

class EmptyQuery(QueryServiceError):
    reason = "empty_query"
    status_code = 400


class NotReadOnly(QueryServiceError):
    reason = "not_read_only"
    status_code = 400


class EmptyPrompt(QueryServiceError):
    reason = "empty_prompt"
    status_code = 400


# ── Database layer ────────────────────────────────────────────────────────────

class ExecutionFailed(QueryServiceError):
    reason = "execution_failed"
    status_code = 400


class QueryTimeout(ExecutionFailed):
    reason = "query_timeout"
    status_code = 504


class ScanFailed(QueryServiceError):
    reason = "scan_failed"
    status_code = 500


class CursorFailed(QueryServiceError):
    reason = "cursor_failed"
    status_code = 500


# ── Schema cache ──────────────────────────────────────────────────────────────

class RefreshFailed(QueryServiceError):
    reason = "refresh_failed"
    status_code = 502


# ── Generation provider ───────────────────────────────────────────────────────

class GenerationUnavailable(QueryServiceError):
    reason = "generation_unavailable"
    status_code = 503


class GenerationTransportFailed(QueryServiceError):
    reason = "generation_transport_failed"
    status_code = 502


class GenerationTimeout(GenerationTransportFailed):
    reason = "generation_timeout"
    status_code = 504


class GenerationEmptyResponse(QueryServiceError):
    reason = "generation_empty_response"
    status_code = 502


class GeneratedQueryInvalid(QueryServiceError):
    """The model produced a query the safety gate rejected."""

    reason = "generated_query_invalid"
    status_code = 422


class GeneratedSuggestionsInvalid(QueryServiceError):
    reason = "generated_suggestions_invalid"
    status_code = 502
