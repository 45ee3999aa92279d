"""
Error taxonomy shared by the allocator, the renderers and the HTTP layer.

Core code raises these; main.py maps each kind to an HTTP status.
"""


class LabelServiceError(Exception):
    """Base class for every failure the service reports to callers."""

    kind = "internal"
    status_code = 500
    default_error_code = "INTERNAL_ERROR"

    def __init__(self, message: str, error_code: str | None = None, details: dict | None = None):
        self.error_code = error_code or self.default_error_code
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ValidationError(LabelServiceError):
    """Bad prefix, count out of bounds, empty code list, unknown profile."""

    kind = "validation"
    status_code = 400
    default_error_code = "VALIDATION_ERROR"


class ExhaustionError(LabelServiceError):
    """Requested numbers would overflow the fixed code width."""

    kind = "exhaustion"
    status_code = 409
    default_error_code = "CODE_SPACE_EXHAUSTED"


class PersistenceError(LabelServiceError):
    """Ledger unavailable or a constraint was violated; nothing was committed."""

    kind = "persistence"
    status_code = 500
    default_error_code = "PERSISTENCE_ERROR"


class RenderError(LabelServiceError):
    """QR encoding or PDF assembly failed; no document was produced."""

    kind = "render"
    status_code = 500
    default_error_code = "RENDER_ERROR"
