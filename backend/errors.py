"""
Aether Intel - Request-level error types

Failures that abort a whole request. Per-source and per-document failures are
never raised; they travel as values (see collector.FetchOutcome and
analysis_adapter.ParseResult).
"""


class ScanError(Exception):
    """Base for errors rendered as ``{"error": ..., "code": ...}``."""

    code = "SCAN_FAILED"
    status_code = 400
    message = "Scan failed"

    def __init__(self, message: str = None):
        super().__init__(message or self.message)
        if message:
            self.message = message

    def to_dict(self) -> dict:
        return {"error": self.message, "code": self.code}


class InvalidCompetitorId(ScanError):
    code = "INVALID_COMPETITOR_ID"
    status_code = 400
    message = "Valid competitor ID is required"


class CompetitorAccessDenied(ScanError):
    code = "COMPETITOR_ACCESS_DENIED"
    status_code = 403
    message = "Competitor not found or access denied"


class NoDataScraped(ScanError):
    code = "NO_DATA_SCRAPED"
    status_code = 400
    message = "No data could be scraped from competitor sources"


class NoHandlesProvided(ScanError):
    code = "NO_HANDLES_PROVIDED"
    status_code = 400
    message = "At least one social media handle must be provided"


class NoCommentsFound(ScanError):
    code = "NO_COMMENTS_FOUND"
    status_code = 400
    message = "No comments could be scraped from provided social media handles"


class AnalysisNotConfigured(ScanError):
    code = "ANALYSIS_NOT_CONFIGURED"
    status_code = 503
    message = "Analysis service is not configured"


class AnalysisFailed(ScanError):
    code = "ANALYSIS_FAILED"
    status_code = 502
    message = "Analysis service did not return a usable response"


# ============== API-level errors (same rendering) ==============

class AuthenticationRequired(ScanError):
    code = "AUTHENTICATION_REQUIRED"
    status_code = 401
    message = "Authentication required"


class UserIdNotAllowed(ScanError):
    code = "USER_ID_NOT_ALLOWED"
    status_code = 400
    message = "User ID cannot be provided in request body"


class MissingHandles(ScanError):
    code = "MISSING_HANDLES"
    status_code = 400
    message = "Social media handles are required"


class NotFound(ScanError):
    code = "NOT_FOUND"
    status_code = 404
    message = "Resource not found"


class InvalidField(ScanError):
    """Enum or required-field validation failure; the code names the field."""
    status_code = 400

    def __init__(self, code: str, message: str):
        self.code = code
        super().__init__(message)
