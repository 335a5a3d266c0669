from __future__ import annotations


class AnalysisError(Exception):
    """Failure that ends an analysis request with a user-facing message."""

    status_code = 500

    def __init__(self, message: str, headers: dict[str, str] | None = None):
        super().__init__(message)
        self.message = message
        self.headers = headers or {}


class InvalidInput(AnalysisError, ValueError):
    status_code = 400


class ForbiddenTarget(AnalysisError):
    status_code = 400


class RateLimited(AnalysisError):
    status_code = 429


class MissingCredentials(AnalysisError):
    status_code = 500


class ValidationFailed(AnalysisError):
    status_code = 400


class UnexpectedError(AnalysisError):
    status_code = 500


class UpstreamFetchFailed(RuntimeError):
    """A single provider call failed. Stages degrade it to an empty result."""
