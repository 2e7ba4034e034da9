class ReviewHubError(Exception):
    """Base error for the review pipeline."""


class AuthenticationError(ReviewHubError):
    """Raised when the upstream client-credentials exchange fails."""


class UpstreamUnavailableError(ReviewHubError):
    """Raised when an upstream endpoint is unreachable or answers with an error."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(ReviewHubError):
    """Raised when an identifier cannot be resolved to a record."""


class ValidationError(ReviewHubError):
    """Raised when inbound parameters are malformed."""


class StoreUnavailableError(ReviewHubError):
    """Raised when the approval store backend is unavailable or not configured."""
