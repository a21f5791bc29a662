"""Domain errors for quotes."""

from shared.domain.errors import DomainError, ErrorCode


class QuoteNotFoundError(DomainError):
    """Raised when a quote does not exist or belongs to another team."""

    http_status = 404

    def __init__(self, quote_id) -> None:
        super().__init__(
            code=ErrorCode.QUOTE_NOT_FOUND,
            message="Quote not found or access denied",
        )
        self.quote_id = quote_id


class QuoteLockedError(DomainError):
    """Raised when trying to change the status of a confirmed quote."""

    http_status = 409

    def __init__(self, quote_id) -> None:
        super().__init__(
            code=ErrorCode.QUOTE_LOCKED,
            message="Confirmed quotes cannot change status",
        )
        self.quote_id = quote_id


class InvalidQuoteStatusError(DomainError):
    def __init__(self, status: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_QUOTE_STATUS,
            message=f"Quote status cannot be set to '{status}'",
        )
        self.status = status


class InvalidQuoteRevisionError(DomainError):
    def __init__(self, fields) -> None:
        super().__init__(
            code=ErrorCode.INVALID_QUOTE_REVISION,
            message=f"Fields cannot be revised: {', '.join(sorted(fields))}",
        )
        self.fields = sorted(fields)
