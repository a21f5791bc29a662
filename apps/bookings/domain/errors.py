"""Domain errors for bookings."""

from typing import Any, Dict, List, Optional

from shared.domain.errors import DomainError, ErrorCode


class BookingNotFoundError(DomainError):
    """Raised when a booking does not exist or belongs to another team."""

    http_status = 404

    def __init__(self, booking_id: Any) -> None:
        super().__init__(
            code=ErrorCode.BOOKING_NOT_FOUND,
            message="Booking not found or access denied",
        )
        self.booking_id = booking_id


class BookingAlreadyExistsError(DomainError):
    """Raised when the quote has already been turned into a booking."""

    http_status = 409

    def __init__(self, quote_id: Any) -> None:
        super().__init__(
            code=ErrorCode.BOOKING_ALREADY_EXISTS,
            message="Booking already exists for this quote",
        )
        self.quote_id = quote_id


class ComponentsUnavailableError(DomainError):
    """Raised when one or more quoted components cannot be supplied any more.

    ``report`` is the ``AvailabilityReport`` the decision was based on.
    """

    http_status = 409

    def __init__(self, report: Any) -> None:
        unavailable = list(report.unavailable_components)
        super().__init__(
            code=ErrorCode.COMPONENTS_UNAVAILABLE,
            message=f"Some components are no longer available: {', '.join(unavailable)}",
        )
        self.report = report
        self.unavailable_components: List[str] = unavailable

    def extra_payload(self) -> Dict[str, Any]:
        return {"unavailable_components": self.unavailable_components}


class BookingPersistenceError(DomainError):
    """Raised when a write of the booking transaction fails; ``stage`` names the step."""

    http_status = 500

    MESSAGES = {
        "booking": "Failed to create booking",
        "components": "Failed to create booking components",
        "payments": "Failed to create payment schedule",
        "travelers": "Failed to create traveler records",
        "quote": "Failed to update quote status",
    }

    def __init__(self, stage: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(
            code=ErrorCode.BOOKING_PERSISTENCE_FAILED,
            message=self.MESSAGES.get(stage, f"Failed to save {stage}"),
        )
        self.stage = stage
        self.cause = cause

    def extra_payload(self) -> Dict[str, Any]:
        return {"stage": self.stage}


class InvalidStatusTransitionError(DomainError):
    def __init__(self, current: str, target: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_STATUS_TRANSITION,
            message=f"Cannot change booking status from {current} to {target}",
        )
        self.current = current
        self.target = target


class UnknownBookingStatusError(DomainError):
    def __init__(self, status: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_STATUS_TRANSITION,
            message=f"Unknown booking status '{status}'",
        )
        self.status = status


class PaymentNotFoundError(DomainError):
    http_status = 404

    def __init__(self, booking_id: Any, payment_number: int) -> None:
        super().__init__(
            code=ErrorCode.PAYMENT_NOT_FOUND,
            message=f"Payment {payment_number} not found for this booking",
        )
        self.booking_id = booking_id
        self.payment_number = payment_number
