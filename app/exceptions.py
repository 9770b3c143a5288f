from typing import Any, Mapping, Optional


class AppError(Exception):
    """Base for errors the API layer knows how to render.

    Attributes:
        message: human-readable message
        details: optional mapping with extra context (field errors, validation info)
        code: optional machine-readable error code
        http_status: suggested HTTP status code for handlers
    """

    http_status = 500
    default_message = "Application error"
    default_code: Optional[str] = None

    def __init__(self, message: Optional[str] = None, details: Optional[Mapping[str, Any]] = None, code: Optional[str] = None):
        message = message or self.default_message
        super().__init__(message)
        self.message = message
        self.details = details
        self.code = code or self.default_code

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"message": self.message}
        if self.code:
            payload["code"] = self.code
        if self.details:
            payload["details"] = self.details
        return payload

    def __str__(self) -> str:
        return self.message


class ServiceValidationError(AppError):
    """Raised when input data is invalid or a precondition for a service call is not met."""

    http_status = 400
    default_message = "Invalid input"
    default_code = "SERVICE_VALIDATION_ERROR"


class InvalidDeliveryDateError(ServiceValidationError):
    """Start or end date is not a delivery day, is in the past, or end precedes start.

    Never corrected silently: the caller is expected to re-prompt.
    """

    default_message = "Invalid delivery date"
    default_code = "INVALID_DELIVERY_DATE"


class UnserviceableAddressError(ServiceValidationError):
    """Postal code is outside the serviceable area."""

    default_message = "We don't deliver to this postal code yet"
    default_code = "UNSERVICEABLE_ADDRESS"


class EmptySelectionError(ServiceValidationError):
    """No items selected on the days the plan delivers on."""

    default_message = "Select at least one item before continuing"
    default_code = "EMPTY_SELECTION"


class NotFoundError(AppError):
    """Raised when a requested resource was not found."""

    http_status = 404
    default_message = "Not found"
    default_code = "NOT_FOUND"


class ConflictError(AppError):
    """Raised when a request conflicts with the current state of a resource."""

    http_status = 409
    default_message = "Conflict"
    default_code = "CONFLICT"


class PlanStateError(ConflictError):
    """Transition requested from a stage that does not allow it."""

    default_message = "Plan is not in a state that allows this step"
    default_code = "INVALID_PLAN_STATE"


class PaymentFailedError(AppError):
    """Payment collaborator reported a failure. Nothing was persisted."""

    http_status = 402
    default_message = "Payment failed"
    default_code = "PAYMENT_FAILED"


class CheckoutInProgressError(ConflictError):
    """A checkout for this plan has already started or already took payment."""

    default_message = "Checkout is already in progress for this plan"
    default_code = "CHECKOUT_IN_PROGRESS"


class OrderNotRecordedError(AppError):
    """Payment was taken but the order could not be stored.

    details carries the payment reference so the charge can be reconciled.
    """

    http_status = 500
    default_message = "Payment received but the order could not be recorded"
    default_code = "ORDER_NOT_RECORDED"
