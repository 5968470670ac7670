"""Domain error codes for the storefront module.

Every failure reaches the caller as a code plus one user-safe message string.
"""

from dataclasses import dataclass
from enum import Enum

from storefront.domain.models import SaleWindowState


class ErrorCode(Enum):
    """Domain error codes."""

    EMPTY_CART = "EMPTY_CART"
    ITEM_NOT_FOUND = "ITEM_NOT_FOUND"
    INVALID_PHONE_NUMBER = "INVALID_PHONE_NUMBER"
    BLANK_PROMO_CODE = "BLANK_PROMO_CODE"
    PROMO_REJECTED = "PROMO_REJECTED"
    TIER_UNAVAILABLE = "TIER_UNAVAILABLE"
    DISPATCH_IN_PROGRESS = "DISPATCH_IN_PROGRESS"
    CART_LOCKED = "CART_LOCKED"
    PROVIDER_ERROR = "PROVIDER_ERROR"
    AUTHENTICATION_REQUIRED = "AUTHENTICATION_REQUIRED"
    INVALID_TOP_UP_AMOUNT = "INVALID_TOP_UP_AMOUNT"
    MISSING_PAYMENT_REFERENCE = "MISSING_PAYMENT_REFERENCE"
    API_ERROR = "API_ERROR"


@dataclass(eq=False)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class EmptyCartError(DomainError):
    """Raised when an order is built from a cart with no lines."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.EMPTY_CART,
            message="Your cart is empty",
        )


class ItemNotFoundError(DomainError):
    """Raised when a cart operation names an item absent from the catalog."""

    def __init__(self, item_id: str) -> None:
        super().__init__(
            code=ErrorCode.ITEM_NOT_FOUND,
            message="Item not found in catalog",
        )
        self.item_id = item_id


class InvalidPhoneNumberError(DomainError):
    """Raised when an M-Pesa phone number is missing or too short."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_PHONE_NUMBER,
            message="Please enter a valid phone number",
        )


class BlankPromoCodeError(DomainError):
    """Raised when an empty promo code is submitted."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.BLANK_PROMO_CODE,
            message="Please enter a promo code",
        )


class PromoRejectedError(DomainError):
    """Raised when the backend declares a promo code unusable."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            code=ErrorCode.PROMO_REJECTED,
            message=message or "Invalid promo code",
        )


class TierUnavailableError(DomainError):
    """Raised when a tier is outside its sale window or sold out."""

    def __init__(self, tier_id: str, state: SaleWindowState) -> None:
        super().__init__(
            code=ErrorCode.TIER_UNAVAILABLE,
            message=f"Tier is not on sale ({state.value.lower().replace('_', ' ')})",
        )
        self.tier_id = tier_id
        self.state = state


class DispatchInProgressError(DomainError):
    """Raised when a payment is already being dispatched for the order."""

    def __init__(self, order_id: str) -> None:
        super().__init__(
            code=ErrorCode.DISPATCH_IN_PROGRESS,
            message="A payment for this order is already in progress",
        )
        self.order_id = order_id


class CartLockedError(DomainError):
    """Raised when the cart is edited after its order was created."""

    def __init__(self, order_id: str) -> None:
        super().__init__(
            code=ErrorCode.CART_LOCKED,
            message="This order has already been placed and can no longer be changed",
        )
        self.order_id = order_id


class ProviderError(DomainError):
    """Raised when a payment provider response is unusable."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.PROVIDER_ERROR, message=message)


class AuthenticationRequiredError(DomainError):
    """Raised when an action needs a signed-in identity.

    ``resume_path`` is where the caller should return after signing in.
    """

    def __init__(self, resume_path: str) -> None:
        super().__init__(
            code=ErrorCode.AUTHENTICATION_REQUIRED,
            message="Please log in to continue",
        )
        self.resume_path = resume_path


class InvalidTopUpAmountError(DomainError):
    """Raised when a layaway top-up amount is not payable."""

    def __init__(self, message: str = "Please enter a valid amount") -> None:
        super().__init__(code=ErrorCode.INVALID_TOP_UP_AMOUNT, message=message)


class MissingPaymentReferenceError(DomainError):
    """Raised when a provider callback arrives without a reference."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.MISSING_PAYMENT_REFERENCE,
            message="No payment reference found",
        )


class ApiError(DomainError):
    """Raised when the upstream API fails; carries its message verbatim."""

    def __init__(self, message: str | None = None, status_code: int | None = None) -> None:
        super().__init__(
            code=ErrorCode.API_ERROR,
            message=message or "Request failed",
        )
        self.status_code = status_code
