from enum import Enum


class ErrorCode(str, Enum):
    """Error kinds surfaced to the portal, each with its user-facing message."""

    INVALID_REQUEST = ('INVALID_REQUEST', 'Invalid payment request. Please check your details and try again.')
    INVALID_AMOUNT = ('INVALID_AMOUNT', 'Invalid payment amount. Please select a valid package.')
    INVALID_PHONE = ('INVALID_PHONE', 'Invalid phone number format. Please use format: +220XXXXXXX')
    INSUFFICIENT_FUNDS = ('INSUFFICIENT_FUNDS', 'Insufficient funds in your Wave account.')
    PAYMENT_FAILED = ('PAYMENT_FAILED', 'Payment could not be processed. Please try again.')
    SERVICE_UNAVAILABLE = ('SERVICE_UNAVAILABLE', 'Payment service is temporarily unavailable. Please try again later.')
    RATE_LIMIT_EXCEEDED = ('RATE_LIMIT_EXCEEDED', 'Too many requests. Please wait a moment before trying again.')
    UNAUTHORIZED = ('UNAUTHORIZED', 'Authentication failed. Please contact support.')
    FORBIDDEN = ('FORBIDDEN', 'Access denied. Please contact support.')
    NOT_FOUND = ('NOT_FOUND', 'Payment service not found. Please contact support.')
    TIMEOUT = ('TIMEOUT', 'Payment request timed out. Please try again.')
    DUPLICATE_REFERENCE = ('DUPLICATE_REFERENCE', 'This payment has already been initiated. Please wait or try a new payment.')
    INVALID_CURRENCY = ('INVALID_CURRENCY', 'Invalid currency. Only GMD (Gambian Dalasi) is supported.')
    AMOUNT_TOO_LOW = ('AMOUNT_TOO_LOW', 'Amount is below minimum. Minimum payment is D5.')
    AMOUNT_TOO_HIGH = ('AMOUNT_TOO_HIGH', 'Amount exceeds maximum limit.')
    WAVE_ERROR = ('WAVE_ERROR', 'Wave payment service error. Please try again later.')
    # Transport and local failures
    CONNECTION_ERROR = ('CONNECTION_ERROR', 'Unable to connect to payment service. Please try again later.')
    TIMEOUT_ERROR = ('TIMEOUT_ERROR', 'Payment request timed out. Please try again.')
    NETWORK_ERROR = ('NETWORK_ERROR', 'Network error. Please check your connection and try again.')
    INTERNAL_ERROR = ('INTERNAL_ERROR', 'An unexpected error occurred. Please try again.')
    PAYMENT_NOT_COMPLETED = ('PAYMENT_NOT_COMPLETED', 'Payment has not been completed yet')
    INVALID_SIGNATURE = ('INVALID_SIGNATURE', 'Invalid signature')

    def __new__(cls, value, message):
        member = str.__new__(cls, value)
        member._value_ = value
        member.message = message
        return member

    @classmethod
    def from_gateway(cls, code):
        """Map a gateway error code onto a known kind; unknown codes become PAYMENT_FAILED."""
        if not code:
            return cls.PAYMENT_FAILED
        try:
            return cls(str(code).upper())
        except ValueError:
            return cls.PAYMENT_FAILED


class PaymentError(Exception):
    """Base for every classified failure rendered to the portal."""

    default_status = 500

    def __init__(self, code, status_code=None, details=None, message=None):
        self.code = code
        self.status_code = status_code or self.default_status
        self.details = details
        self.message = message or code.message
        super().__init__(f'{code.value}: {details or self.message}')


class PaymentValidationError(PaymentError):
    default_status = 400


class GatewayError(PaymentError):
    """A failed exchange with the payment gateway."""


class PaymentNotCompleted(PaymentError):
    default_status = 402

    def __init__(self, payment_status=None):
        self.payment_status = payment_status
        super().__init__(ErrorCode.PAYMENT_NOT_COMPLETED, details=payment_status)


class InvalidTransition(Exception):
    """Raised when a transaction is asked to leave a terminal status."""

    def __init__(self, current, target):
        self.current = current
        self.target = target
        super().__init__(f'Cannot move transaction from {current.value} to {target.value}')
