"""Errors raised while serving payment requests, mapped to HTTP statuses."""


class PaymentRequestError(Exception):
    """Base error carrying the HTTP status and client-facing message."""

    status = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class BadRequestError(PaymentRequestError):
    """Client input was missing or not acceptable."""

    status = 400


class MisconfiguredError(PaymentRequestError):
    """A required configuration value is not set."""

    status = 500


class WebhookVerificationError(Exception):
    """Webhook payload failed signature or format verification."""
