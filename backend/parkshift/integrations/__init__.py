"""Integration shortcuts."""

from .stripe_client import PaymentIntent, StripeClient, StripeClientError

__all__ = [
    "PaymentIntent",
    "StripeClient",
    "StripeClientError",
]
