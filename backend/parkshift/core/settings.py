"""Specialized settings adapters for integrations."""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel

from parkshift.core.config import get_settings


class PaymentSettings(BaseModel):
    """Slim view of payment-related configuration."""

    stripe_secret_key: str | None = None
    stripe_webhook_secret: str | None = None
    payments_webhook_verify: bool = True
    currency: str = "eur"
    platform_fee_percent: Decimal = Decimal("10")


def get_payment_settings() -> PaymentSettings:
    """Return payment-specific configuration."""

    settings = get_settings()
    return PaymentSettings(
        stripe_secret_key=settings.stripe_secret_key or None,
        stripe_webhook_secret=settings.stripe_webhook_secret or None,
        payments_webhook_verify=settings.payments_webhook_verify,
        currency=settings.payment_currency.lower(),
        platform_fee_percent=settings.platform_fee_percent,
    )
