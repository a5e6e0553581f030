"""Stripe payment intents for the paid strategy session."""

from __future__ import annotations

import logging

import stripe

logger = logging.getLogger(__name__)

DEFAULT_AMOUNT = 19700  # R$ 197,00 in centavos
DEFAULT_CURRENCY = "brl"


class PaymentNotConfiguredError(Exception):
    """Raised when no Stripe secret key is available."""


class PaymentError(Exception):
    """Raised when the payment provider call fails."""


class PaymentService:
    """Create payment intents whose client secret is confirmed client-side."""

    def __init__(self, secret_key: str | None) -> None:
        self._secret_key = secret_key

    @property
    def configured(self) -> bool:
        return bool(self._secret_key)

    def create_payment_intent(self, amount: int = DEFAULT_AMOUNT, currency: str = DEFAULT_CURRENCY) -> str:
        """Return the client secret of a new payment intent."""

        if not self.configured:
            raise PaymentNotConfiguredError("Payment processing not configured. Please contact support.")
        try:
            intent = stripe.PaymentIntent.create(
                amount=int(round(amount)),
                currency=currency,
                metadata={"service": "strategy-session"},
                api_key=self._secret_key,
            )
        except stripe.StripeError as exc:
            logger.error(f"Stripe payment intent failed: {exc}", exc_info=True)
            raise PaymentError(str(exc)) from exc

        logger.info(f"Created payment intent {intent.id} for {amount} {currency}")
        return intent.client_secret
