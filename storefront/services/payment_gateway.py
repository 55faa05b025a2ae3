"""Payment processor port and its Stripe adapter.

Checkout code talks to ``payments.gateway`` only; the app config decides
whether that is the real Stripe adapter or an injected stand-in
(``PAYMENT_GATEWAY``), so tests never reach the network.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

import stripe
import structlog
from flask import current_app

from ..errors import UpstreamError

logger = structlog.get_logger(__name__)

_EXT_KEY = "storefront.payments"


@dataclass(frozen=True)
class CheckoutSession:
    """What the processor reports about a hosted checkout session."""

    id: str
    url: str | None = None
    payment_status: str | None = None
    amount_total: int | None = None
    metadata: dict = field(default_factory=dict)


class PaymentGateway(ABC):
    @abstractmethod
    def create_discount(self, percent_off: int) -> str:
        """Create a one-time percentage coupon; return its processor id."""

    @abstractmethod
    def create_checkout_session(
        self,
        line_items: list[dict],
        success_url: str,
        cancel_url: str,
        metadata: dict,
        discounts: list[dict] | None = None,
    ) -> CheckoutSession:
        """Open a hosted payment session."""

    @abstractmethod
    def retrieve_session(self, session_id: str) -> CheckoutSession:
        """Fetch the current state of a session."""


class StripeGateway(PaymentGateway):
    def __init__(self, api_key: str | None):
        self.api_key = api_key

    def create_discount(self, percent_off: int) -> str:
        try:
            coupon = stripe.Coupon.create(
                api_key=self.api_key,
                percent_off=percent_off,
                duration="once",
            )
        except stripe.StripeError as e:
            raise UpstreamError("Payment processor error", str(e)) from e
        return coupon.id

    def create_checkout_session(self, line_items, success_url, cancel_url, metadata, discounts=None):
        try:
            session = stripe.checkout.Session.create(
                api_key=self.api_key,
                mode="payment",
                payment_method_types=["card"],
                line_items=line_items,
                success_url=success_url,
                cancel_url=cancel_url,
                discounts=discounts or [],
                metadata=metadata,
            )
        except stripe.StripeError as e:
            raise UpstreamError("Payment processor error", str(e)) from e
        return CheckoutSession(id=session.id, url=session.url)

    def retrieve_session(self, session_id):
        try:
            session = stripe.checkout.Session.retrieve(session_id, api_key=self.api_key)
        except stripe.StripeError as e:
            raise UpstreamError("Payment processor error", str(e)) from e
        metadata = dict(session.metadata) if session.metadata else {}
        return CheckoutSession(
            id=session.id,
            url=session.url,
            payment_status=session.payment_status,
            amount_total=session.amount_total,
            metadata=metadata,
        )


class Payments:
    """Flask extension holding the configured gateway."""

    def __init__(self, app=None):
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        gateway = app.config.get("PAYMENT_GATEWAY")
        if gateway is None:
            if not app.config.get("STRIPE_SECRET_KEY"):
                logger.warning("stripe_not_configured")
            gateway = StripeGateway(app.config.get("STRIPE_SECRET_KEY"))
        app.extensions[_EXT_KEY] = gateway

    @property
    def gateway(self) -> PaymentGateway:
        return current_app.extensions[_EXT_KEY]
