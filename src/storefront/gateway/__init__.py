"""Payment gateway factory.

Provides get_gateway() / set_gateway() to swap implementations:
- StripeGateway when STRIPE_API_KEY is configured
- FakeGateway for development and testing otherwise
"""

from storefront.config import get_setting
from storefront.gateway.fake_adapter import FakeGateway
from storefront.gateway.port import PaymentGateway

_current_gateway: PaymentGateway | None = None


def _default_gateway() -> PaymentGateway:
    api_key = get_setting("STRIPE_API_KEY")
    if not api_key:
        return FakeGateway()

    from storefront.gateway.stripe_adapter import StripeGateway

    return StripeGateway(
        api_key=api_key,
        webhook_secret=get_setting("STRIPE_WEBHOOK_SECRET"),
        timeout=get_setting("GATEWAY_TIMEOUT_SECONDS"),
        max_network_retries=get_setting("GATEWAY_MAX_NETWORK_RETRIES"),
    )


def get_gateway() -> PaymentGateway:
    """Return the current payment gateway, building the configured default on first use."""
    global _current_gateway
    if _current_gateway is None:
        _current_gateway = _default_gateway()
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    """Override the active payment gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    """Reset to default gateway."""
    global _current_gateway
    _current_gateway = None
