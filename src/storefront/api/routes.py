"""FastAPI routes for the Storefront domain: orders and payments."""

import json
import os

from fastapi import APIRouter, Header, HTTPException, Request
from protean.utils.globals import current_domain

from storefront.api.schemas import (
    ConfigureGatewayRequest,
    CreateOrderRequest,
    CreatePaymentRequest,
    GatewayConfigResponse,
    OrderPage,
    OrderResponse,
    PaymentInitiationResponse,
    PaymentPage,
    PaymentResponse,
    PaymentStatusResponse,
    ReconcilePaymentRequest,
    RefundPaymentRequest,
    RefundResponse,
    UpdateOrderStatusRequest,
    WebhookResponse,
)
from storefront.config import pagination
from storefront.errors import ThirdPartyError
from storefront.gateway import get_gateway
from storefront.gateway.fake_adapter import FakeGateway
from storefront.order.creation import CreateOrder
from storefront.order.queries import get_order, list_orders
from storefront.order.status import UpdateOrderStatus
from storefront.payment.initiation import InitiatePayment
from storefront.payment.queries import get_payment, list_payments
from storefront.payment.reconciliation import ReconcilePaymentStatus
from storefront.payment.refund import RequestRefund
from storefront.payment.webhook import ProcessGatewayWebhook

# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderResponse)
async def create_order(body: CreateOrderRequest) -> OrderResponse:
    """Check out the customer's cart into a new order."""
    command = CreateOrder(
        customer_id=body.customer_id,
        shipping_address=json.dumps(body.shipping_address.model_dump()),
    )
    order_id = current_domain.process(command, asynchronous=False)
    return OrderResponse.from_order(get_order(order_id))


@order_router.get("", response_model=OrderPage)
async def list_customer_orders(customer_id: str, page: int = 1, size: int | None = None) -> OrderPage:
    page, size = pagination(page, size)
    orders, total = list_orders(customer_id, page, size)
    return OrderPage(
        data=[OrderResponse.from_order(order) for order in orders],
        total=total,
        page=page,
        size=size,
    )


@order_router.get("/{order_id}", response_model=OrderResponse)
async def fetch_order(order_id: str) -> OrderResponse:
    return OrderResponse.from_order(get_order(order_id))


@order_router.put("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(order_id: str, body: UpdateOrderStatusRequest) -> OrderResponse:
    command = UpdateOrderStatus(order_id=order_id, status=body.status)
    current_domain.process(command, asynchronous=False)
    return OrderResponse.from_order(get_order(order_id))


# ---------------------------------------------------------------------------
# Payment Router
# ---------------------------------------------------------------------------
payment_router = APIRouter(prefix="/payments", tags=["payments"])


@payment_router.post("", status_code=201, response_model=PaymentInitiationResponse)
async def initiate_payment(body: CreatePaymentRequest) -> PaymentInitiationResponse:
    """Create a payment intent at the gateway and record it locally."""
    command = InitiatePayment(
        customer_id=body.customer_id,
        amount=body.amount,
        currency=body.currency,
        description=body.description,
        payment_method=body.payment_method,
        payment_method_token=body.payment_method_token,
        order_id=body.order_id,
    )
    result = current_domain.process(command, asynchronous=False)
    return PaymentInitiationResponse(
        payment_id=result.payment_id,
        client_secret=result.client_secret,
        status=result.status,
        message=result.message,
    )


@payment_router.post("/webhook", response_model=WebhookResponse)
async def process_webhook(request: Request, stripe_signature: str = Header(default="")) -> WebhookResponse:
    """Receive a gateway webhook. The raw body is verified against the ``Stripe-Signature`` header."""
    if not stripe_signature:
        raise ThirdPartyError("Missing Stripe-Signature header", operation="process_webhook")

    payload = (await request.body()).decode("utf-8")
    command = ProcessGatewayWebhook(raw_body=payload, signature=stripe_signature)
    outcome = current_domain.process(command, asynchronous=False)
    return WebhookResponse(outcome=outcome.value)


@payment_router.post("/gateway/configure", response_model=GatewayConfigResponse)
async def configure_gateway(body: ConfigureGatewayRequest) -> GatewayConfigResponse:
    """Configure the FakeGateway behavior (non-production only).

    This endpoint is only available when PROTEAN_ENV is not 'production'.
    It allows toggling success/failure behavior for manual API testing.
    """
    if os.environ.get("PROTEAN_ENV") == "production":
        raise HTTPException(status_code=403, detail="Gateway configuration not available in production")

    gateway = get_gateway()
    if not isinstance(gateway, FakeGateway):
        raise HTTPException(status_code=400, detail="Gateway configuration only available for FakeGateway")

    gateway.configure(
        should_succeed=body.should_succeed,
        failure_reason=body.failure_reason,
    )
    return GatewayConfigResponse(
        gateway=type(gateway).__name__,
        should_succeed=gateway.should_succeed,
        failure_reason=gateway.failure_reason,
    )


@payment_router.get("", response_model=PaymentPage)
async def list_customer_payments(customer_id: str, page: int = 1, size: int | None = None) -> PaymentPage:
    page, size = pagination(page, size)
    payments, total = list_payments(customer_id, page, size)
    return PaymentPage(
        data=[PaymentResponse.from_payment(payment) for payment in payments],
        total=total,
        page=page,
        size=size,
    )


@payment_router.get("/{payment_id}", response_model=PaymentResponse)
async def fetch_payment(payment_id: str) -> PaymentResponse:
    return PaymentResponse.from_payment(get_payment(payment_id))


@payment_router.put("/{payment_id}/status", response_model=PaymentStatusResponse)
async def reconcile_payment(payment_id: str, body: ReconcilePaymentRequest) -> PaymentStatusResponse:
    """Set a payment's status explicitly when a webhook was lost."""
    command = ReconcilePaymentStatus(payment_id=payment_id, status=body.status)
    status = current_domain.process(command, asynchronous=False)
    return PaymentStatusResponse(payment_id=payment_id, status=status)


@payment_router.post("/{payment_id}/refund", response_model=RefundResponse)
async def refund_payment(payment_id: str, body: RefundPaymentRequest | None = None) -> RefundResponse:
    command = RequestRefund(payment_id=payment_id, amount=body.amount if body else None)
    refund_id = current_domain.process(command, asynchronous=False)
    return RefundResponse(payment_id=payment_id, refund_id=refund_id)
